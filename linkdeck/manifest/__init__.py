"""Manifest data structures and helpers."""

from .models import Category, ChannelItem, Manifest, ManifestItem, ManifestObject, Site, VideoItem
from .store import (
    ManifestError,
    ManifestFormatError,
    ManifestNotFoundError,
    load_manifest,
    manifest_to_dict,
    parse_manifest,
    write_manifest,
)

__all__ = [
    "Category",
    "ChannelItem",
    "Manifest",
    "ManifestError",
    "ManifestFormatError",
    "ManifestItem",
    "ManifestNotFoundError",
    "ManifestObject",
    "Site",
    "VideoItem",
    "load_manifest",
    "manifest_to_dict",
    "parse_manifest",
    "write_manifest",
]
