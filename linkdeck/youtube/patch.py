"""Apply resolved channel details to the manifest."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..manifest import Category, ChannelItem, Manifest
from ..urls import embed_url, normalize_url
from .resolver import ChannelInfo


class PatchStatus(str, Enum):
    UPDATED = "updated"
    APPENDED = "appended"
    UNCHANGED = "unchanged"

    @property
    def changed(self) -> bool:
        return self is not PatchStatus.UNCHANGED


@dataclass(frozen=True, slots=True)
class PatchOptions:
    """Defaults for items the resolver creates or matches heuristically."""

    default_site: str = "harisatif"
    default_title: str = "ProGamer channel"
    default_category_id: str = "channels"
    default_category_title: str = "Channels"
    title_marker: str | None = "progamer"


@dataclass(frozen=True, slots=True)
class PatchOutcome:
    status: PatchStatus
    item: ChannelItem
    category_id: str
    matched_by: str | None = None


def find_channel_item(
    manifest: Manifest,
    channel_url: str,
    *,
    title_marker: str | None = None,
) -> tuple[Category, ChannelItem, str] | None:
    """Locate the channel item for ``channel_url``.

    The first channel item whose normalized URL matches wins; otherwise the
    first channel item whose title contains ``title_marker`` (case-insensitive).
    """
    wanted = normalize_url(channel_url)
    for category, item in manifest.iter_items():
        if isinstance(item, ChannelItem) and item.url and normalize_url(item.url) == wanted:
            return category, item, "url"

    if title_marker:
        marker = title_marker.lower()
        for category, item in manifest.iter_items():
            if isinstance(item, ChannelItem) and item.title and marker in item.title.lower():
                return category, item, "title"
    return None


def _assign(item: ChannelItem, field_name: str, value: Any) -> bool:
    if value is None or getattr(item, field_name) == value:
        return False
    setattr(item, field_name, value)
    return True


def update_channel_item(item: ChannelItem, info: ChannelInfo) -> bool:
    """Copy resolved fields onto ``item``; returns whether anything changed."""
    changed = _assign(item, "title", info.title)
    changed = _assign(item, "avatar_url", info.avatar_url) or changed
    if info.uploads_playlist:
        changed = _assign(item, "playlist", info.uploads_playlist) or changed
        changed = _assign(item, "embed_url", embed_url(info.uploads_playlist)) or changed
    return changed


def new_channel_item(channel_url: str, info: ChannelInfo, options: PatchOptions) -> ChannelItem:
    fields: dict[str, Any] = {
        "title": info.title or options.default_title,
        "url": channel_url,
        "embed": False,
        "type": "channel",
        "site": options.default_site,
    }
    if info.avatar_url:
        fields["avatarUrl"] = info.avatar_url
    if info.uploads_playlist:
        fields["playlist"] = info.uploads_playlist
        fields["embedUrl"] = embed_url(info.uploads_playlist)
    return ChannelItem(**fields)


def apply_channel(
    manifest: Manifest,
    channel_url: str,
    info: ChannelInfo,
    options: PatchOptions | None = None,
) -> PatchOutcome:
    """Update the matching channel item or append a new one to the first category."""
    opts = options or PatchOptions()
    found = find_channel_item(manifest, channel_url, title_marker=opts.title_marker)
    if found is not None:
        category, item, matched_by = found
        status = PatchStatus.UPDATED if update_channel_item(item, info) else PatchStatus.UNCHANGED
        return PatchOutcome(status=status, item=item, category_id=category.id, matched_by=matched_by)

    if not manifest.categories:
        manifest.categories = [
            Category(id=opts.default_category_id, title=opts.default_category_title, items=[]),
        ]
    target = manifest.categories[0]
    item = new_channel_item(channel_url, info, opts)
    # assignment (not append) marks "items" as set for exclude_unset dumps
    target.items = [*target.items, item]
    return PatchOutcome(status=PatchStatus.APPENDED, item=item, category_id=target.id)
