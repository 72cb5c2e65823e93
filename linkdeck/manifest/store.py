"""Load and persist the catalog manifest."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import Manifest


class ManifestError(RuntimeError):
    """Base class for manifest loading failures."""


class ManifestNotFoundError(ManifestError):
    """Raised when the manifest file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Manifest not found at {path}")
        self.path = path


class ManifestFormatError(ManifestError, ValueError):
    """Raised when the manifest is not valid JSON or its root is not an object."""


def parse_manifest(text: str) -> Manifest:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestFormatError(f"Failed to parse JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestFormatError("Manifest root must be a JSON object.")
    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestFormatError(f"Manifest validation failed: {exc}") from exc


def load_manifest(path: Path) -> Manifest:
    """Read and validate the manifest at ``path``."""
    if not path.exists():
        raise ManifestNotFoundError(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestFormatError(f"Unable to read manifest {path}: {exc}") from exc
    return parse_manifest(text)


def manifest_to_dict(manifest: Manifest) -> dict[str, Any]:
    """Serialize only the keys present in the source document or assigned since.

    Keys keep their source order and new keys follow them. Values that did not
    fit the model are written back as they were read.
    """
    return manifest.to_document()


def write_manifest(manifest: Manifest, path: Path) -> Path:
    """Write the manifest as pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(manifest_to_dict(manifest), handle, ensure_ascii=False, indent=2)
        handle.write("\n")
    return path
