"""URL helpers shared by the catalog renderer and the channel resolver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs, quote, urlsplit

THUMBNAIL_TEMPLATE = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
PLAYLIST_EMBED_TEMPLATE = "https://www.youtube.com/embed?listType=playlist&list={playlist_id}"
CHANNEL_ID_PREFIX = "UC"
UPLOADS_PREFIX = "UU"


class InvalidChannelUrlError(ValueError):
    """Raised when a channel URL is not an absolute http(s) URL."""


class ChannelRefKind(str, Enum):
    """How a channel URL identifies its channel."""

    CHANNEL_ID = "id"
    USERNAME = "username"
    HANDLE = "handle"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ChannelRef:
    """Classified channel URL."""

    url: str
    kind: ChannelRefKind
    value: str | None
    path: str
    hostname: str

    @property
    def search_query(self) -> str:
        """Query used for the generic search fallback."""
        return self.path or self.hostname


def video_id(url: str | None) -> str | None:
    """Extract a video id from ``watch?v=``, ``youtu.be`` and ``/shorts/`` URLs."""
    if not url:
        return None
    try:
        parts = urlsplit(url)
        hostname = parts.hostname or ""
    except ValueError:
        return None
    if "youtube.com" in hostname:
        values = parse_qs(parts.query).get("v")
        if values and values[0]:
            return values[0]
        if parts.path.startswith("/shorts/"):
            return parts.path.split("/")[-1] or None
        # channel and playlist URLs have no single video id
        return None
    if hostname == "youtu.be":
        return parts.path[1:] or None
    return None


def thumbnail_url(video: str) -> str:
    """Return the preview image URL for a video id."""
    return THUMBNAIL_TEMPLATE.format(video_id=quote(video, safe=""))


def preview_image(url: str | None) -> str | None:
    identifier = video_id(url)
    return thumbnail_url(identifier) if identifier else None


def normalize_url(url: str) -> str:
    """Reduce a URL to origin plus path, without trailing slashes, query or fragment."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url.rstrip("/")
    if not parts.scheme or not parts.netloc:
        return url.rstrip("/")
    origin = f"{parts.scheme.lower()}://{parts.netloc.lower()}"
    return origin + parts.path.rstrip("/")


def site_name_from_path(path: str) -> str | None:
    """Return ``<name>`` from a ``/sites/<name>/...`` path."""
    segments = [segment for segment in path.split("/") if segment]
    try:
        index = segments.index("sites")
    except ValueError:
        return None
    if len(segments) > index + 1:
        return segments[index + 1]
    return None


def classify_channel_url(url: str) -> ChannelRef:
    """Classify a channel URL as an explicit id, legacy username or handle."""
    try:
        parts = urlsplit(url.strip())
    except ValueError as exc:
        raise InvalidChannelUrlError(f"Invalid channel URL: {url}") from exc
    if parts.scheme not in {"http", "https"} or not parts.hostname:
        raise InvalidChannelUrlError(f"Invalid channel URL: {url}")

    path = parts.path.rstrip("/")
    segments = [segment for segment in path.split("/") if segment]

    kind = ChannelRefKind.UNKNOWN
    value: str | None = None
    if len(segments) >= 2 and segments[0] == "channel":
        kind, value = ChannelRefKind.CHANNEL_ID, segments[1]
    elif len(segments) >= 2 and segments[0] == "user":
        kind, value = ChannelRefKind.USERNAME, segments[1]
    elif segments and segments[0].startswith("@") and len(segments[0]) > 1:
        kind, value = ChannelRefKind.HANDLE, segments[0][1:]

    return ChannelRef(url=url, kind=kind, value=value, path=path, hostname=parts.hostname)


def uploads_playlist_id(channel_id: str | None) -> str | None:
    """Derive the auto-generated uploads list id (``UU...``) from a ``UC...`` channel id."""
    if not channel_id or not channel_id.startswith(CHANNEL_ID_PREFIX):
        return None
    return UPLOADS_PREFIX + channel_id[len(CHANNEL_ID_PREFIX):]


def embed_url(playlist_id: str) -> str:
    return PLAYLIST_EMBED_TEMPLATE.format(playlist_id=playlist_id)
