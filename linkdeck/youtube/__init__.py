"""Channel resolution against the YouTube Data API and channel pages."""

from .api import ChannelLookupError, YouTubeDataClient
from .patch import PatchOptions, PatchOutcome, PatchStatus, apply_channel, find_channel_item
from .resolver import ChannelInfo, ChannelResolver, best_thumbnail, extract_channel_id, resolve_via_api

__all__ = [
    "ChannelInfo",
    "ChannelLookupError",
    "ChannelResolver",
    "PatchOptions",
    "PatchOutcome",
    "PatchStatus",
    "YouTubeDataClient",
    "apply_channel",
    "best_thumbnail",
    "extract_channel_id",
    "find_channel_item",
    "resolve_via_api",
]
