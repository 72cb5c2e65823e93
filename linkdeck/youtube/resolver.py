"""Resolve a channel's canonical id and uploads list id."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from ..urls import ChannelRef, ChannelRefKind, classify_channel_url, uploads_playlist_id
from .api import YOUTUBE_API_BASE, ChannelLookupError, YouTubeDataClient

logger = logging.getLogger(__name__)

CHANNEL_ID_PATTERNS = (
    re.compile(r'"channelId"\s*:\s*"(UC[^"]+)"'),
    re.compile(r'"externalId"\s*:\s*"(UC[^"]+)"'),
)
THUMBNAIL_PREFERENCE = ("high", "medium", "default")


@dataclass(slots=True)
class ChannelInfo:
    """Whatever could be learned about a channel; every field may be missing."""

    channel_id: str | None = None
    title: str | None = None
    thumbnails: dict[str, Any] = field(default_factory=dict)
    uploads_playlist: str | None = None
    source: str | None = None

    @property
    def avatar_url(self) -> str | None:
        return best_thumbnail(self.thumbnails)

    @property
    def resolved(self) -> bool:
        return bool(self.channel_id or self.uploads_playlist)


def best_thumbnail(thumbnails: dict[str, Any] | None) -> str | None:
    """Return the highest-resolution thumbnail URL available."""
    if not thumbnails:
        return None
    for key in THUMBNAIL_PREFERENCE:
        entry = thumbnails.get(key)
        if isinstance(entry, dict) and entry.get("url"):
            return str(entry["url"])
    return None


def _first_item(payload: dict[str, Any] | None) -> dict[str, Any] | None:
    if not payload:
        return None
    items = payload.get("items")
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _search_hit_channel_id(payload: dict[str, Any]) -> str | None:
    item = _first_item(payload)
    if item is None:
        return None
    identifier = item.get("id")
    if isinstance(identifier, dict):
        return identifier.get("channelId")
    return None


def _search_then_fetch(client: YouTubeDataClient, query: str) -> tuple[dict[str, Any] | None, str | None]:
    channel_id = _search_hit_channel_id(client.search_channel(query))
    if not channel_id:
        return None, None
    return client.channel_by_id(channel_id), channel_id


def resolve_via_api(client: YouTubeDataClient, ref: ChannelRef) -> ChannelInfo | None:
    """Resolve a channel through the Data API.

    Lookups go by explicit id, then legacy username, then handle search, and
    finally a generic search on the URL path. Returns ``None`` when none of them
    produced a channel; ``ChannelLookupError`` propagates.
    """
    payload: dict[str, Any] | None = None
    searched_id: str | None = None

    if ref.kind is ChannelRefKind.CHANNEL_ID and ref.value:
        payload = client.channel_by_id(ref.value)
    elif ref.kind is ChannelRefKind.USERNAME and ref.value:
        payload = client.channel_by_username(ref.value)
        if _first_item(payload) is None:
            payload = None

    if payload is None and ref.kind is ChannelRefKind.HANDLE and ref.value:
        payload, searched_id = _search_then_fetch(client, ref.value)

    if payload is None:
        payload, found = _search_then_fetch(client, ref.search_query)
        searched_id = found or searched_id

    item = _first_item(payload)
    if item is None:
        return None

    snippet = item.get("snippet") or {}
    details = item.get("contentDetails") or {}
    related = details.get("relatedPlaylists") or {}
    info = ChannelInfo(
        channel_id=item.get("id") or searched_id,
        title=snippet.get("title"),
        thumbnails=snippet.get("thumbnails") or {},
        uploads_playlist=related.get("uploads"),
        source="api",
    )
    logger.info("Resolved via API: channelId=%s title=%s", info.channel_id, info.title)
    return info


def extract_channel_id(html: str) -> str | None:
    """Find a ``channelId``/``externalId`` literal in channel page markup."""
    for pattern in CHANNEL_ID_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def scrape_channel_page(
    session: requests.Session,
    url: str,
    *,
    user_agent: str,
    timeout: float,
) -> ChannelInfo:
    """Fetch channel page markup and derive the channel and uploads ids from it."""
    try:
        response = session.get(url, headers={"User-Agent": user_agent}, timeout=timeout)
    except requests.RequestException as exc:
        raise ChannelLookupError(f"Failed to fetch channel URL: {exc}") from exc
    if not response.ok:
        raise ChannelLookupError(f"Failed to fetch channel URL: {response.status_code} {response.reason}")

    channel_id = extract_channel_id(response.text)
    if channel_id is None:
        raise ChannelLookupError("Could not find channelId in channel page HTML. The page layout may have changed.")
    logger.info("Found channelId in HTML: %s", channel_id)
    return ChannelInfo(
        channel_id=channel_id,
        uploads_playlist=uploads_playlist_id(channel_id),
        source="html",
    )


@dataclass(slots=True)
class ChannelResolver:
    """Run the API lookup (when keyed) and the HTML fallback in order."""

    api_key: Optional[str] = None
    api_base: str = YOUTUBE_API_BASE
    timeout: float = 15.0
    user_agent: str = "linkdeck-channel-resolver"
    session: requests.Session = field(default_factory=requests.Session)
    errors: list[str] = field(default_factory=list)

    def resolve(self, channel_url: str) -> ChannelInfo:
        ref = classify_channel_url(channel_url)
        info = ChannelInfo()

        if self.api_key:
            client = YouTubeDataClient(
                self.api_key,
                base_url=self.api_base,
                timeout=self.timeout,
                session=self.session,
            )
            try:
                found = resolve_via_api(client, ref)
            except ChannelLookupError as exc:
                logger.warning("YouTube Data API error: %s. Falling back to HTML scraping.", exc)
                self.errors.append(str(exc))
            else:
                if found is None:
                    logger.warning("YouTube Data API did not return a channel. Falling back to HTML scraping.")
                else:
                    info = found

        if not info.uploads_playlist:
            try:
                scraped = scrape_channel_page(
                    self.session,
                    channel_url,
                    user_agent=self.user_agent,
                    timeout=self.timeout,
                )
            except ChannelLookupError as exc:
                logger.error("%s", exc)
                self.errors.append(str(exc))
            else:
                info.uploads_playlist = scraped.uploads_playlist
                if not info.channel_id:
                    info.channel_id = scraped.channel_id
                if info.source is None:
                    info.source = scraped.source

        return info
