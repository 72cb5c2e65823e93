"""Thin client for the YouTube Data API v3 channel endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
CHANNEL_PARTS = "snippet,contentDetails"
API_HEADERS = {"Accept": "application/json"}


class ChannelLookupError(RuntimeError):
    """Raised when a remote channel lookup fails (non-success status or transport error)."""


class YouTubeDataClient:
    """Query channels by id, legacy username, or free-text search."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = YOUTUBE_API_BASE,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must be provided")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def channel_by_id(self, channel_id: str) -> dict[str, Any]:
        return self._get("channels", {"part": CHANNEL_PARTS, "id": channel_id}, "channels by id")

    def channel_by_username(self, username: str) -> dict[str, Any]:
        return self._get(
            "channels",
            {"part": CHANNEL_PARTS, "forUsername": username},
            "channels by username",
        )

    def search_channel(self, query: str) -> dict[str, Any]:
        return self._get(
            "search",
            {"part": "snippet", "type": "channel", "q": query, "maxResults": 1},
            "search",
        )

    def _get(self, endpoint: str, params: dict[str, Any], label: str) -> dict[str, Any]:
        query = dict(params)
        query["key"] = self.api_key
        try:
            response = self.session.get(
                f"{self.base_url}/{endpoint}",
                params=query,
                headers=API_HEADERS,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ChannelLookupError(f"API {label} request failed: {exc}") from exc
        if not response.ok:
            raise ChannelLookupError(f"API {label} request failed: {response.status_code} {response.reason}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise ChannelLookupError(f"API {label} returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ChannelLookupError(f"API {label} returned an unexpected payload")
        logger.debug("API %s returned %d item(s)", label, len(payload.get("items") or []))
        return payload
