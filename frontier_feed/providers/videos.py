"""Video provider (YouTube Data API search)."""

from __future__ import annotations

from typing import Any

from ..core.types import VideoRef
from ..endpoints import Endpoints, ProxyEndpoints
from .base import (
    Provider,
    ProviderKind,
    ProviderRequest,
    clean_params,
    optional_str,
    require_list,
    require_mapping,
)

_THUMBNAIL_SIZES = ("high", "medium", "default")


class VideoProvider(Provider):
    """Video search by keyword.

    Operations:
        search: params q, maxResults -> list[VideoRef]
    """

    kind = ProviderKind.VIDEOS
    proxy_service = "youtube"
    operations = ("search",)

    def build_request(
        self, endpoints: Endpoints, operation: str, params: dict[str, Any]
    ) -> ProviderRequest:
        self._check_operation(operation)
        search = {
            "q": params.get("q") or "finance news",
            "part": "snippet",
            "type": "video",
            "maxResults": params.get("maxResults", 5),
        }
        if isinstance(endpoints, ProxyEndpoints):
            return self._proxy_request(endpoints, search)

        endpoint = self._direct(endpoints)
        search = clean_params(search)
        if endpoint.credential:
            search["key"] = endpoint.credential
        return ProviderRequest(url=endpoint.base_url + "/youtube/v3/search", params=search)

    def parse_response(self, operation: str, data: Any) -> list[VideoRef]:
        self._check_operation(operation)
        payload = require_mapping(data, "video response")
        videos = []
        for item in require_list(payload, "items", "video response"):
            video = _parse_video(item)
            if video is not None:
                videos.append(video)
        return videos


def _parse_video(item: Any) -> VideoRef | None:
    """Accept both the raw API shape and an already flattened item."""
    if not isinstance(item, dict):
        return None
    raw_id = item.get("id")
    video_id = raw_id.get("videoId") if isinstance(raw_id, dict) else None
    video_id = optional_str(video_id or item.get("videoId"))
    if not video_id:
        return None

    snippet = item.get("snippet") if isinstance(item.get("snippet"), dict) else item
    return VideoRef(
        video_id=video_id,
        title=optional_str(snippet.get("title")) or "",
        channel_title=optional_str(snippet.get("channelTitle")),
        thumbnail_url=_thumbnail(snippet),
        published_at=optional_str(snippet.get("publishedAt")),
    )


def _thumbnail(snippet: dict[str, Any]) -> str | None:
    direct = optional_str(snippet.get("thumbnailUrl"))
    if direct:
        return direct
    thumbnails = snippet.get("thumbnails")
    if not isinstance(thumbnails, dict):
        return None
    for size in _THUMBNAIL_SIZES:
        entry = thumbnails.get(size)
        if isinstance(entry, dict) and entry.get("url"):
            return optional_str(entry["url"])
    return None
