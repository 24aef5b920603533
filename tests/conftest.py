"""Shared fixtures: an in-process stand-in for the provider APIs."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

import httpx
import pytest

from frontier_feed.config import AppConfig
from frontier_feed.endpoints import resolve_endpoints
from frontier_feed.service import ContentService

TEST_ENV = {"NEWS_KEY": "news-key", "UNSPLASH_KEY": "unsplash-key", "YOUTUBE_KEY": "youtube-key"}

NEWS_TOP = "/v2/top-headlines"
NEWS_EVERYTHING = "/v2/everything"
IMAGE_SEARCH = "/search/photos"
VIDEO_SEARCH = "/youtube/v3/search"


def news_payload(*titles: str, total: int | None = None, image: bool = False) -> dict[str, Any]:
    articles = []
    for index, title in enumerate(titles):
        slug = "-".join(title.lower().split())
        articles.append(
            {
                "source": {"id": None, "name": "Reuters"},
                "author": "Staff",
                "title": title,
                "description": f"About {title}",
                "url": f"https://news.example.com/{slug}",
                "urlToImage": f"https://img.example.com/{index}.jpg" if image else None,
                "publishedAt": "2024-05-01T10:00:00Z",
                "content": "Body",
            }
        )
    return {"status": "ok", "totalResults": len(titles) if total is None else total, "articles": articles}


def image_payload(*urls: str) -> dict[str, Any]:
    return {
        "results": [
            {"urls": {"regular": url, "small": url + "?small"}, "user": {"name": "Photographer"}}
            for url in urls
        ]
    }


def video_payload(*video_ids: str) -> dict[str, Any]:
    return {
        "items": [
            {
                "id": {"kind": "youtube#video", "videoId": video_id},
                "snippet": {
                    "title": f"Video {video_id}",
                    "channelTitle": "Markets TV",
                    "publishedAt": "2024-05-01T09:00:00Z",
                    "thumbnails": {"high": {"url": f"https://i.ytimg.com/vi/{video_id}/hq.jpg"}},
                },
            }
            for video_id in video_ids
        ]
    }


class FakeProviders:
    """Routes requests by URL path and records every request it receives."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self._routes: dict[str, Callable[[httpx.Request], Any]] = {}

    def route(
        self,
        path: str,
        json: Any = None,
        status: int = 200,
        text: str | None = None,
        delay: float = 0.0,
        handler: Callable[[httpx.Request], Any] | None = None,
    ) -> None:
        async def respond(request: httpx.Request) -> httpx.Response:
            if delay:
                await asyncio.sleep(delay)
            if handler is not None:
                response = handler(request)
                if inspect.isawaitable(response):
                    response = await response
                return response
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json)

        self._routes[path] = respond

    def count(self, path: str | None = None) -> int:
        if path is None:
            return len(self.calls)
        return sum(1 for request in self.calls if request.url.path == path)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        respond = self._routes.get(request.url.path)
        if respond is None:
            return httpx.Response(404, text=f"no route for {request.url.path}")
        return await respond(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake() -> FakeProviders:
    return FakeProviders()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_service(fake, clock):
    def _make(cfg: AppConfig | None = None, host: str = "localhost") -> ContentService:
        cfg = cfg or AppConfig()
        cfg.logging.console = False
        endpoints = resolve_endpoints(cfg, host=host, env=TEST_ENV)
        return ContentService(cfg, endpoints=endpoints, client=fake.client(), clock=clock)

    return _make
