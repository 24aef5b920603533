"""
Content service: the single stateful entry point for provider data.

One ContentService is built per process or session and passed to every
caller. It owns the response cache, the in-flight request registry, the
shared HTTP client and the resolved endpoints. Every lookup follows the
same path:

    check cache -> hit: done
                -> miss: join an in-flight fetch for the same fingerprint,
                   or start one -> success: store in cache, done
                                -> failure: fallback (news) or raise (images/videos)

Only successful, non-empty results are cached. News lookups never raise
provider failures to the caller; they return fallback articles together
with the failure. ConfigurationError is the exception: it is always raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any, Awaitable, Callable

import httpx

from .config import AppConfig
from .core.identity import fingerprint
from .core.types import ArticleRecord, ImageResult, NewsPage, VideoRef
from .endpoints import Endpoints, resolve_endpoints
from .fallback import generate_fallback_articles
from .fetch.cache import MISS, CacheStore
from .fetch.errors import ConfigurationError, FetchFailure, HttpFailure, NotFoundFailure
from .fetch.fetcher import fetch_json
from .fetch.inflight import RequestDeduplicator
from .logging_utils import get_logger, log_event
from .providers import ProviderKind, get_provider, normalize_region


@dataclass
class NewsResult:
    """Outcome of a primary news lookup.

    Attributes:
        articles: Real articles, or fallback articles when failure is set
        total_results: Total matches reported by the provider
        failure: The classified failure that triggered the fallback, if any
    """
    articles: list[ArticleRecord]
    total_results: int
    failure: FetchFailure | None = None

    @property
    def is_fallback(self) -> bool:
        return self.failure is not None


@dataclass
class ServiceStats:
    """Counters for cache and network behavior.

    Attributes:
        lookups: Logical lookups issued
        cache_hits: Lookups answered from the cache
        joined: Lookups that joined an in-flight fetch
        network_calls: Provider calls actually sent
        failures: Provider calls that failed
        fallbacks: News lookups answered with fallback content
    """
    lookups: int = 0
    cache_hits: int = 0
    joined: int = 0
    network_calls: int = 0
    failures: int = 0
    fallbacks: int = 0

    def snapshot(self) -> dict[str, int]:
        return dict(self.__dict__)


@dataclass
class _Lookup:
    key: str
    kind: ProviderKind
    operation: str
    params: dict[str, Any] = field(default_factory=dict)


class ContentService:
    """Caching, deduplicating, timeout-bounded access to all providers."""

    def __init__(
        self,
        cfg: AppConfig,
        endpoints: Endpoints | None = None,
        client: httpx.AsyncClient | None = None,
        cache: CacheStore | None = None,
        inflight: RequestDeduplicator | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cfg = cfg
        self.endpoints = endpoints if endpoints is not None else resolve_endpoints(cfg)
        self.cache = cache if cache is not None else CacheStore(cfg.cache.ttl_seconds, clock=clock)
        self.inflight = inflight if inflight is not None else RequestDeduplicator()
        self.logger = logger or get_logger("service")
        self.stats = ServiceStats()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.cfg.fetch.timeout_seconds,
                trust_env=self.cfg.fetch.trust_env,
                headers={"User-Agent": self.cfg.fetch.user_agent, "Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ContentService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def clear(self) -> None:
        """Drop every cached value and in-flight registration.

        Fetches already running still answer their callers, but their
        results are not stored.
        """
        self.cache.clear()
        self.inflight.clear()
        log_event(self.logger, "Cache cleared", event="cache_cleared")

    # News (primary content, falls back instead of failing)

    async def get_top_headlines(
        self, category: str | None = None, page_size: int | None = None
    ) -> NewsResult:
        """Top headlines for a category."""
        category = (category or self.cfg.news.default_category).strip().lower()
        page_size = page_size or self.cfg.news.page_size
        lookup = _Lookup(
            key=fingerprint("headlines", category, page_size),
            kind=ProviderKind.NEWS,
            operation="top_headlines",
            params={"category": category, "pageSize": page_size},
        )
        return await self._news(lookup, fallback_subject=category)

    async def search_articles(
        self, query: str, page_size: int | None = None, page: int = 1
    ) -> NewsResult:
        """Free-text article search, newest first."""
        query = query.strip()
        page_size = page_size or self.cfg.news.page_size
        lookup = _Lookup(
            key=fingerprint("search", query, page_size, page),
            kind=ProviderKind.NEWS,
            operation="everything",
            params={
                "q": query,
                "pageSize": page_size,
                "page": page,
                "sortBy": self.cfg.news.sort_by,
                "language": self.cfg.news.language,
            },
        )
        return await self._news(lookup, fallback_subject=query)

    async def get_articles_by_source(self, source: str, page_size: int | None = None) -> NewsResult:
        """Latest articles from one publication (provider source id)."""
        source = source.strip()
        page_size = page_size or self.cfg.news.page_size
        lookup = _Lookup(
            key=fingerprint("source", source, page_size),
            kind=ProviderKind.NEWS,
            operation="everything",
            params={"sources": source, "pageSize": page_size},
        )
        return await self._news(lookup, fallback_subject=source)

    async def get_regional_news(
        self, region: str, page_size: int | None = None, page: int = 1
    ) -> NewsResult:
        """Regional finance news.

        Raises:
            ValueError: If region is not one of the supported regions
        """
        region = normalize_region(region)
        page_size = page_size or self.cfg.news.page_size
        lookup = _Lookup(
            key=fingerprint("regional", region, page_size, page),
            kind=ProviderKind.NEWS,
            operation="regional",
            params={
                "region": region,
                "pageSize": page_size,
                "page": page,
                "sortBy": self.cfg.news.sort_by,
                "language": self.cfg.news.language,
            },
        )
        return await self._news(lookup, fallback_subject=region)

    # Images and videos (secondary content, failures raised to the caller)

    async def search_images(self, query: str, page: int = 1, per_page: int = 1) -> list[ImageResult]:
        """Image search results for a query.

        Raises:
            FetchFailure: On provider failure, or NotFoundFailure when empty
        """
        lookup = _Lookup(
            key=fingerprint("images", query, page, per_page),
            kind=ProviderKind.IMAGES,
            operation="search",
            params={"query": query, "page": page, "per_page": per_page, "orientation": "landscape"},
        )
        return list(await self._lookup(lookup, self._fetch_non_empty))

    async def get_random_image(self, query: str) -> str:
        """Resolve one representative image URL for a query.

        Raises:
            FetchFailure: On provider failure or an unusable redirect target
        """
        lookup = _Lookup(
            key=fingerprint("random_image", query),
            kind=ProviderKind.IMAGES,
            operation="random",
            params={"query": query},
        )
        return await self._lookup(lookup, self._fetch)

    async def search_videos(self, query: str, max_results: int = 5) -> list[VideoRef]:
        """Video search results for a query.

        Raises:
            FetchFailure: On provider failure, or NotFoundFailure when empty
        """
        lookup = _Lookup(
            key=fingerprint("videos", query, max_results),
            kind=ProviderKind.VIDEOS,
            operation="search",
            params={"q": query, "maxResults": max_results},
        )
        return list(await self._lookup(lookup, self._fetch_non_empty))

    # Internals

    async def _news(self, lookup: _Lookup, fallback_subject: str) -> NewsResult:
        try:
            page: NewsPage = await self._lookup(lookup, self._fetch_news)
        except ConfigurationError as exc:
            log_event(
                self.logger,
                "Provider configuration error",
                level=logging.ERROR,
                event="configuration_error",
                key=lookup.key,
                error=str(exc),
            )
            raise
        except FetchFailure as failure:
            self.stats.fallbacks += 1
            articles = generate_fallback_articles(fallback_subject)
            log_event(
                self.logger,
                "Using fallback content",
                level=logging.WARNING,
                event="fallback",
                key=lookup.key,
                error_category=failure.kind,
                error=str(failure),
                count=len(articles),
            )
            return NewsResult(articles=articles, total_results=len(articles), failure=failure)
        return NewsResult(articles=list(page.articles), total_results=page.total_results)

    async def _lookup(
        self, lookup: _Lookup, fetcher: Callable[[_Lookup], Awaitable[Any]]
    ) -> Any:
        self.stats.lookups += 1
        cached = self.cache.get(lookup.key)
        if cached is not MISS:
            self.stats.cache_hits += 1
            log_event(self.logger, "Cache hit", level=logging.DEBUG, event="cache_hit", key=lookup.key)
            return cached

        if self.inflight.is_in_flight(lookup.key):
            self.stats.joined += 1
            log_event(
                self.logger, "Joined in-flight request", level=logging.DEBUG,
                event="inflight_join", key=lookup.key,
            )

        generation = self.cache.generation

        async def produce() -> Any:
            value = await fetcher(lookup)
            if not self.cache.set_if_current(lookup.key, value, generation):
                log_event(
                    self.logger, "Discarded result fetched before refresh", level=logging.DEBUG,
                    event="stale_result", key=lookup.key,
                )
            return value

        return await self.inflight.run(lookup.key, produce)

    async def _fetch(self, lookup: _Lookup) -> Any:
        provider = get_provider(lookup.kind)
        request = provider.build_request(self.endpoints, lookup.operation, lookup.params)
        self.stats.network_calls += 1
        log_event(
            self.logger, "Fetch start", level=logging.DEBUG, event="fetch_start",
            key=lookup.key, provider=lookup.kind.value, mode=self.endpoints.mode,
        )
        result = await fetch_json(
            self.client,
            request.url,
            timeout=self.cfg.fetch.timeout_seconds,
            method=request.method,
            params=request.params or None,
            json_body=request.json_body,
            expect_json=request.expect_json,
        )
        try:
            return provider.parse_response(lookup.operation, result.unwrap())
        except FetchFailure as failure:
            if failure.url is None:
                failure.url = request.url
            self.stats.failures += 1
            log_event(
                self.logger,
                "Fetch failed",
                level=logging.WARNING,
                event="fetch_failed",
                key=lookup.key,
                provider=lookup.kind.value,
                status_code=result.status_code,
                error_category=failure.kind,
                error=str(failure),
            )
            raise

    async def _fetch_non_empty(self, lookup: _Lookup) -> tuple[Any, ...]:
        items = tuple(await self._fetch(lookup))
        if not items:
            raise NotFoundFailure(f"No {lookup.kind.value} results for {lookup.key}")
        return items

    async def _fetch_news(self, lookup: _Lookup) -> NewsPage:
        try:
            page = await self._fetch(lookup)
        except HttpFailure as exc:
            if exc.status in (401, 403):
                raise ConfigurationError(
                    f"News provider rejected the credentials (HTTP {exc.status}). "
                    "Check NEWS_KEY or the proxy configuration, then retry."
                ) from exc
            raise
        if not page.articles:
            raise NotFoundFailure(f"No articles for {lookup.key}")
        return page
