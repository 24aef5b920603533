"""
Page-level orchestration for the content core.

Each loader issues the provider lookups a page needs through one shared
ContentService, enriches the resulting articles and reports statistics
for the load. Loaders:
- load_front_page: category headlines fetched concurrently, merged and deduplicated
- load_category_page / load_search_page / load_source_page: one news lookup each
- load_region_page: regional news plus a region video strip
- load_related_articles: articles sharing the topic of a given article
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import time
from typing import Iterable

from rich.console import Console

from .core.dedup import dedup_articles
from .core.topics import extract_topic
from .core.types import ArticleRecord, EnrichedArticle, VideoRef
from .enrichment import EnrichmentPipeline
from .fetch.errors import FetchFailure
from .logging_utils import get_logger, log_event
from .providers import normalize_region
from .service import ContentService, NewsResult

REGION_VIDEO_QUERIES = {
    "australia": "Australia finance market economy ASX news",
    "africa": "Africa finance market economy investment news",
    "americas": "Americas finance market economy USA news",
    "asia": "Asia finance market economy China Japan news",
    "europe": "Europe finance market economy ECB UK news",
}

REGION_VIDEO_COUNT = 4
RELATED_LIMIT = 3
RELATED_SEARCH_SIZE = 5

logger = get_logger("runner")


@dataclass
class FetchStats:
    """Statistics collected during one page load.

    Attributes:
        lookups: Logical lookups issued through the service
        cache_hits: Lookups answered from the cache
        joined: Lookups that joined an in-flight fetch
        network_calls: Provider calls actually sent
        fallbacks: News lookups answered with fallback content
        articles: Articles on the page after deduplication
        duration_seconds: Wall time of the load
    """
    lookups: int = 0
    cache_hits: int = 0
    joined: int = 0
    network_calls: int = 0
    fallbacks: int = 0
    articles: int = 0
    duration_seconds: float = 0.0


@dataclass
class PageResult:
    """Enriched articles for one page plus what went wrong loading them.

    Attributes:
        articles: Enriched articles in display order
        failures: Failures that were replaced by fallback content
        videos: Video strip (region page only)
        stats: Statistics for the load
    """
    articles: list[EnrichedArticle]
    failures: list[FetchFailure] = field(default_factory=list)
    videos: list[VideoRef] = field(default_factory=list)
    stats: FetchStats = field(default_factory=FetchStats)

    @property
    def is_fallback(self) -> bool:
        return bool(self.failures)


class _StatsTracker:
    def __init__(self, service: ContentService):
        self.service = service
        self.before = service.stats.snapshot()
        self.started = time.perf_counter()

    def finish(self, article_count: int) -> FetchStats:
        after = self.service.stats.snapshot()
        delta = {key: after[key] - self.before.get(key, 0) for key in after}
        return FetchStats(
            lookups=delta["lookups"],
            cache_hits=delta["cache_hits"],
            joined=delta["joined"],
            network_calls=delta["network_calls"],
            fallbacks=delta["fallbacks"],
            articles=article_count,
            duration_seconds=time.perf_counter() - self.started,
        )


async def load_front_page(
    service: ContentService,
    pipeline: EnrichmentPipeline,
    categories: Iterable[str] | None = None,
    page_size: int | None = None,
    include_video: bool | None = None,
) -> PageResult:
    """Load the front page from several categories at once.

    Category lookups run concurrently; their results are merged in
    category order, deduplicated, then enriched.

    Raises:
        ConfigurationError: If the news provider rejects the credentials
    """
    cfg = service.cfg
    categories = list(categories or cfg.news.front_page_categories)
    tracker = _StatsTracker(service)

    results = await asyncio.gather(
        *(service.get_top_headlines(category, page_size) for category in categories)
    )
    merged = [article for result in results for article in result.articles]
    if cfg.dedup.enabled:
        merged = dedup_articles(merged, cfg.dedup.title_similarity_threshold)

    page = await _build_page(pipeline, merged, results, tracker, include_video)
    log_event(
        logger,
        "Front page loaded",
        event="page_loaded",
        page="front",
        categories=categories,
        **page.stats.__dict__,
    )
    return page


async def load_category_page(
    service: ContentService,
    pipeline: EnrichmentPipeline,
    category: str | None = None,
    page_size: int | None = None,
    include_video: bool | None = None,
) -> PageResult:
    tracker = _StatsTracker(service)
    result = await service.get_top_headlines(category, page_size)
    return await _build_page(pipeline, result.articles, [result], tracker, include_video)


async def load_search_page(
    service: ContentService,
    pipeline: EnrichmentPipeline,
    query: str,
    page_size: int | None = None,
    page: int = 1,
    include_video: bool | None = None,
) -> PageResult:
    tracker = _StatsTracker(service)
    result = await service.search_articles(query, page_size, page)
    return await _build_page(pipeline, result.articles, [result], tracker, include_video)


async def load_source_page(
    service: ContentService,
    pipeline: EnrichmentPipeline,
    source: str,
    page_size: int | None = None,
    include_video: bool | None = None,
) -> PageResult:
    tracker = _StatsTracker(service)
    result = await service.get_articles_by_source(source, page_size)
    return await _build_page(pipeline, result.articles, [result], tracker, include_video)


async def load_region_page(
    service: ContentService,
    pipeline: EnrichmentPipeline,
    region: str,
    page_size: int | None = None,
    page: int = 1,
    include_video: bool | None = None,
) -> PageResult:
    """Load regional news and the region's video strip concurrently.

    A failed video lookup leaves the strip empty; the news part falls back
    like every other primary lookup.

    Raises:
        ValueError: If region is not a supported region
        ConfigurationError: If the news provider rejects the credentials
    """
    region = normalize_region(region)
    tracker = _StatsTracker(service)
    result, videos = await asyncio.gather(
        service.get_regional_news(region, page_size, page),
        _region_videos(service, region),
    )
    page_result = await _build_page(pipeline, result.articles, [result], tracker, include_video)
    page_result.videos = videos
    log_event(
        logger,
        "Region page loaded",
        event="page_loaded",
        page="region",
        region=region,
        videos=len(videos),
        **page_result.stats.__dict__,
    )
    return page_result


async def load_related_articles(
    service: ContentService,
    pipeline: EnrichmentPipeline,
    article: ArticleRecord,
    limit: int = RELATED_LIMIT,
) -> list[EnrichedArticle]:
    """Find articles on the same topic as `article`, excluding itself.

    Returns an empty list when the search falls back; synthetic articles
    are never offered as related reading.
    """
    topic = extract_topic(article.title)
    result = await service.search_articles(topic, page_size=RELATED_SEARCH_SIZE)
    if result.is_fallback:
        return []
    candidates = [
        candidate
        for candidate in result.articles
        if not (article.url and candidate.url == article.url)
    ][:limit]
    return await pipeline.enrich_many(candidates)


async def _region_videos(service: ContentService, region: str) -> list[VideoRef]:
    query = REGION_VIDEO_QUERIES.get(region, "finance news")
    try:
        return await service.search_videos(query, max_results=REGION_VIDEO_COUNT)
    except FetchFailure as exc:
        log_event(
            logger,
            "Region videos unavailable",
            level=logging.WARNING,
            event="video_strip_empty",
            region=region,
            error_category=exc.kind,
        )
        return []


async def _build_page(
    pipeline: EnrichmentPipeline,
    articles: list[ArticleRecord],
    results: list[NewsResult],
    tracker: _StatsTracker,
    include_video: bool | None,
) -> PageResult:
    enriched = await pipeline.enrich_many(articles, include_video)
    failures = [result.failure for result in results if result.failure is not None]
    return PageResult(articles=enriched, failures=failures, stats=tracker.finish(len(enriched)))


def render_fetch_stats(stats: FetchStats, console: Console) -> None:
    """Display page load statistics to the console."""
    console.print(
        "[bold]Fetch summary[/bold]: "
        f"articles={stats.articles}, lookups={stats.lookups}, "
        f"network={stats.network_calls}, cache_hits={stats.cache_hits}, "
        f"joined={stats.joined}, fallbacks={stats.fallbacks}, "
        f"time={stats.duration_seconds:.2f}s"
    )
