"""
Article enrichment: topic, image, optional video and a stable id.

Enrichment never fails because of a provider. Image and video lookups
that fail or come back empty degrade to a static fallback image or to
no video at all, and the article is still returned.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from .config import EnrichmentConfig
from .core.identity import article_id
from .core.topics import extract_topic
from .core.types import ArticleRecord, EnrichedArticle, VideoRef
from .core.urls import is_well_formed_url
from .fallback import fallback_image
from .fetch.errors import FetchFailure
from .logging_utils import get_logger, log_event
from .service import ContentService


class EnrichmentPipeline:
    """Turns ArticleRecords into display-ready EnrichedArticles."""

    def __init__(
        self,
        service: ContentService,
        cfg: EnrichmentConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        self.service = service
        self.cfg = cfg or service.cfg.enrichment
        self.logger = logger or get_logger("enrichment")

    async def enrich(
        self, article: ArticleRecord, include_video: bool | None = None
    ) -> EnrichedArticle:
        """Enrich a single article.

        Args:
            article: Article to enrich
            include_video: Attach a related video; defaults to cfg.include_video

        Returns:
            EnrichedArticle with topic, image and id always populated
        """
        if include_video is None:
            include_video = self.cfg.include_video

        topic = extract_topic(article.title)
        image, image_source = await self._resolve_image(article, topic)
        video = await self._resolve_video(topic) if include_video else None
        return EnrichedArticle(
            article=article,
            topic=topic,
            image=image,
            id=article_id(article),
            video=video,
            meta={"image_source": image_source},
        )

    async def enrich_many(
        self, articles: Iterable[ArticleRecord], include_video: bool | None = None
    ) -> list[EnrichedArticle]:
        """Enrich articles concurrently, preserving input order."""
        semaphore = asyncio.Semaphore(max(1, self.cfg.concurrency))

        async def _enrich_one(article: ArticleRecord) -> EnrichedArticle:
            async with semaphore:
                return await self.enrich(article, include_video)

        tasks = [asyncio.create_task(_enrich_one(article)) for article in articles]
        return list(await asyncio.gather(*tasks))

    async def _resolve_image(self, article: ArticleRecord, topic: str) -> tuple[str, str]:
        if is_well_formed_url(article.image_url):
            return article.image_url, "article"

        try:
            if self.cfg.image_source == "redirect":
                return await self.service.get_random_image(topic), "redirect"
            results = await self.service.search_images(topic)
            return results[0].url, "search"
        except FetchFailure as exc:
            log_event(
                self.logger,
                "Image lookup failed; using fallback image",
                level=logging.DEBUG,
                event="image_fallback",
                topic=topic,
                error_category=exc.kind,
            )
        return fallback_image(topic), "fallback"

    async def _resolve_video(self, topic: str) -> VideoRef | None:
        try:
            videos = await self.service.search_videos(topic, max_results=1)
        except FetchFailure as exc:
            log_event(
                self.logger,
                "Video lookup failed; omitting video",
                level=logging.DEBUG,
                event="video_omitted",
                topic=topic,
                error_category=exc.kind,
            )
            return None
        return videos[0]
