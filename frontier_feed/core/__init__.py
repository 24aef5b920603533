"""
Core domain models and pure helpers.

This package contains data types and logic that is independent of any
network call: identities, topic extraction and deduplication.
"""

from .dedup import dedup_articles
from .identity import article_id, fingerprint
from .topics import DEFAULT_TOPIC, extract_topic
from .urls import is_well_formed_url
from .types import ArticleRecord, EnrichedArticle, ImageResult, NewsPage, VideoRef

__all__ = [
    "ArticleRecord",
    "EnrichedArticle",
    "ImageResult",
    "NewsPage",
    "VideoRef",
    "article_id",
    "fingerprint",
    "DEFAULT_TOPIC",
    "extract_topic",
    "dedup_articles",
    "is_well_formed_url",
]
