"""
Core data types for the content core.

This module defines the fundamental data structures used throughout the pipeline:
- ArticleRecord: Raw article as returned by the news provider
- ImageResult / VideoRef: Results from the image and video providers
- NewsPage: One page of news provider results
- EnrichedArticle: Article with topic, display image, optional video and id
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class ArticleRecord:
    """Represents a raw article from the news provider.

    Fallback articles use exactly the same type, so downstream code cannot
    tell them apart structurally.

    Attributes:
        title: The article headline (never empty)
        description: Short description or excerpt
        author: Author name
        source_name: Publication name (e.g., "Reuters")
        published_at: ISO 8601 publication timestamp
        url: Canonical URL of the original article
        image_url: Image URL supplied by the provider
        content: Truncated body text supplied by the provider
    """
    title: str
    description: str | None = None
    author: str | None = None
    source_name: str | None = None
    published_at: str | None = None
    url: str | None = None
    image_url: str | None = None
    content: str | None = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("ArticleRecord.title must be non-empty")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ImageResult:
    """A single image search result.

    Attributes:
        url: Display URL of the image
        attribution_name: Photographer or owner name, if provided
    """
    url: str
    attribution_name: str | None = None


@dataclass(frozen=True)
class VideoRef:
    """Reference to a related video.

    Attributes:
        video_id: Provider video identifier
        title: Video title
        channel_title: Channel that published the video
        thumbnail_url: Thumbnail image URL
        published_at: ISO 8601 publication timestamp
    """
    video_id: str
    title: str = ""
    channel_title: str | None = None
    thumbnail_url: str | None = None
    published_at: str | None = None

    @property
    def watch_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


@dataclass(frozen=True)
class NewsPage:
    """One page of articles from the news provider.

    Attributes:
        articles: Parsed articles, in provider order
        total_results: Total number of matches reported by the provider
    """
    articles: tuple[ArticleRecord, ...] = ()
    total_results: int = 0


@dataclass
class EnrichedArticle:
    """Article with derived display fields.

    Created per render request and discarded after use.

    Attributes:
        article: The original ArticleRecord
        topic: Derived search phrase used for image/video lookups
        image: Resolved display image URL (never empty)
        id: Stable article identifier derived from URL or title
        video: Related video, absent when not requested or not found
    """
    article: ArticleRecord
    topic: str
    image: str
    id: str
    video: VideoRef | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a single mapping for rendering collaborators."""
        payload = self.article.to_dict()
        payload.update({"id": self.id, "topic": self.topic, "image": self.image})
        if self.video is not None:
            payload["video"] = asdict(self.video)
        return payload
