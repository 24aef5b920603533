"""
Fallback content for when real provider data is unavailable.

Fallback helpers live here:
- generate_fallback_articles: a small deterministic set of synthetic
  ArticleRecords standing in for a failed primary news call
- fallback_url: the site-relative URL each synthetic article links to
- fallback_image: a static image keyed by topic, used by enrichment when
  the image provider cannot supply one
"""

from __future__ import annotations

from datetime import datetime, timezone
import hashlib
import re
from typing import Callable

from .core.types import ArticleRecord
from .providers.news import REGION_QUERIES

SITE_NAME = "The Financial Frontier"

DEFAULT_IMAGE = "https://images.unsplash.com/photo-1611974789855-9c2a0a7236a3?w=800"

FALLBACK_IMAGES = (
    DEFAULT_IMAGE,
    "https://images.unsplash.com/photo-1590283603385-17ffb3a7f29f?w=800",
    "https://images.unsplash.com/photo-1460925895917-afdab827c52f?w=800",
    "https://images.unsplash.com/photo-1526304640581-d334cdbbf45e?w=800",
)

Now = Callable[[], datetime]

_SLUG_JUNK = re.compile(r"[^a-z0-9]+")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def fallback_url(title: str) -> str:
    """Site-relative URL for a synthetic article, derived from its title."""
    slug = _SLUG_JUNK.sub("-", title.lower()).strip("-")
    return f"/fallback/{slug}"


def fallback_image(topic: str) -> str:
    """Return a static image for a topic; the same topic always maps to the same image."""
    digest = hashlib.sha256((topic or "").encode("utf-8")).digest()
    return FALLBACK_IMAGES[digest[0] % len(FALLBACK_IMAGES)]


def generate_fallback_articles(subject: str, now: Now = _utc_now) -> list[ArticleRecord]:
    """Build synthetic articles for a category or region.

    Regions produce two records, categories three. Every record has a
    non-empty title, a site-relative URL under /fallback/, the current
    timestamp and a default image, so it satisfies the same required
    fields as a real article and its id is stable across generations.

    Args:
        subject: Category name (e.g., "business") or region name
        now: Clock used for the published timestamp

    Returns:
        Two or three ArticleRecords
    """
    key = (subject or "").strip().lower() or "business"
    label = key.replace("-", " ").replace("_", " ").title()
    published_at = now().isoformat().replace("+00:00", "Z")

    def record(title: str, description: str, author: str, index: int) -> ArticleRecord:
        return ArticleRecord(
            title=title,
            description=description,
            author=author,
            source_name=SITE_NAME,
            published_at=published_at,
            url=fallback_url(title),
            image_url=FALLBACK_IMAGES[index % len(FALLBACK_IMAGES)],
            content=description,
        )

    if key in REGION_QUERIES:
        return [
            record(
                f"{label} Markets Update",
                f"Latest financial news from {label}",
                "Regional Correspondent",
                0,
            ),
            record(
                f"Economic Outlook for {label}",
                "Analysis of current economic conditions",
                "Financial Analyst",
                1,
            ),
        ]

    return [
        record(
            f"{label} Headlines Update",
            f"The latest {key} stories are loading. Check back shortly.",
            "Staff Writer",
            0,
        ),
        record(
            f"{label} Outlook This Week",
            f"What to watch in {key} over the coming days.",
            "Financial Analyst",
            1,
        ),
        record(
            f"{label} Briefing",
            f"A short round-up of {key} developments.",
            "Editorial Team",
            2,
        ),
    ]
