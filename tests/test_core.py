"""Tests for topics, identities, deduplication and fallback content."""

from __future__ import annotations

from datetime import datetime, timezone
import re

import pytest

from frontier_feed.core import (
    ArticleRecord,
    EnrichedArticle,
    VideoRef,
    article_id,
    dedup_articles,
    extract_topic,
    fingerprint,
    is_well_formed_url,
)
from frontier_feed.fallback import (
    FALLBACK_IMAGES,
    SITE_NAME,
    fallback_image,
    fallback_url,
    generate_fallback_articles,
)

ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16}$")


def _fixed_now():
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Federal Reserve Raises Interest Rates Again", "federal reserve raises"),
        ("ECB Holds Rates Steady Amid Inflation", "holds rates steady"),
        ("Stock Market Rally: Tech Leads!", "rally tech leads"),
        ("Is it up?", "finance"),
        ("", "finance"),
    ],
)
def test_extract_topic(title, expected):
    assert extract_topic(title) == expected


def test_article_id_is_stable_and_url_safe():
    article = ArticleRecord(title="Fed holds", url="https://news.example.com/fed-holds")

    first = article_id(article)

    assert first == article_id(ArticleRecord(title="Other title", url="https://news.example.com/fed-holds"))
    assert ID_PATTERN.match(first)


def test_article_id_differs_by_url_and_falls_back_to_title():
    a = ArticleRecord(title="Same", url="https://news.example.com/a")
    b = ArticleRecord(title="Same", url="https://news.example.com/b")
    untitled = ArticleRecord(title="Only a title")

    assert article_id(a) != article_id(b)
    assert article_id(untitled) == article_id(ArticleRecord(title="Only a title"))
    assert ID_PATTERN.match(article_id(untitled))


def test_fingerprint_is_deterministic_and_ordered():
    assert fingerprint("headlines", "business", 3) == 'headlines:["business",3]'
    assert fingerprint("search", "a", 20, 1) != fingerprint("search", "a", 1, 20)


def test_article_record_requires_title():
    with pytest.raises(ValueError):
        ArticleRecord(title="   ")


def test_enriched_article_to_dict_flattens_fields():
    article = ArticleRecord(title="Gold climbs", url="https://news.example.com/gold", source_name="Reuters")
    enriched = EnrichedArticle(
        article=article,
        topic="gold climbs",
        image="https://img.example.com/gold.jpg",
        id=article_id(article),
        video=VideoRef(video_id="xyz", title="Gold explained"),
    )

    payload = enriched.to_dict()

    assert payload["title"] == "Gold climbs"
    assert payload["source_name"] == "Reuters"
    assert payload["topic"] == "gold climbs"
    assert payload["video"]["video_id"] == "xyz"
    assert enriched.video.watch_url == "https://www.youtube.com/watch?v=xyz"


def test_is_well_formed_url():
    assert is_well_formed_url("https://img.example.com/a.jpg")
    assert not is_well_formed_url("ftp://img.example.com/a.jpg")
    assert not is_well_formed_url("/relative/path.jpg")
    assert not is_well_formed_url(None)


def test_dedup_articles_drops_repeated_urls_and_near_identical_titles():
    articles = [
        ArticleRecord(title="Oil prices jump after OPEC cut", url="https://a.example.com/1"),
        ArticleRecord(title="Completely different story", url="https://a.example.com/1"),
        ArticleRecord(title="Oil prices jump after OPEC cuts", url="https://b.example.com/2"),
        ArticleRecord(title="Tech shares slide", url="https://c.example.com/3"),
    ]

    kept = dedup_articles(articles, threshold=92)

    assert [a.title for a in kept] == ["Oil prices jump after OPEC cut", "Tech shares slide"]


def test_fallback_for_region_has_two_complete_records():
    records = generate_fallback_articles("europe", now=_fixed_now)

    assert [r.title for r in records] == ["Europe Markets Update", "Economic Outlook for Europe"]
    assert [r.author for r in records] == ["Regional Correspondent", "Financial Analyst"]
    for record in records:
        assert record.source_name == SITE_NAME
        assert record.published_at == "2024-05-01T12:00:00Z"
        assert record.image_url in FALLBACK_IMAGES


def test_fallback_for_category_has_three_records_with_distinct_ids():
    records = generate_fallback_articles("technology", now=_fixed_now)

    assert len(records) == 3
    assert all(r.title.startswith("Technology") for r in records)
    assert len({article_id(r) for r in records}) == 3


def test_fallback_records_carry_stable_site_relative_urls():
    morning = generate_fallback_articles("business", now=_fixed_now)
    evening = generate_fallback_articles("business", now=lambda: datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc))

    assert [r.url for r in morning] == [
        "/fallback/business-headlines-update",
        "/fallback/business-outlook-this-week",
        "/fallback/business-briefing",
    ]
    assert [r.url for r in evening] == [r.url for r in morning]
    assert [article_id(r) for r in evening] == [article_id(r) for r in morning]
    assert fallback_url("Economic Outlook for Middle-East") == "/fallback/economic-outlook-for-middle-east"


def test_fallback_is_deterministic_apart_from_timestamp():
    assert generate_fallback_articles("asia", now=_fixed_now) == generate_fallback_articles("asia", now=_fixed_now)


def test_fallback_image_is_stable_per_topic():
    assert fallback_image("gold prices") == fallback_image("gold prices")
    assert fallback_image("gold prices") in FALLBACK_IMAGES
