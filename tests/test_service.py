"""Tests for ContentService caching, joining, timeouts and fallbacks."""

from __future__ import annotations

import asyncio
import time

import httpx
import pytest

from conftest import IMAGE_SEARCH, NEWS_EVERYTHING, NEWS_TOP, VIDEO_SEARCH, image_payload, news_payload, video_payload
from frontier_feed.config import AppConfig
from frontier_feed.fallback import SITE_NAME
from frontier_feed.fetch.errors import (
    ConfigurationError,
    MalformedResponseFailure,
    NotFoundFailure,
    RateLimitFailure,
    TimeoutFailure,
)


def test_concurrent_identical_requests_share_one_network_call(fake, make_service):
    fake.route(NEWS_TOP, json=news_payload("One", "Two", "Three"), delay=0.05)
    service = make_service()

    async def scenario():
        results = await asyncio.gather(*(service.get_top_headlines("business", 3) for _ in range(3)))
        later = await service.get_top_headlines("business", 3)
        return results, later

    results, later = asyncio.run(scenario())

    assert fake.count(NEWS_TOP) == 1
    assert [a.title for a in results[0].articles] == ["One", "Two", "Three"]
    assert results[0].articles == results[1].articles == results[2].articles
    assert later.articles == results[0].articles
    assert service.stats.joined == 2
    assert service.stats.cache_hits == 1
    assert len(service.inflight) == 0


def test_direct_request_carries_credential_and_category(fake, make_service):
    fake.route(NEWS_TOP, json=news_payload("One"))
    service = make_service()

    asyncio.run(service.get_top_headlines("Technology", 5))

    request = fake.calls[0]
    assert request.url.params["category"] == "technology"
    assert request.url.params["pageSize"] == "5"
    assert request.url.params["apiKey"] == "news-key"


def test_timeout_returns_fallback_within_deadline(fake, make_service):
    cfg = AppConfig()
    cfg.fetch.timeout_seconds = 0.05
    fake.route(NEWS_TOP, json=news_payload("Late"), delay=2.0)
    service = make_service(cfg)

    started = time.perf_counter()
    result = asyncio.run(service.get_top_headlines("business", 3))
    elapsed = time.perf_counter() - started

    assert elapsed < 1.0
    assert result.is_fallback
    assert isinstance(result.failure, TimeoutFailure)
    assert len(result.articles) == 3
    assert all(article.source_name == SITE_NAME for article in result.articles)
    assert service.stats.fallbacks == 1


def test_rate_limit_falls_back_and_is_not_cached(fake, make_service):
    fake.route(NEWS_EVERYTHING, status=429, json={"status": "error", "code": "rateLimited"})
    service = make_service()

    async def scenario():
        first = await service.search_articles("stock market", 20, 1)
        second = await service.search_articles("stock market", 20, 1)
        return first, second

    first, second = asyncio.run(scenario())

    assert isinstance(first.failure, RateLimitFailure)
    assert first.failure.status == 429
    assert first.articles
    assert second.is_fallback
    assert fake.count(NEWS_EVERYTHING) == 2
    assert len(service.cache) == 0


def test_joined_callers_receive_the_same_failure(fake, make_service):
    fake.route(NEWS_TOP, status=503, text="unavailable", delay=0.05)
    service = make_service()

    async def scenario():
        return await asyncio.gather(*(service.get_top_headlines("business", 3) for _ in range(3)))

    results = asyncio.run(scenario())

    assert fake.count(NEWS_TOP) == 1
    assert results[0].failure is results[1].failure is results[2].failure
    assert results[0].failure.status == 503


def test_cache_expires_after_ttl(fake, make_service, clock):
    fake.route(NEWS_TOP, json=news_payload("One"))
    service = make_service()

    asyncio.run(service.get_top_headlines("business", 3))
    clock.advance(299)
    asyncio.run(service.get_top_headlines("business", 3))
    assert fake.count(NEWS_TOP) == 1

    clock.advance(2)
    asyncio.run(service.get_top_headlines("business", 3))
    assert fake.count(NEWS_TOP) == 2


def test_clear_forces_refetch(fake, make_service):
    fake.route(NEWS_TOP, json=news_payload("One"))
    service = make_service()

    asyncio.run(service.get_top_headlines("business", 3))
    service.clear()
    asyncio.run(service.get_top_headlines("business", 3))

    assert fake.count(NEWS_TOP) == 2


def test_empty_result_is_not_found_and_not_cached(fake, make_service):
    fake.route(NEWS_EVERYTHING, json=news_payload())
    service = make_service()

    result = asyncio.run(service.search_articles("nothing here"))

    assert isinstance(result.failure, NotFoundFailure)
    assert result.articles
    assert len(service.cache) == 0


def test_malformed_body_falls_back(fake, make_service):
    fake.route(NEWS_TOP, json={"status": "ok", "articles": "oops"})
    service = make_service()

    result = asyncio.run(service.get_top_headlines("business"))

    assert isinstance(result.failure, MalformedResponseFailure)


def test_rejected_credentials_raise_configuration_error(fake, make_service):
    fake.route(NEWS_TOP, status=401, json={"status": "error", "code": "apiKeyInvalid"})
    service = make_service()

    with pytest.raises(ConfigurationError, match="401"):
        asyncio.run(service.get_top_headlines("business"))


def test_regional_news_validates_region(make_service):
    service = make_service()

    with pytest.raises(ValueError, match="Invalid region"):
        asyncio.run(service.get_regional_news("atlantis"))


def test_regional_news_direct_mode_uses_region_query(fake, make_service):
    fake.route(NEWS_EVERYTHING, json=news_payload("ECB Holds Rates"))
    service = make_service()

    result = asyncio.run(service.get_regional_news("Europe", 10))

    assert [a.title for a in result.articles] == ["ECB Holds Rates"]
    assert "ECB" in fake.calls[0].url.params["q"]
    assert fake.calls[0].url.params["sortBy"] == "publishedAt"


def test_regional_fallback_uses_region_titles(fake, make_service):
    fake.route(NEWS_EVERYTHING, status=500, text="boom")
    service = make_service()

    result = asyncio.run(service.get_regional_news("asia"))

    assert [a.title for a in result.articles] == ["Asia Markets Update", "Economic Outlook for Asia"]


def test_proxy_mode_sends_no_credentials(fake, make_service):
    fake.route("/api", json=news_payload("Via Proxy"))
    service = make_service(host="news.example.org")

    result = asyncio.run(service.get_top_headlines("business", 3))

    request = fake.calls[0]
    assert result.articles[0].title == "Via Proxy"
    assert request.url.host == "localhost"
    assert request.url.params["service"] == "newsApi"
    assert "apiKey" not in request.url.params


def test_proxy_regional_posts_json_body(fake, make_service):
    fake.route(
        "/api/regional-news",
        json={"success": True, "articles": news_payload("Sydney Rally")["articles"], "totalResults": 1},
    )
    service = make_service(host="news.example.org")

    result = asyncio.run(service.get_regional_news("australia", 5, 2))

    request = fake.calls[0]
    assert request.method == "POST"
    assert b'"region":"australia"' in request.content.replace(b" ", b"")
    assert result.total_results == 1


def test_image_search_raises_not_found_when_empty(fake, make_service):
    fake.route(IMAGE_SEARCH, json=image_payload())
    service = make_service()

    with pytest.raises(NotFoundFailure):
        asyncio.run(service.search_images("gold prices"))


def test_image_and_video_results_are_cached(fake, make_service):
    fake.route(IMAGE_SEARCH, json=image_payload("https://img.example.com/gold.jpg"))
    fake.route(VIDEO_SEARCH, json=video_payload("abc123"))
    service = make_service()

    async def scenario():
        images = await service.search_images("gold prices")
        again = await service.search_images("gold prices")
        videos = await service.search_videos("gold prices", 1)
        return images, again, videos

    images, again, videos = asyncio.run(scenario())

    assert images[0].url == "https://img.example.com/gold.jpg"
    assert images[0].attribution_name == "Photographer"
    assert again == images
    assert videos[0].video_id == "abc123"
    assert fake.count(IMAGE_SEARCH) == 1
    assert fake.calls[0].url.params["client_id"] == "unsplash-key"


def test_regional_rate_limit_yields_region_fallback(fake, make_service):
    fake.route(NEWS_EVERYTHING, status=429, text="Too Many Requests")
    service = make_service()

    result = asyncio.run(service.get_regional_news("africa"))

    assert isinstance(result.failure, RateLimitFailure)
    assert 2 <= len(result.articles) <= 3
    assert result.articles[0].title == "Africa Markets Update"


def test_staggered_callers_join_a_slow_fetch(fake, make_service):
    fake.route(NEWS_EVERYTHING, json=news_payload("Stocks edge higher"), delay=0.2)
    service = make_service()

    async def scenario():
        first = asyncio.create_task(service.search_articles("stock market"))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(service.search_articles("stock market"))
        return await first, await second

    first, second = asyncio.run(scenario())

    assert first.articles == second.articles
    assert fake.count(NEWS_EVERYTHING) == 1
    assert len(service.inflight) == 0


def test_clear_during_fetch_keeps_post_refresh_result(fake, make_service):
    served = []

    async def handler(request):
        served.append(request)
        if len(served) == 1:
            await asyncio.sleep(0.2)
            return httpx.Response(200, json=news_payload("Old"))
        return httpx.Response(200, json=news_payload("New"))

    fake.route(NEWS_TOP, handler=handler)
    service = make_service()

    async def scenario():
        first = asyncio.create_task(service.get_top_headlines("business", 3))
        await asyncio.sleep(0.01)
        service.clear()
        second = await service.get_top_headlines("business", 3)
        stale = await first
        third = await service.get_top_headlines("business", 3)
        return stale, second, third

    stale, second, third = asyncio.run(scenario())

    assert fake.count(NEWS_TOP) == 2
    assert stale.articles[0].title == "Old"
    assert second.articles[0].title == "New"
    assert third.articles[0].title == "New"
    assert len(service.inflight) == 0
