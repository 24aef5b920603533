"""News search provider (NewsAPI-compatible)."""

from __future__ import annotations

import logging
from typing import Any

from ..core.types import ArticleRecord, NewsPage
from ..endpoints import Endpoints, ProxyEndpoints
from ..fetch.errors import MalformedResponseFailure
from .base import (
    Provider,
    ProviderKind,
    ProviderRequest,
    clean_params,
    optional_str,
    require_list,
    require_mapping,
)

logger = logging.getLogger(__name__)

REGION_QUERIES = {
    "australia": "Australia OR Sydney OR Melbourne OR ASX market finance economy",
    "africa": 'Africa OR Kenya OR Nigeria OR "South Africa" market finance economy',
    "americas": 'Americas OR USA OR Canada OR Brazil OR "Latin America" market finance economy',
    "asia": "Asia OR China OR Japan OR India OR Singapore market finance economy",
    "europe": "Europe OR UK OR Germany OR France OR ECB market finance economy",
}

VALID_REGIONS = tuple(REGION_QUERIES)

# Placeholder NewsAPI returns for articles pulled by the publisher.
_REMOVED_MARKER = "[Removed]"


def normalize_region(region: str) -> str:
    """Return the lower-cased region or raise ValueError if unknown."""
    key = (region or "").strip().lower()
    if key not in REGION_QUERIES:
        raise ValueError(f"Invalid region: {region!r}. Must be one of: {', '.join(VALID_REGIONS)}")
    return key


class NewsProvider(Provider):
    """Top headlines, free-text/source search, and regional search.

    Operations:
        top_headlines: params category, pageSize, page
        everything: params q, sources, pageSize, page, sortBy, language
        regional: params region, pageSize, page, sortBy, language
    """

    kind = ProviderKind.NEWS
    proxy_service = "newsApi"
    operations = ("top_headlines", "everything", "regional")

    def build_request(
        self, endpoints: Endpoints, operation: str, params: dict[str, Any]
    ) -> ProviderRequest:
        self._check_operation(operation)
        params = dict(params)

        if operation == "regional":
            region = normalize_region(params.pop("region", ""))
            if isinstance(endpoints, ProxyEndpoints):
                body = {
                    "region": region,
                    "pageSize": params.get("pageSize", 20),
                    "page": params.get("page", 1),
                }
                return ProviderRequest(url=endpoints.regional_url, method="POST", json_body=body)
            params["q"] = REGION_QUERIES[region]
            operation = "everything"

        if isinstance(endpoints, ProxyEndpoints):
            return self._proxy_request(endpoints, params)

        endpoint = self._direct(endpoints)
        path = "/v2/top-headlines" if operation == "top_headlines" else "/v2/everything"
        query = clean_params(params)
        if endpoint.credential:
            query["apiKey"] = endpoint.credential
        return ProviderRequest(url=endpoint.base_url + path, params=query)

    def parse_response(self, operation: str, data: Any) -> NewsPage:
        self._check_operation(operation)
        payload = require_mapping(data, "news response")
        if payload.get("success") is False or payload.get("status") == "error":
            message = payload.get("error") or payload.get("message") or "provider reported failure"
            raise MalformedResponseFailure(f"news response: {message}")

        items = require_list(payload, "articles", "news response")
        articles = []
        for index, item in enumerate(items):
            article = _parse_article(item)
            if article is None:
                logger.debug("Skipping news item %s: missing title", index)
                continue
            articles.append(article)

        total = payload.get("totalResults")
        if not isinstance(total, int) or isinstance(total, bool):
            total = len(articles)
        return NewsPage(articles=tuple(articles), total_results=total)


def _parse_article(item: Any) -> ArticleRecord | None:
    if not isinstance(item, dict):
        return None
    title = optional_str(item.get("title"))
    if not title or title == _REMOVED_MARKER:
        return None

    source = item.get("source")
    source_name = optional_str(source.get("name")) if isinstance(source, dict) else optional_str(source)

    return ArticleRecord(
        title=title,
        description=optional_str(item.get("description")),
        author=optional_str(item.get("author")),
        source_name=source_name,
        published_at=optional_str(item.get("publishedAt")),
        url=optional_str(item.get("url")),
        image_url=optional_str(item.get("urlToImage")),
        content=optional_str(item.get("content")),
    )
