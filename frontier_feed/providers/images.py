"""Image provider (Unsplash-compatible search plus a keyless single-image resolver)."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from ..core.types import ImageResult
from ..core.urls import is_well_formed_url
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


class ImageProvider(Provider):
    """Structured image search and single representative image lookup.

    Operations:
        search: params query, page, per_page, orientation -> list[ImageResult]
        random: params query -> str (resolved image URL)
    """

    kind = ProviderKind.IMAGES
    proxy_service = "unsplash"
    operations = ("search", "random")

    def build_request(
        self, endpoints: Endpoints, operation: str, params: dict[str, Any]
    ) -> ProviderRequest:
        self._check_operation(operation)
        query = params.get("query") or "finance"

        if operation == "random":
            if isinstance(endpoints, ProxyEndpoints):
                return ProviderRequest(url=endpoints.image_redirect_url, params={"query": query})
            # The redirect service takes the bare keywords as the query string.
            url = f"{endpoints.random_image_url}?{quote(query)}"
            return ProviderRequest(url=url, method="HEAD", expect_json=False)

        search = {
            "query": query,
            "page": params.get("page", 1),
            "per_page": params.get("per_page", 1),
            "orientation": params.get("orientation", "landscape"),
        }
        if isinstance(endpoints, ProxyEndpoints):
            return self._proxy_request(endpoints, search)

        endpoint = self._direct(endpoints)
        search = clean_params(search)
        if endpoint.credential:
            search["client_id"] = endpoint.credential
        return ProviderRequest(url=endpoint.base_url + "/search/photos", params=search)

    def parse_response(self, operation: str, data: Any) -> Any:
        self._check_operation(operation)
        if operation == "random":
            return _parse_random(data)

        payload = require_mapping(data, "image response")
        results = []
        for item in require_list(payload, "results", "image response"):
            image = _parse_image(item)
            if image is not None:
                results.append(image)
        return results


def _parse_random(data: Any) -> str:
    url = data.get("url") if isinstance(data, dict) else data
    if not is_well_formed_url(url):
        raise MalformedResponseFailure(f"image redirect response: not a URL: {url!r}")
    return url


def _parse_image(item: Any) -> ImageResult | None:
    if not isinstance(item, dict):
        return None
    urls = item.get("urls") if isinstance(item.get("urls"), dict) else {}
    url = (
        optional_str(item.get("url"))
        or optional_str(urls.get("regular"))
        or optional_str(urls.get("small"))
    )
    if not is_well_formed_url(url):
        return None

    user = item.get("user") if isinstance(item.get("user"), dict) else {}
    attribution = optional_str(item.get("attributionName")) or optional_str(user.get("name"))
    return ImageResult(url=url, attribution_name=attribution)
