"""
Abstract base class for content providers.

New providers should inherit from Provider, set `kind` and
`proxy_service`, and implement build_request and parse_response.
Request building covers both direct and proxy modes; response parsing
validates the provider's JSON shape and raises MalformedResponseFailure
instead of letting bad data travel further down the pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..endpoints import DirectEndpoints, Endpoints, ProviderEndpoint, ProxyEndpoints
from ..fetch.errors import MalformedResponseFailure


class ProviderKind(str, Enum):
    """The kinds of upstream providers the content core talks to."""

    NEWS = "news"
    IMAGES = "images"
    VIDEOS = "videos"


@dataclass(frozen=True)
class ProviderRequest:
    """A fully built provider call, ready for the fetcher.

    Attributes:
        url: Absolute request URL
        method: HTTP method
        params: Query string parameters
        json_body: JSON body for POST endpoints
        expect_json: False when only the final redirect URL matters
    """

    url: str
    method: str = "GET"
    params: dict[str, Any] = field(default_factory=dict)
    json_body: dict[str, Any] | None = None
    expect_json: bool = True


class Provider(ABC):
    """Abstract base class for content providers.

    Attributes:
        kind: Which ProviderKind this provider serves
        proxy_service: The `service` name the proxy endpoint dispatches on
        operations: Operation names accepted by build_request/parse_response
    """

    kind: ProviderKind
    proxy_service: str
    operations: tuple[str, ...] = ()

    @abstractmethod
    def build_request(
        self, endpoints: Endpoints, operation: str, params: dict[str, Any]
    ) -> ProviderRequest:
        """Build the request for an operation in the resolved mode.

        Args:
            endpoints: Resolved direct or proxy endpoints
            operation: Operation name (one of self.operations)
            params: Operation parameters

        Returns:
            ProviderRequest for the fetcher
        """
        raise NotImplementedError

    @abstractmethod
    def parse_response(self, operation: str, data: Any) -> Any:
        """Validate and convert a decoded response body.

        Raises:
            MalformedResponseFailure: If the body does not have the expected shape
        """
        raise NotImplementedError

    def _check_operation(self, operation: str) -> None:
        if operation not in self.operations:
            supported = ", ".join(self.operations)
            raise ValueError(
                f"Unsupported {self.kind.value} operation: {operation}. Supported: {supported}"
            )

    def _direct(self, endpoints: DirectEndpoints) -> ProviderEndpoint:
        return endpoints.for_kind(self.kind)

    def _proxy_request(self, endpoints: ProxyEndpoints, params: dict[str, Any]) -> ProviderRequest:
        return ProviderRequest(
            url=endpoints.base_url,
            params={"service": self.proxy_service, **clean_params(params)},
        )


def clean_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop None and empty-string values from request parameters."""
    return {key: value for key, value in params.items() if value is not None and value != ""}


def require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedResponseFailure(f"{what}: expected JSON object, got {type(data).__name__}")
    return data


def require_list(data: dict[str, Any], key: str, what: str) -> list[Any]:
    value = data.get(key)
    if not isinstance(value, list):
        raise MalformedResponseFailure(f"{what}: missing or non-list '{key}'")
    return value


def optional_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    return str(value)
