"""
Failure taxonomy for content fetching.

Every failure that can reach a caller of the content service is one of
these exception types. Transport-level failures derive from FetchFailure
and are produced only by the timeout-bounded fetcher; provider parsers
raise MalformedResponseFailure; the service raises NotFoundFailure and
ConfigurationError.
"""

from __future__ import annotations


class FrontierFeedError(Exception):
    """Base class for all errors raised by frontier_feed."""


class ConfigurationError(FrontierFeedError):
    """Missing or rejected credentials, or an unusable environment.

    Fallback content cannot fix this, so it is always surfaced to the caller.
    """


class FetchFailure(FrontierFeedError):
    """Base class for a failed provider call.

    Attributes:
        url: The URL that was requested, when known
    """

    kind = "fetch_failed"

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class TimeoutFailure(FetchFailure):
    """The provider did not answer before the deadline."""

    kind = "timeout"


class NetworkUnreachableFailure(FetchFailure):
    """The provider could not be reached at the transport level."""

    kind = "network_unreachable"


class HttpFailure(FetchFailure):
    """The provider answered with a non-success status.

    Attributes:
        status: HTTP status code
        body: Response body text (may be truncated)
    """

    kind = "http_error"

    def __init__(self, status: int, body: str = "", url: str | None = None):
        message = f"HTTP {status}: {body[:200]}" if body else f"HTTP {status}"
        super().__init__(message, url=url)
        self.status = status
        self.body = body


class RateLimitFailure(HttpFailure):
    """HTTP 429 from the provider."""

    kind = "rate_limited"

    def __init__(self, body: str = "", url: str | None = None):
        super().__init__(429, body, url=url)


class MalformedResponseFailure(FetchFailure):
    """The response body did not parse into the expected shape."""

    kind = "malformed_response"


class NotFoundFailure(FetchFailure):
    """The provider call succeeded but produced zero usable results."""

    kind = "not_found"
