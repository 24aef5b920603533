"""
Timeout-bounded HTTP fetching for provider calls.

Each call is raced against a deadline with asyncio.wait_for. When the
deadline expires the request coroutine is cancelled, which makes httpx
close the underlying connection instead of leaving it to finish in the
background. Outcomes are classified into the failure taxonomy from
fetch.errors; no retries happen here.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import (
    FetchFailure,
    HttpFailure,
    MalformedResponseFailure,
    NetworkUnreachableFailure,
    RateLimitFailure,
    TimeoutFailure,
)


@dataclass
class FetchResult:
    """Result of a single provider call.

    Either data will be populated (success) or failure will be populated,
    but never both. status_code may be None for transport-level failures.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status code, or None if no response arrived
        data: Decoded JSON body, or the final URL for non-JSON calls
        failure: Classified failure, None on success
    """

    url: str
    status_code: int | None
    data: Any = None
    failure: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> Any:
        """Return data, or raise the classified failure."""
        if self.failure is not None:
            raise self.failure
        return self.data


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    method: str = "GET",
    params: dict[str, Any] | None = None,
    json_body: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    expect_json: bool = True,
) -> FetchResult:
    """Perform one provider call bounded by a deadline.

    Args:
        client: Shared async HTTP client
        url: Absolute URL to request
        timeout: Deadline in seconds for the whole call
        method: HTTP method
        params: Query string parameters
        json_body: JSON request body (for POST endpoints)
        headers: Extra request headers
        expect_json: When False, the final URL after redirects is returned
            as data instead of a decoded body

    Returns:
        FetchResult with data on success or a classified failure
    """
    try:
        resp = await asyncio.wait_for(
            client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                follow_redirects=True,
            ),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException):
        failure = TimeoutFailure(f"No response within {timeout:g}s", url=url)
        return FetchResult(url=url, status_code=None, failure=failure)
    except httpx.DecodingError as exc:
        failure = MalformedResponseFailure(f"DecodingError: {exc}", url=url)
        return FetchResult(url=url, status_code=None, failure=failure)
    except httpx.RequestError as exc:
        failure = NetworkUnreachableFailure(f"{type(exc).__name__}: {exc}", url=url)
        return FetchResult(url=url, status_code=None, failure=failure)

    if resp.status_code == 429:
        return FetchResult(
            url=url, status_code=429, failure=RateLimitFailure(resp.text, url=url)
        )
    if not resp.is_success:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            failure=HttpFailure(resp.status_code, resp.text, url=url),
        )

    if not expect_json:
        return FetchResult(url=url, status_code=resp.status_code, data=str(resp.url))

    try:
        data = resp.json()
    except ValueError as exc:
        failure = MalformedResponseFailure(
            f"JSONDecodeError: {exc} - Response: {resp.text[:200]}", url=url
        )
        return FetchResult(url=url, status_code=resp.status_code, failure=failure)
    return FetchResult(url=url, status_code=resp.status_code, data=data)
