"""
Provider fetching, caching and request deduplication.

This package handles timeout-bounded HTTP calls, the failure taxonomy,
the TTL cache and the in-flight request registry.
"""

from .cache import MISS, CacheEntry, CacheStore
from .errors import (
    ConfigurationError,
    FetchFailure,
    FrontierFeedError,
    HttpFailure,
    MalformedResponseFailure,
    NetworkUnreachableFailure,
    NotFoundFailure,
    RateLimitFailure,
    TimeoutFailure,
)
from .fetcher import FetchResult, fetch_json
from .inflight import RequestDeduplicator

__all__ = [
    "MISS",
    "CacheEntry",
    "CacheStore",
    "ConfigurationError",
    "FetchFailure",
    "FrontierFeedError",
    "HttpFailure",
    "MalformedResponseFailure",
    "NetworkUnreachableFailure",
    "NotFoundFailure",
    "RateLimitFailure",
    "TimeoutFailure",
    "FetchResult",
    "fetch_json",
    "RequestDeduplicator",
]
