"""
Provider registry keyed by ProviderKind.

To add a new provider:
1. Inherit from Provider base class
2. Implement build_request() and parse_response()
3. Register an instance in _PROVIDER_REGISTRY below
"""

from __future__ import annotations

from .base import Provider, ProviderKind, ProviderRequest
from .images import ImageProvider
from .news import REGION_QUERIES, VALID_REGIONS, NewsProvider, normalize_region
from .videos import VideoProvider

_PROVIDER_REGISTRY: dict[ProviderKind, Provider] = {
    ProviderKind.NEWS: NewsProvider(),
    ProviderKind.IMAGES: ImageProvider(),
    ProviderKind.VIDEOS: VideoProvider(),
}


def available_providers() -> list[str]:
    """Return the registered provider kinds."""
    return sorted(kind.value for kind in _PROVIDER_REGISTRY)


def get_provider(kind: ProviderKind | str) -> Provider:
    """Look up the provider registered for a kind."""
    try:
        return _PROVIDER_REGISTRY[ProviderKind(kind)]
    except (KeyError, ValueError):
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {kind}. Supported: {supported}") from None


__all__ = [
    "Provider",
    "ProviderKind",
    "ProviderRequest",
    "NewsProvider",
    "ImageProvider",
    "VideoProvider",
    "REGION_QUERIES",
    "VALID_REGIONS",
    "normalize_region",
    "available_providers",
    "get_provider",
]
