"""
Endpoint resolution for direct and proxy modes.

Local hosts talk to providers directly with locally configured
credentials. Every other host goes through the server-side proxy, and
the resolved value then carries no credentials at all. A resolved value
is always one mode or the other, never a mix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Union

from .config import AppConfig, get_api_key


@dataclass(frozen=True)
class ProviderEndpoint:
    """Base URL and credential for one provider in direct mode."""

    base_url: str
    credential: str | None = None


@dataclass(frozen=True)
class DirectEndpoints:
    """Direct provider access with per-provider credentials.

    Attributes:
        news: News search endpoint
        images: Image search endpoint
        videos: Video search endpoint
        random_image_url: Keyless single-image redirect service
    """

    news: ProviderEndpoint
    images: ProviderEndpoint
    videos: ProviderEndpoint
    random_image_url: str

    mode = "direct"

    def for_kind(self, kind) -> ProviderEndpoint:
        """Return the endpoint for a ProviderKind (matched by its value)."""
        return getattr(self, getattr(kind, "value", kind))


@dataclass(frozen=True)
class ProxyEndpoints:
    """Proxy access; credentials stay on the server.

    Attributes:
        base_url: Generic `?service=...` proxy endpoint
        regional_url: Regional news endpoint (POST)
        image_redirect_url: Single-image resolver endpoint
    """

    base_url: str
    regional_url: str
    image_redirect_url: str

    mode = "proxy"


Endpoints = Union[DirectEndpoints, ProxyEndpoints]


def resolve_endpoints(
    cfg: AppConfig,
    host: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Endpoints:
    """Resolve provider endpoints for the given host.

    No I/O is performed and there is no error path: a missing credential
    resolves to None and shows up later as a rejected provider call.

    Args:
        cfg: Application configuration
        host: Host being served; defaults to cfg.environment.host
        env: Environment mapping for credential lookup (defaults to os.environ)

    Returns:
        DirectEndpoints for local hosts, ProxyEndpoints otherwise
    """
    host = (host or cfg.environment.host or "").strip().lower()
    local_hosts = {h.lower() for h in cfg.environment.local_hosts}

    if host in local_hosts:
        providers = cfg.providers
        return DirectEndpoints(
            news=_provider_endpoint(providers.news, env),
            images=_provider_endpoint(providers.images, env),
            videos=_provider_endpoint(providers.videos, env),
            random_image_url=providers.random_image_url,
        )

    base_url = _absolute(cfg.proxy.base_url, cfg.environment.site_origin)
    return ProxyEndpoints(
        base_url=base_url,
        regional_url=base_url + cfg.proxy.regional_path,
        image_redirect_url=base_url + cfg.proxy.image_redirect_path,
    )


def _provider_endpoint(provider_cfg, env) -> ProviderEndpoint:
    return ProviderEndpoint(
        base_url=provider_cfg.base_url.rstrip("/"),
        credential=get_api_key(provider_cfg, env),
    )


def _absolute(url: str, origin: str) -> str:
    url = url.rstrip("/")
    if url.startswith(("http://", "https://")):
        return url
    return origin.rstrip("/") + "/" + url.lstrip("/")
