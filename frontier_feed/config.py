"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- EnvironmentConfig: Host detection for direct vs proxy mode
- FetchConfig: HTTP fetching settings
- CacheConfig: In-memory cache TTL and refresh interval
- ProviderConfig: Per-provider base URL and credential settings
- ProxyConfig: Server-side proxy endpoints
- NewsConfig: News query defaults
- EnrichmentConfig: Image/video enrichment settings
- DedupConfig: Merge-time deduplication settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class EnvironmentConfig:
    """Configuration for runtime environment detection.

    Attributes:
        host: Host name the content is being served for
        local_hosts: Hosts that talk to providers directly with local credentials
        site_origin: Origin prepended to relative proxy paths
    """

    host: str = "localhost"
    local_hosts: list[str] = field(default_factory=lambda: ["localhost", "127.0.0.1"])
    site_origin: str = "http://localhost:3000"


@dataclass
class FetchConfig:
    """Configuration for HTTP fetching.

    Attributes:
        timeout_seconds: Deadline for a single provider call
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 15.0
    trust_env: bool = True
    user_agent: str = "frontier-feed/0.1 (+https://github.com/frontier-feed)"


@dataclass
class CacheConfig:
    """Configuration for the in-memory response cache.

    Attributes:
        ttl_seconds: Time-to-live shared by every cache entry
        refresh_interval_seconds: Interval of the periodic cache clear
        auto_refresh: Whether the CLI starts the periodic refresher
    """

    ttl_seconds: float = 300.0
    refresh_interval_seconds: float = 600.0
    auto_refresh: bool = False


@dataclass
class ProviderConfig:
    """Configuration for a single upstream provider in direct mode.

    Attributes:
        base_url: Base URL of the provider API
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable name containing the API key
    """

    base_url: str
    api_key: str | None = None
    api_key_env: str | None = None


@dataclass
class ProvidersConfig:
    """Provider settings for news, image and video search."""

    news: ProviderConfig = field(
        default_factory=lambda: ProviderConfig(
            base_url="https://newsapi.org", api_key_env="NEWS_KEY"
        )
    )
    images: ProviderConfig = field(
        default_factory=lambda: ProviderConfig(
            base_url="https://api.unsplash.com", api_key_env="UNSPLASH_KEY"
        )
    )
    videos: ProviderConfig = field(
        default_factory=lambda: ProviderConfig(
            base_url="https://www.googleapis.com", api_key_env="YOUTUBE_KEY"
        )
    )
    random_image_url: str = "https://source.unsplash.com/800x450/"


@dataclass
class ProxyConfig:
    """Configuration for the credential-injecting proxy.

    Attributes:
        base_url: Generic proxy endpoint, absolute or relative to site_origin
        regional_path: Regional news endpoint path under the proxy
        image_redirect_path: Single-image redirect endpoint path under the proxy
    """

    base_url: str = "/api"
    regional_path: str = "/regional-news"
    image_redirect_path: str = "/unsplash-redirect"


@dataclass
class NewsConfig:
    """Defaults for news queries.

    Attributes:
        default_category: Category used when none is given
        page_size: Number of articles per request
        language: Language filter for search queries
        sort_by: Sort order for search queries
        front_page_categories: Categories loaded together for the front page
    """

    default_category: str = "business"
    page_size: int = 20
    language: str = "en"
    sort_by: str = "publishedAt"
    front_page_categories: list[str] = field(
        default_factory=lambda: ["business", "technology", "general", "science", "health"]
    )


@dataclass
class EnrichmentConfig:
    """Configuration for article enrichment.

    Attributes:
        image_source: "search" for structured image search, "redirect" for the
            lighter single-image resolver
        include_video: Whether to resolve a related video per article
        concurrency: Maximum number of articles enriched at the same time
    """

    image_source: str = "search"
    include_video: bool = False
    concurrency: int = 8


@dataclass
class DedupConfig:
    """Configuration for article deduplication when merging result lists.

    Attributes:
        enabled: Whether to perform deduplication
        title_similarity_threshold: Fuzzy match threshold (0-100) for title similarity
    """

    enabled: bool = True
    title_similarity_threshold: int = 92


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "frontier_feed.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    environment: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    news: NewsConfig = field(default_factory=NewsConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            _deep_update(data[key], value)
        else:
            data[key] = value
    return _fromdict(data)


def _deep_update(target: dict[str, Any], updates: dict[str, Any]) -> None:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    providers = dict(data["providers"])
    return AppConfig(
        environment=EnvironmentConfig(**data["environment"]),
        fetch=FetchConfig(**data["fetch"]),
        cache=CacheConfig(**data["cache"]),
        providers=ProvidersConfig(
            news=ProviderConfig(**providers.pop("news")),
            images=ProviderConfig(**providers.pop("images")),
            videos=ProviderConfig(**providers.pop("videos")),
            **providers,
        ),
        proxy=ProxyConfig(**data["proxy"]),
        news=NewsConfig(**data["news"]),
        enrichment=EnrichmentConfig(**data["enrichment"]),
        dedup=DedupConfig(**data["dedup"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_api_key(cfg: ProviderConfig, env: dict[str, str] | None = None) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if not cfg.api_key_env:
        return None
    source = os.environ if env is None else env
    return source.get(cfg.api_key_env) or None
