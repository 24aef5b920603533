"""
Frontier Feed - content core for a financial news site.

This package fetches news, images and videos from third-party providers,
caches and deduplicates identical lookups, enriches articles with a
topic, image and stable id, and substitutes fallback content when a
provider is unavailable.

Main entry point is the CLI via the `frontier-feed` command.

Example:
    $ frontier-feed front-page
    $ frontier-feed region europe --video
"""

__all__ = [
    "__version__",
    "ContentService",
    "NewsResult",
    "EnrichmentPipeline",
    "AutoRefresher",
    "load_config",
    "resolve_endpoints",
]
__version__ = "0.1.0"

from .config import load_config
from .endpoints import resolve_endpoints
from .enrichment import EnrichmentPipeline
from .refresh import AutoRefresher
from .service import ContentService, NewsResult
