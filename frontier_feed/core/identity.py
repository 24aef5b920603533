"""Deterministic identities for requests and articles.

Query fingerprints key the cache and the in-flight registry. Article ids
let pages link to each other without a database: the same article always
maps to the same id.
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

from .types import ArticleRecord

ARTICLE_ID_LENGTH = 16


def fingerprint(operation: str, *params: Any) -> str:
    """Build the cache/dedup key for an operation and its ordered parameters.

    Args:
        operation: Logical operation name (e.g., "headlines")
        *params: Parameter values in a fixed order

    Returns:
        A string such as 'headlines:["business",3]'

    Example:
        >>> fingerprint("search", "stock market", 20, 1)
        'search:["stock market",20,1]'
    """
    encoded = json.dumps(list(params), separators=(",", ":"), ensure_ascii=True, default=str)
    return f"{operation}:{encoded}"


def article_id(article: ArticleRecord) -> str:
    """Return the stable id for an article.

    The canonical URL is hashed (the title when the URL is missing) and
    the digest is encoded as unpadded URL-safe base64, cut to a fixed length.

    Args:
        article: The article to identify

    Returns:
        A 16-character token made of [A-Za-z0-9_-]
    """
    basis = article.url or article.title
    digest = hashlib.sha256(basis.encode("utf-8")).digest()
    token = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
    return token[:ARTICLE_ID_LENGTH]
