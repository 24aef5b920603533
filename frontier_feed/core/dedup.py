"""
Article deduplication using URL matching and fuzzy title comparison.

Used when several result lists are merged into one page (for example the
front page's category headlines), where wire stories often appear in
more than one category.
"""

from __future__ import annotations

from rapidfuzz import fuzz

from .types import ArticleRecord


def dedup_articles(articles: list[ArticleRecord], threshold: int = 92) -> list[ArticleRecord]:
    """Remove duplicate articles from a list.

    An article is dropped when its URL was already kept, or when its title
    is at least `threshold` percent similar to a kept title. Articles
    without a URL are only compared by title.

    Args:
        articles: Articles in display order
        threshold: Similarity threshold (0-100) for fuzzy title matching

    Returns:
        Deduplicated list of articles, preserving original order
    """
    seen_urls: set[str] = set()
    kept: list[ArticleRecord] = []
    titles: list[str] = []

    for article in articles:
        if article.url and article.url in seen_urls:
            continue
        if _is_similar_title(article.title, titles, threshold):
            continue
        if article.url:
            seen_urls.add(article.url)
        titles.append(article.title)
        kept.append(article)

    return kept


def _is_similar_title(title: str, titles: list[str], threshold: int) -> bool:
    for existing in titles:
        if fuzz.ratio(title, existing) >= threshold:
            return True
    return False
