"""
Topic extraction from article titles.

The topic is the short search phrase used to look up an image and a
related video for an article. Extraction is plain string processing with
a fixed stop-word list, so the same title always yields the same topic.
"""

from __future__ import annotations

import re

DEFAULT_TOPIC = "finance"
MAX_TOPIC_TOKENS = 3
MIN_TOKEN_LENGTH = 4

STOP_WORDS = frozenset(
    {
        "about",
        "above",
        "after",
        "again",
        "against",
        "amid",
        "among",
        "because",
        "before",
        "being",
        "below",
        "between",
        "could",
        "does",
        "during",
        "each",
        "from",
        "have",
        "having",
        "here",
        "into",
        "just",
        "market",
        "markets",
        "more",
        "most",
        "other",
        "over",
        "said",
        "says",
        "should",
        "some",
        "stock",
        "stocks",
        "such",
        "than",
        "that",
        "their",
        "them",
        "then",
        "there",
        "these",
        "they",
        "this",
        "those",
        "through",
        "under",
        "until",
        "very",
        "were",
        "what",
        "when",
        "where",
        "which",
        "while",
        "will",
        "with",
        "would",
        "your",
    }
)

_PUNCTUATION_RE = re.compile(r"[^\w\s]+")


def extract_topic(title: str) -> str:
    """Derive a search phrase from an article title.

    Steps: lowercase, strip punctuation, drop stop words, drop tokens of
    three characters or fewer, keep the first three remaining tokens in
    their original order.

    Args:
        title: Article headline

    Returns:
        Space-joined phrase of up to three tokens, or "finance" when no
        token survives filtering

    Examples:
        >>> extract_topic("ECB Holds Rates Steady Amid Inflation")
        'holds rates steady'
        >>> extract_topic("Is it up?")
        'finance'
    """
    cleaned = _PUNCTUATION_RE.sub(" ", (title or "").lower())
    tokens = [
        token
        for token in cleaned.split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]
    return " ".join(tokens[:MAX_TOPIC_TOKENS]) or DEFAULT_TOPIC
