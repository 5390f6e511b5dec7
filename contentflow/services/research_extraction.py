"""Heuristic extraction of key points, statistics, and quotes from research prose."""

from __future__ import annotations

import re
from collections import Counter

from contentflow.schemas.research import ResearchData, ResearchResult

SENTENCE_SPLIT = re.compile(r"[.!?]+")
STATISTIC_PATTERN = re.compile(
    r"\$\d+(?:\.\d+)?(?:\s?(?:billion|million|[BMK]))?"
    r"|\d+(?:\.\d+)?%"
    r"|\d{1,3}(?:,\d{3})+"
    r"|\d+(?:\.\d+)?x\b",
    re.IGNORECASE,
)
QUOTE_PATTERN = re.compile(r"[\"“]([^\"”]+)[\"”]")
WORD_PATTERN = re.compile(r"\W+")
COMMON_WORDS = frozenset(
    {"the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
     "about", "their", "there", "these", "those", "which", "while", "where"}
)

MAX_KEY_POINTS = 8
MAX_RELATED_TOPICS = 10
MAX_STATISTICS = 5
MAX_QUOTES = 3


def _sentences(content: str) -> list[str]:
    return [part.strip() for part in SENTENCE_SPLIT.split(content) if part.strip()]


def extract_key_points(content: str, limit: int = MAX_KEY_POINTS) -> list[str]:
    """Sentences long enough to carry a claim but short enough to quote."""
    return [s for s in _sentences(content) if 50 < len(s) < 200][:limit]


def extract_topic_sentences(content: str, topic: str, limit: int = 3) -> list[str]:
    """Sentences over 50 characters that mention `topic`."""
    needle = topic.lower()
    return [s for s in _sentences(content) if len(s) > 50 and needle in s.lower()][:limit]


def extract_related_topics(content: str, limit: int = MAX_RELATED_TOPICS) -> list[str]:
    """Most frequent words longer than four letters."""
    counts = Counter(
        word
        for word in WORD_PATTERN.split(content.lower())
        if len(word) > 4 and word not in COMMON_WORDS and not word.isdigit()
    )
    return [word for word, _ in counts.most_common(limit)]


def extract_statistics(content: str, limit: int = MAX_STATISTICS) -> list[str]:
    """Unique percentages, money amounts, grouped numbers, and multipliers in order."""
    seen: dict[str, None] = {}
    for match in STATISTIC_PATTERN.finditer(content):
        seen.setdefault(match.group(0).strip(), None)
    return list(seen)[:limit]


def extract_quotes(content: str, limit: int = MAX_QUOTES) -> list[str]:
    return [
        quote.strip()
        for quote in QUOTE_PATTERN.findall(content)
        if 20 < len(quote.strip()) < 200
    ][:limit]


def build_research_data(result: ResearchResult) -> ResearchData:
    """Structure a provider result for prompt building."""
    content = result.content or ""
    return ResearchData(
        sources=list(result.sources),
        key_points=extract_key_points(content),
        related_topics=extract_related_topics(content),
        statistics=extract_statistics(content),
        quotes=extract_quotes(content),
    )
