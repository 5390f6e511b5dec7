"""Plain-text helpers shared by generation, SEO, and export."""

from __future__ import annotations

import re
from html import unescape

TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")
SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def strip_html(html: str) -> str:
    """Visible text of an HTML fragment with whitespace collapsed."""
    text = unescape(TAG_PATTERN.sub(" ", html))
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split())


def slugify(value: str, fallback: str = "topic") -> str:
    slug = SLUG_PATTERN.sub("-", value.lower()).strip("-")
    return slug or fallback


def truncate(text: str, limit: int) -> str:
    """Cut to `limit` characters, ending with an ellipsis when shortened."""
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)].rstrip() + "..."
