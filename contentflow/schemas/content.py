"""Shared content schemas: sources and articles."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

InputKind = Literal["keyword", "url", "topic"]
Tone = Literal["professional", "casual", "authoritative", "friendly"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Source(BaseModel):
    """Research citation discovered for a query."""

    url: str = Field(min_length=1)
    title: str = Field(min_length=1)
    excerpt: str = ""
    relevance: float = Field(default=0.8, ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=utc_now)
    publish_date: str | None = None


class Article(BaseModel):
    """Generated article.

    Frozen: stages that need to attach more data store a copy instead.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    request_id: str | None = None
    title: str
    content: str
    meta_description: str = ""
    keywords: list[str] = Field(default_factory=list)
    word_count: int = Field(default=0, ge=0)
    sources: list[Source] = Field(default_factory=list)
    seo_score: int | None = Field(default=None, ge=0, le=100)
    readability_score: int | None = Field(default=None, ge=0, le=100)
    created_at: datetime = Field(default_factory=utc_now)
