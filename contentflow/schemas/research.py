"""Research, generation, and web-search schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from contentflow.schemas.content import Source, Tone

ProviderName = Literal["perplexity", "template"]


class ResearchMetadata(BaseModel):
    """Provenance of a research result."""

    provider: ProviderName
    query: str
    model: str | None = None
    fallback: bool = False


class ResearchResult(BaseModel):
    """Validated research provider output."""

    content: str
    sources: list[Source] = Field(default_factory=list)
    metadata: ResearchMetadata


class ResearchData(BaseModel):
    """Structured facts extracted from a research result."""

    sources: list[Source] = Field(default_factory=list)
    key_points: list[str] = Field(default_factory=list)
    related_topics: list[str] = Field(default_factory=list)
    statistics: list[str] = Field(default_factory=list)
    quotes: list[str] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Validated content generator output."""

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    meta_description: str = ""


class ResearchRequest(BaseModel):
    """Schema for research requests."""

    query: str = Field(min_length=1, max_length=500)

    @field_validator("query")
    @classmethod
    def _strip_query(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("query must not be blank")
        return stripped


class GenerateRequest(BaseModel):
    """Schema for standalone content generation requests."""

    prompt: str = Field(min_length=1)
    word_count: int = Field(default=1500, ge=100, le=10000)
    tone: Tone = "professional"
    research_data: ResearchData | None = None


class WebSearchRequest(BaseModel):
    """Schema for web search requests."""

    query: str = Field(min_length=1, max_length=500)


class WebSearchResult(BaseModel):
    """Single deduplicated web search hit."""

    url: str
    title: str
    snippet: str = ""
    query: str


class WebSearchResponse(BaseModel):
    """Schema for web search responses."""

    results: list[WebSearchResult] = Field(default_factory=list)
    query: str
    timestamp: datetime
