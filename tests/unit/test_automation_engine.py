"""Unit tests for the synchronous automation engine."""

from __future__ import annotations

import pytest

from contentflow.config import settings
from contentflow.core.exceptions import ArticleNotFoundError, RequestNotFoundError
from contentflow.schemas.automation import ContentRequest
from contentflow.schemas.content import Article
from contentflow.schemas.generation import GenerationOptions
from contentflow.schemas.research import ResearchData, ResearchResult
from contentflow.services.automation_engine import AutomationEngine, research_query_for
from contentflow.services.content_generator import ContentGenerator
from contentflow.services.research_provider import ResearchProvider, template_research


class _RecordingProvider:
    def __init__(self) -> None:
        self.queries: list[str] = []

    async def research(self, query: str) -> ResearchResult:
        self.queries.append(query)
        return template_research(query)


class _FailingGenerator:
    async def generate_article(self, request: ContentRequest, research: ResearchData) -> Article:
        raise RuntimeError("generator exploded")


@pytest.fixture(autouse=True)
def _no_llm_model(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "generation_model", None)


def _request(kind: str, value: str) -> ContentRequest:
    return ContentRequest(
        id="req-1",
        type=kind,  # type: ignore[arg-type]
        input=value,
        word_count=800,
        tone="professional",
    )


def test_research_query_for_keyword_is_input() -> None:
    assert research_query_for(_request("keyword", "solar power")) == "solar power"


def test_research_query_for_url_adds_topic() -> None:
    query = research_query_for(_request("url", "https://example.com/solar-panels"))

    assert query == (
        "solar panels https://example.com/solar-panels latest information trends statistics"
    )


@pytest.mark.asyncio
async def test_process_request_stores_scored_article() -> None:
    engine = AutomationEngine(
        provider=ResearchProvider(variant="template"),
        generator=ContentGenerator(),
    )

    article_id = await engine.process_request(
        "solar power",
        "keyword",
        GenerationOptions(word_count=600, target_keywords=["solar power"]),
    )

    article = engine.get_article(article_id)
    assert article.keywords == ["solar power"]
    assert article.seo_score is not None and 0 < article.seo_score <= 100
    assert article.readability_score is not None and 0 <= article.readability_score <= 100
    assert article.meta_description
    assert len(article.sources) == 3

    [request] = engine.list_requests()
    assert request.status == "completed"
    assert article.request_id == request.id
    assert engine.get_request(request.id) == request
    assert engine.list_articles() == [article]


@pytest.mark.asyncio
async def test_process_request_researches_url_topic() -> None:
    provider = _RecordingProvider()
    engine = AutomationEngine(provider=provider, generator=ContentGenerator())  # type: ignore[arg-type]

    await engine.process_request("https://example.com/solar-panels", "url")

    assert provider.queries == [
        "solar panels https://example.com/solar-panels latest information trends statistics"
    ]


@pytest.mark.asyncio
async def test_process_request_marks_error_and_propagates() -> None:
    engine = AutomationEngine(
        provider=ResearchProvider(variant="template"),
        generator=_FailingGenerator(),  # type: ignore[arg-type]
    )

    with pytest.raises(RuntimeError, match="generator exploded"):
        await engine.process_request("solar power", "topic")

    [request] = engine.list_requests()
    assert request.status == "error"
    assert engine.list_articles() == []


def test_lookups_raise_not_found() -> None:
    engine = AutomationEngine(
        provider=ResearchProvider(variant="template"),
        generator=ContentGenerator(),
    )

    with pytest.raises(RequestNotFoundError):
        engine.get_request("req-missing")
    with pytest.raises(ArticleNotFoundError):
        engine.get_article("article-missing")
