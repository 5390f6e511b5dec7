"""Unit tests for the six-stage generation pipeline and its task manager."""

from __future__ import annotations

import asyncio

import pytest

from contentflow.core.exceptions import GenerationAlreadyRunningError, ProviderError
from contentflow.schemas.generation import GenerationOptions, GenerationRecord
from contentflow.schemas.research import ResearchResult
from contentflow.services.generation_pipeline import (
    CANCELLED_MESSAGE,
    CANNED_STATISTICS,
    GenerationPipeline,
    build_research_queries,
    placeholder_source,
    resolve_topic,
    source_relevance,
)
from contentflow.services.generation_task_manager import GenerationTaskManager
from contentflow.services.progress_store import InMemoryProgressStore, RedisProgressStore
from contentflow.services.research_provider import ResearchProvider, template_research


class _FailingProvider:
    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    async def search(self, query: str) -> ResearchResult:
        self.calls += 1
        raise self.error


class _BlockingProvider:
    def __init__(self) -> None:
        self.started = asyncio.Event()

    async def search(self, query: str) -> ResearchResult:
        self.started.set()
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


class _YieldingRedis:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        await asyncio.sleep(0)
        self.values[key] = value
        return True

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def delete(self, key: str) -> int:
        return 1 if self.values.pop(key, None) is not None else 0


class _DeletingProvider:
    def __init__(self, store: InMemoryProgressStore, generation_id: str) -> None:
        self.store = store
        self.generation_id = generation_id

    async def search(self, query: str) -> ResearchResult:
        await self.store.delete(self.generation_id)
        return template_research(query)


async def _run(
    provider: object,
    *,
    input_value: str = "electric vehicles",
    kind: str = "keyword",
    options: GenerationOptions | None = None,
    store: InMemoryProgressStore | None = None,
    generation_id: str = "gen-test",
) -> GenerationRecord | None:
    if store is None:
        store = InMemoryProgressStore(ttl_seconds=600)
    options = options or GenerationOptions(word_count=800)
    await store.create(
        GenerationRecord.new(generation_id, input=input_value, type=kind, options=options)
    )
    pipeline = GenerationPipeline(store, provider, delay_scale=0)  # type: ignore[arg-type]
    await pipeline.run(generation_id, input_value, kind, options)  # type: ignore[arg-type]
    return await store.get(generation_id)


def test_build_research_queries_has_five_variants() -> None:
    queries = build_research_queries("solar power", 2030)

    assert len(queries) == 5
    assert all(query.startswith("solar power ") for query in queries)
    assert "2031" in queries[-1]


def test_source_relevance_decreases_and_stays_in_range() -> None:
    assert source_relevance(0, 0) == 0.9
    assert source_relevance(1, 1) == 0.75
    assert source_relevance(9, 9) == 0.0


def test_placeholder_source_is_marked_as_fallback() -> None:
    source = placeholder_source("Solar Power", 2, 2030)

    assert source.url == "https://research-fallback.example.com/solar-power-3"
    assert source.title == "Solar Power Research 2028"
    assert source.relevance == 0.5


def test_resolve_topic_uses_url_path() -> None:
    assert resolve_topic("  solar power ", "keyword") == "solar power"
    assert resolve_topic("https://www.example.com/guides/electric-vehicles.html", "url") == (
        "guides electric vehicles"
    )


@pytest.mark.asyncio
async def test_pipeline_completes_all_stages() -> None:
    record = await _run(ResearchProvider(variant="template"))

    assert record is not None
    assert record.status == "completed"
    assert record.current_step == 5
    assert [stage.status for stage in record.steps] == ["completed"] * 6
    assert all(stage.progress == 100.0 for stage in record.steps)
    assert record.completed_at is not None
    assert record.completed_at >= record.start_time
    assert record.error is None


@pytest.mark.asyncio
async def test_pipeline_records_research_and_analysis() -> None:
    record = await _run(ResearchProvider(variant="template"))

    assert record is not None
    assert len(record.sources) == 15
    assert record.sources[0].relevance == 0.9
    assert record.sources[-1].relevance == 0.4
    assert record.key_points[0] == "15 high-quality sources analyzed"
    assert "Market growth rate exceeds industry average" in record.key_points
    assert "75%" in record.statistics


@pytest.mark.asyncio
async def test_pipeline_article_tracks_topic_and_word_count() -> None:
    record = await _run(ResearchProvider(variant="template"))

    assert record is not None
    article = record.article
    assert article is not None
    assert "electric vehicles" in article.title
    assert 400 <= article.word_count <= 1600
    assert article.keywords == ["electric vehicles"]
    assert article.seo_score == 95
    assert article.meta_description.startswith("Comprehensive guide to electric vehicles")
    assert record.article_preview == article.content
    assert record.seo_data is not None
    assert record.seo_data.seo_score == 95
    assert list(record.seo_data.keyword_density) == ["electric vehicles"]


@pytest.mark.asyncio
async def test_pipeline_uses_target_keywords_for_seo() -> None:
    options = GenerationOptions(word_count=500, target_keywords=["ev charging", "  "])

    record = await _run(ResearchProvider(variant="template"), options=options)

    assert record is not None
    assert record.article is not None
    assert record.article.keywords == ["ev charging"]
    assert record.seo_data is not None
    assert list(record.seo_data.keyword_density) == ["ev charging"]


@pytest.mark.asyncio
async def test_pipeline_records_placeholder_sources_when_queries_fail() -> None:
    provider = _FailingProvider(ProviderError("perplexity", "rate limited"))

    record = await _run(provider)

    assert record is not None
    assert provider.calls == 5
    assert record.status == "completed"
    assert len(record.sources) == 5
    assert all(
        source.url.startswith("https://research-fallback.example.com/electric-vehicles-")
        for source in record.sources
    )
    assert record.statistics == list(CANNED_STATISTICS)
    assert record.key_points[0] == "5 high-quality sources analyzed"


@pytest.mark.asyncio
async def test_pipeline_stage_failure_marks_single_error_stage() -> None:
    record = await _run(_FailingProvider(RuntimeError("boom")))

    assert record is not None
    assert record.status == "error"
    assert record.error == "Stage search failed: boom"
    assert record.current_step == 1
    assert [stage.status for stage in record.steps] == [
        "completed",
        "error",
        "pending",
        "pending",
        "pending",
        "pending",
    ]
    assert record.completed_at is None


@pytest.mark.asyncio
async def test_pipeline_stops_quietly_when_record_disappears() -> None:
    store = InMemoryProgressStore(ttl_seconds=600)

    record = await _run(_DeletingProvider(store, "gen-gone"), store=store, generation_id="gen-gone")

    assert record is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_task_manager_cancel_marks_record_cancelled() -> None:
    store = InMemoryProgressStore(ttl_seconds=600)
    provider = _BlockingProvider()
    manager = GenerationTaskManager(
        store=store,
        pipeline=GenerationPipeline(store, provider, delay_scale=0),  # type: ignore[arg-type]
    )
    await manager.start(GenerationRecord.new("gen-cancel", input="solar power", type="topic"))
    await asyncio.wait_for(provider.started.wait(), timeout=5)

    assert manager.is_running("gen-cancel")
    assert await manager.cancel("gen-cancel") is True
    assert await manager.cancel("gen-cancel") is False

    record = await store.get("gen-cancel")
    assert record is not None
    assert record.status == "cancelled"
    assert record.error == CANCELLED_MESSAGE
    assert record.steps[1].status == "error"
    assert record.steps[1].description == CANCELLED_MESSAGE
    assert not manager.is_running("gen-cancel")


@pytest.mark.asyncio
async def test_task_manager_rejects_duplicate_runs_and_shuts_down() -> None:
    store = InMemoryProgressStore(ttl_seconds=600)
    provider = _BlockingProvider()
    manager = GenerationTaskManager(
        store=store,
        pipeline=GenerationPipeline(store, provider, delay_scale=0),  # type: ignore[arg-type]
    )
    record = GenerationRecord.new("gen-dup", input="solar power", type="keyword")
    await manager.start(record)
    await asyncio.wait_for(provider.started.wait(), timeout=5)

    with pytest.raises(GenerationAlreadyRunningError):
        await manager.start(record)

    await manager.shutdown()

    assert manager.running_count == 0
    stored = await store.get("gen-dup")
    assert stored is not None
    assert stored.status == "cancelled"


@pytest.mark.asyncio
async def test_task_manager_wait_returns_finished_record() -> None:
    store = InMemoryProgressStore(ttl_seconds=600)
    manager = GenerationTaskManager(
        store=store,
        pipeline=GenerationPipeline(store, ResearchProvider(variant="template"), delay_scale=0),
    )
    await manager.start(
        GenerationRecord.new(
            "gen-wait",
            input="solar power",
            type="keyword",
            options=GenerationOptions(word_count=300),
        )
    )

    await manager.wait("gen-wait")

    record = await store.get("gen-wait")
    assert record is not None
    assert record.status == "completed"
    assert record.article is not None


@pytest.mark.asyncio
async def test_task_manager_uses_injected_empty_store() -> None:
    store = InMemoryProgressStore(ttl_seconds=600)
    manager = GenerationTaskManager(
        store=store,
        pipeline=GenerationPipeline(store, ResearchProvider(variant="template"), delay_scale=0),
    )

    assert manager.store is store

    await manager.start(GenerationRecord.new("gen-empty", input="solar power", type="keyword"))
    await manager.wait("gen-empty")

    assert len(store) == 1
    record = await store.get("gen-empty")
    assert record is not None
    assert record.status == "completed"


@pytest.mark.asyncio
async def test_task_manager_cancel_before_first_stage_marks_record_cancelled() -> None:
    store = InMemoryProgressStore(ttl_seconds=600)
    manager = GenerationTaskManager(
        store=store,
        pipeline=GenerationPipeline(store, ResearchProvider(variant="template"), delay_scale=0),
    )
    await manager.start(GenerationRecord.new("gen-early", input="solar power", type="topic"))

    assert await manager.cancel("gen-early") is True

    record = await store.get("gen-early")
    assert record is not None
    assert record.status == "cancelled"
    assert record.error == CANCELLED_MESSAGE
    assert record.current_step == 0
    assert record.steps[0].status == "error"
    assert record.steps[0].description == CANCELLED_MESSAGE


@pytest.mark.asyncio
async def test_task_manager_refuses_concurrent_start_while_record_is_written() -> None:
    store = RedisProgressStore(redis_client=_YieldingRedis(), ttl_seconds=600)  # type: ignore[arg-type]
    manager = GenerationTaskManager(
        store=store,
        pipeline=GenerationPipeline(store, _BlockingProvider(), delay_scale=0),  # type: ignore[arg-type]
    )
    record = GenerationRecord.new("gen-race", input="solar power", type="keyword")

    results = await asyncio.gather(
        manager.start(record),
        manager.start(record),
        return_exceptions=True,
    )

    assert sum(isinstance(result, GenerationAlreadyRunningError) for result in results) == 1
    assert sum(isinstance(result, GenerationRecord) for result in results) == 1
    assert manager.running_count == 1

    await manager.shutdown()

    stored = await store.get("gen-race")
    assert stored is not None
    assert stored.status == "cancelled"
