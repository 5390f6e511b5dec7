"""Six-stage generation pipeline writing progress into the progress store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from contentflow.config import settings
from contentflow.core.exceptions import (
    GenerationNotFoundError,
    ProviderError,
    StageExecutionError,
)
from contentflow.core.ids import new_article_id
from contentflow.core.text import count_words, slugify, strip_html
from contentflow.schemas.content import Article, InputKind, Source
from contentflow.schemas.generation import (
    STAGE_COUNT,
    STAGE_DEFINITIONS,
    GenerationOptions,
    GenerationRecord,
)
from contentflow.services.content_templates import (
    LONGFORM_STEPS,
    longform_title,
    render_longform_section,
    topic_from_url,
)
from contentflow.services.progress_store import (
    GenerationPatch,
    ProgressStore,
    SetField,
    SetStage,
)
from contentflow.services.research_extraction import (
    extract_statistics,
    extract_topic_sentences,
)
from contentflow.services.research_provider import ResearchProvider, get_research_provider
from contentflow.services.seo_scorer import (
    SEO_STEP_INCREMENT,
    SEO_STEPS,
    score_generation,
)

logger = logging.getLogger(__name__)

INIT_STAGE, SEARCH_STAGE, ANALYSIS_STAGE, GENERATION_STAGE, SEO_STAGE, COMPLETION_STAGE = range(
    STAGE_COUNT
)

INIT_DELAY_SECONDS = 1.0
SEARCH_DELAY_SECONDS = 1.0
ANALYSIS_DELAY_SECONDS = 1.0
SECTION_DELAY_SECONDS = 1.8
SEO_DELAY_SECONDS = 0.8

ANALYSIS_STEPS: tuple[str, ...] = (
    "Extracting key insights...",
    "Identifying statistics...",
    "Building content outline...",
    "Validating information...",
)
CANNED_INSIGHTS: tuple[str, ...] = (
    "Market growth rate exceeds industry average",
    "Implementation success rate shows positive trends",
)
CANNED_STATISTICS: tuple[str, ...] = ("85%", "$1.2B", "67%", "3.5x")
CANCELLED_MESSAGE = "Generation cancelled"


def build_research_queries(topic: str, year: int) -> list[str]:
    """Five research query variants for a topic."""
    return [
        f"{topic} latest trends {year} market analysis research",
        f"{topic} industry statistics {year} comprehensive report",
        f"{topic} best practices implementation guide {year} expert insights",
        f"{topic} case studies {year} real world applications",
        f"{topic} future predictions {year + 1} industry outlook",
    ]


def source_relevance(query_index: int, source_index: int) -> float:
    value = 0.9 - 0.1 * query_index - 0.05 * source_index
    return round(min(max(value, 0.0), 1.0), 2)


def placeholder_source(topic: str, query_index: int, year: int) -> Source:
    """Stand-in source recorded when a research query fails."""
    return Source(
        url=f"https://research-fallback.example.com/{slugify(topic)}-{query_index + 1}",
        title=f"{topic} Research {year - query_index}",
        excerpt=f"Comprehensive analysis of {topic} trends and market dynamics...",
        relevance=round(min(max(0.7 - 0.1 * query_index, 0.0), 1.0), 2),
    )


def resolve_topic(input_value: str, kind: InputKind) -> str:
    if kind == "url":
        return topic_from_url(input_value)
    return input_value.strip()


def _progress(step: int, total: int) -> float:
    return round((step + 1) / total * 100, 2)


@dataclass(slots=True)
class PipelineRun:
    """Per-run state shared between stages."""

    generation_id: str
    topic: str
    options: GenerationOptions
    year: int
    research_text: str = ""


class GenerationPipeline:
    """Drive one generation id through the fixed stages.

    Every sub-step writes its partial results to the store so pollers see
    progress. Stage failures are captured into the record rather than raised.
    """

    def __init__(
        self,
        store: ProgressStore,
        provider: ResearchProvider | None = None,
        *,
        delay_scale: float | None = None,
    ) -> None:
        self.store = store
        self.provider = provider if provider is not None else get_research_provider()
        self.delay_scale = settings.pipeline_delay_scale if delay_scale is None else delay_scale

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds * self.delay_scale)

    async def _update(self, generation_id: str, *patches: GenerationPatch) -> GenerationRecord:
        record = await self.store.apply(generation_id, *patches)
        if record is None:
            raise GenerationNotFoundError(generation_id)
        return record

    async def _snapshot(self, generation_id: str) -> GenerationRecord:
        record = await self.store.get(generation_id)
        if record is None:
            raise GenerationNotFoundError(generation_id)
        return record

    async def _advance(self, generation_id: str, index: int, *extra: GenerationPatch) -> None:
        """Complete stage `index` and activate the next one."""
        await self._update(
            generation_id,
            *extra,
            SetStage(index, "status", "completed"),
            SetStage(index, "progress", 100.0),
            SetField("current_step", index + 1),
            SetStage(index + 1, "status", "active"),
        )

    async def run(
        self,
        generation_id: str,
        input_value: str,
        kind: InputKind,
        options: GenerationOptions,
    ) -> None:
        """Run all stages; only cancellation propagates."""
        run = PipelineRun(
            generation_id=generation_id,
            topic=resolve_topic(input_value, kind),
            options=options,
            year=datetime.now(timezone.utc).year,
        )
        logger.info(
            "Generation started",
            extra={"generation_id": generation_id, "type": kind, "topic": run.topic},
        )
        stages = (
            self._initialize,
            self._research,
            self._analyze,
            self._generate,
            self._optimize,
            self._complete,
        )
        current_stage = INIT_STAGE
        try:
            for current_stage, stage in enumerate(stages):
                try:
                    await stage(run)
                except (GenerationNotFoundError, StageExecutionError, asyncio.CancelledError):
                    raise
                except Exception as e:
                    stage_id = STAGE_DEFINITIONS[current_stage][0]
                    raise StageExecutionError(stage_id, str(e) or type(e).__name__) from e
        except GenerationNotFoundError:
            logger.warning(
                "Generation record missing, stopping run",
                extra={"generation_id": generation_id, "stage": current_stage},
            )
        except asyncio.CancelledError:
            logger.info(
                "Generation cancelled",
                extra={"generation_id": generation_id, "stage": current_stage},
            )
            await self._mark_failed(generation_id, "cancelled", CANCELLED_MESSAGE)
            raise
        except StageExecutionError as e:
            logger.exception(
                "Generation stage failed",
                extra={"generation_id": generation_id, "stage": e.stage_id},
            )
            await self._mark_failed(generation_id, "error", e.message)
        else:
            logger.info("Generation completed", extra={"generation_id": generation_id})

    async def mark_cancelled(self, generation_id: str) -> None:
        """Record cancellation for a run cancelled before its first stage ran."""
        record = await self.store.get(generation_id)
        if record is None or record.status != "started":
            return
        await self._mark_failed(generation_id, "cancelled", CANCELLED_MESSAGE)

    async def _mark_failed(self, generation_id: str, status: str, message: str) -> None:
        record = await self.store.get(generation_id)
        if record is None:
            return
        patches: list[GenerationPatch] = [
            SetStage(record.current_step, "status", "error"),
            SetField("status", status),
            SetField("error", message),
        ]
        if status == "cancelled":
            patches.append(SetStage(record.current_step, "description", message))
        await self.store.apply(generation_id, *patches)

    async def _initialize(self, run: PipelineRun) -> None:
        await self._update(
            run.generation_id,
            SetStage(INIT_STAGE, "description", f'Preparing research plan for "{run.topic}"...'),
        )
        await self._sleep(INIT_DELAY_SECONDS)
        await self._advance(run.generation_id, INIT_STAGE)

    async def _research(self, run: PipelineRun) -> None:
        queries = build_research_queries(run.topic, run.year)
        sources: list[Source] = []
        key_points: list[str] = []
        research_text: list[str] = []

        for i, query in enumerate(queries):
            await self._update(
                run.generation_id,
                SetStage(SEARCH_STAGE, "description", f'Researching: "{query}"'),
                SetStage(SEARCH_STAGE, "progress", _progress(i, len(queries))),
            )

            try:
                result = await self.provider.search(query)
            except ProviderError as e:
                logger.warning(
                    "Research query failed, recording placeholder source",
                    extra={"generation_id": run.generation_id, "query": query, "error": e.message},
                )
                sources.append(placeholder_source(run.topic, i, run.year))
            else:
                now = datetime.now(timezone.utc)
                for j, source in enumerate(result.sources):
                    sources.append(
                        source.model_copy(
                            update={"relevance": source_relevance(i, j), "timestamp": now}
                        )
                    )
                key_points.extend(extract_topic_sentences(result.content, run.topic))
                research_text.append(result.content)

            await self._update(
                run.generation_id,
                SetField("sources", list(sources)),
                SetField("key_points", list(key_points)),
            )
            await self._sleep(SEARCH_DELAY_SECONDS)

        run.research_text = "\n".join(research_text)
        await self._advance(run.generation_id, SEARCH_STAGE)

    async def _analyze(self, run: PipelineRun) -> None:
        for i, description in enumerate(ANALYSIS_STEPS):
            record = await self._update(
                run.generation_id,
                SetStage(ANALYSIS_STAGE, "description", description),
                SetStage(ANALYSIS_STAGE, "progress", _progress(i, len(ANALYSIS_STEPS))),
            )
            await self._sleep(ANALYSIS_DELAY_SECONDS)

            if i == 0:
                summary = f"{len(record.sources)} high-quality sources analyzed"
                await self._update(
                    run.generation_id,
                    SetField("key_points", [summary, *CANNED_INSIGHTS, *record.key_points]),
                )
            elif i == 1:
                statistics = extract_statistics(run.research_text) or list(CANNED_STATISTICS)
                await self._update(run.generation_id, SetField("statistics", statistics))

        await self._advance(run.generation_id, ANALYSIS_STAGE)

    async def _generate(self, run: PipelineRun) -> None:
        section_budget = max(run.options.word_count // len(LONGFORM_STEPS), 1)
        record = await self._snapshot(run.generation_id)
        source_count = len(record.sources)
        sections: list[str] = []

        for i, description in enumerate(LONGFORM_STEPS):
            await self._update(
                run.generation_id,
                SetStage(GENERATION_STAGE, "description", description),
                SetStage(GENERATION_STAGE, "progress", _progress(i, len(LONGFORM_STEPS))),
            )
            await self._sleep(SECTION_DELAY_SECONDS)
            sections.append(
                render_longform_section(i, run.topic, run.year, source_count, section_budget)
            )
            await self._update(run.generation_id, SetField("article_preview", "\n\n".join(sections)))

        content = "\n\n".join(sections)
        article = Article(
            id=new_article_id(),
            title=longform_title(run.topic, run.year),
            content=content,
            keywords=list(run.options.target_keywords) or [run.topic],
            word_count=count_words(strip_html(content)),
            sources=list(record.sources),
        )
        logger.info(
            "Article generated",
            extra={
                "generation_id": run.generation_id,
                "article_id": article.id,
                "word_count": article.word_count,
                "target_word_count": run.options.word_count,
            },
        )
        await self._advance(run.generation_id, GENERATION_STAGE, SetField("article", article))

    async def _optimize(self, run: PipelineRun) -> None:
        increments: list[int] = []
        for i, description in enumerate(SEO_STEPS):
            await self._update(
                run.generation_id,
                SetStage(SEO_STAGE, "description", description),
                SetStage(SEO_STAGE, "progress", _progress(i, len(SEO_STEPS))),
            )
            await self._sleep(SEO_DELAY_SECONDS)
            increments.append(SEO_STEP_INCREMENT)

        record = await self._snapshot(run.generation_id)
        if record.article is None:
            raise StageExecutionError("seo", "no article to optimize")

        keywords = list(run.options.target_keywords) or [run.topic]
        seo_data = score_generation(record.article, keywords, increments)
        scored = record.article.model_copy(
            update={
                "seo_score": seo_data.seo_score,
                "meta_description": seo_data.meta_description,
            }
        )
        await self._advance(
            run.generation_id,
            SEO_STAGE,
            SetField("seo_data", seo_data),
            SetField("article", scored),
        )

    async def _complete(self, run: PipelineRun) -> None:
        await self._update(
            run.generation_id,
            SetStage(COMPLETION_STAGE, "status", "completed"),
            SetStage(COMPLETION_STAGE, "progress", 100.0),
            SetStage(COMPLETION_STAGE, "description", "Article ready"),
            SetField("status", "completed"),
            SetField("completed_at", datetime.now(timezone.utc)),
        )
