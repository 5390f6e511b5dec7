"""Article generation: pydantic-ai writer with template fallback."""

from __future__ import annotations

import logging
from collections.abc import Callable

from contentflow.agents.article_writer import ArticleWriterAgent, ArticleWriterInput
from contentflow.config import settings
from contentflow.core.ids import new_article_id
from contentflow.core.text import count_words, strip_html, truncate
from contentflow.schemas.automation import ContentRequest
from contentflow.schemas.content import Article, Tone
from contentflow.schemas.research import GenerationResult, ResearchData
from contentflow.services.content_templates import (
    choose_title,
    extract_main_topic,
    render_template_article,
    template_meta_description,
)

logger = logging.getLogger(__name__)

META_DESCRIPTION_LIMIT = 160


def build_article_prompt(request: ContentRequest, research: ResearchData) -> str:
    """Research-aware writing brief for an automation request."""
    key_points = "\n- ".join(research.key_points)
    sources = "\n".join(f"{source.title}: {source.excerpt}" for source in research.sources)
    keywords = ", ".join(request.target_keywords) or request.input
    return (
        f'Write a comprehensive, well-researched blog article about "{request.input}".\n\n'
        "RESEARCH DATA:\n"
        f"Key Points:\n- {key_points}\n\n"
        f"Statistics: {', '.join(research.statistics)}\n\n"
        f"Sources:\n{sources}\n\n"
        "REQUIREMENTS:\n"
        f"- Word count: {request.word_count} words\n"
        f"- Tone: {request.tone}\n"
        "- Include proper headings (H1, H2, H3)\n"
        "- Use keywords naturally for SEO\n"
        "- Include factual information and statistics\n"
        "- Add a compelling introduction and conclusion\n"
        "- Use bullet points and numbered lists where appropriate\n\n"
        f"TARGET KEYWORDS: {keywords}"
    )


class ContentGenerator:
    """Produce title, HTML body, and meta description for a prompt."""

    def __init__(
        self,
        writer_factory: Callable[[], ArticleWriterAgent] | None = None,
    ) -> None:
        self._writer_factory = writer_factory
        self._writer: ArticleWriterAgent | None = None

    @property
    def llm_enabled(self) -> bool:
        return self._writer_factory is not None or bool(settings.generation_model)

    def _get_writer(self) -> ArticleWriterAgent:
        if self._writer is None:
            factory = self._writer_factory or ArticleWriterAgent
            self._writer = factory()
        return self._writer

    def generate_from_templates(
        self,
        prompt: str,
        tone: Tone = "professional",
        research_data: ResearchData | None = None,
    ) -> GenerationResult:
        topic = extract_main_topic(prompt)
        title = choose_title(topic)
        return GenerationResult(
            title=title,
            content=render_template_article(topic, title, tone, research_data),
            meta_description=template_meta_description(topic),
        )

    async def generate(
        self,
        prompt: str,
        word_count: int,
        tone: Tone = "professional",
        research_data: ResearchData | None = None,
    ) -> GenerationResult:
        """Generate an article, degrading to templates when the writer fails."""
        if not self.llm_enabled:
            return self.generate_from_templates(prompt, tone, research_data)

        try:
            output = await self._get_writer().run(
                ArticleWriterInput(
                    prompt=prompt,
                    word_count=word_count,
                    tone=tone,
                    research=research_data,
                )
            )
        except Exception as e:
            logger.warning(
                "Article writer failed, using template fallback",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return self.generate_from_templates(prompt, tone, research_data)

        meta_description = output.meta_description or truncate(
            strip_html(output.content), META_DESCRIPTION_LIMIT
        )
        return GenerationResult(
            title=output.title,
            content=output.content,
            meta_description=truncate(meta_description, META_DESCRIPTION_LIMIT),
        )

    async def generate_article(
        self,
        request: ContentRequest,
        research: ResearchData,
    ) -> Article:
        """Generate the article for an automation request."""
        result = await self.generate(
            build_article_prompt(request, research),
            request.word_count,
            request.tone,
            research,
        )
        article = Article(
            id=new_article_id(),
            request_id=request.id,
            title=result.title,
            content=result.content,
            meta_description=result.meta_description,
            keywords=list(request.target_keywords) or [request.input],
            word_count=count_words(strip_html(result.content)),
            sources=list(research.sources),
        )
        logger.info(
            "Article generated",
            extra={
                "article_id": article.id,
                "request_id": request.id,
                "word_count": article.word_count,
            },
        )
        return article


_content_generator: ContentGenerator | None = None


def get_content_generator() -> ContentGenerator:
    """Get singleton content generator."""
    global _content_generator
    if _content_generator is None:
        _content_generator = ContentGenerator()
    return _content_generator
