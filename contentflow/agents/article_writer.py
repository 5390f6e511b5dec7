"""LLM article writer producing title, HTML body, and meta description."""

from __future__ import annotations

from pydantic import BaseModel, Field

from contentflow.agents.base_agent import BaseAgent
from contentflow.schemas.content import Tone
from contentflow.schemas.research import ResearchData


class ArticleWriterInput(BaseModel):
    """Input payload for article writing."""

    prompt: str
    word_count: int
    tone: Tone
    research: ResearchData | None = None


class ArticleWriterOutput(BaseModel):
    """Structured article output."""

    title: str = Field(min_length=1)
    content: str = Field(min_length=1, description="Article body as semantic HTML")
    meta_description: str = Field(default="", max_length=200)


class ArticleWriterAgent(BaseAgent[ArticleWriterInput, ArticleWriterOutput]):
    """Write a research-grounded, SEO-friendly article."""

    temperature = 0.6

    @property
    def system_prompt(self) -> str:
        return """You are a senior content writer producing SEO-optimized blog articles.

Rules:
- Output the body as semantic HTML: one <h1>, <h2>/<h3> sections, <p>, <ul>/<ol>.
- Use the research data for facts and statistics; never invent sources.
- Use the target keywords naturally; avoid keyword stuffing.
- Match the requested tone and stay close to the requested word count.
- meta_description: a single sentence of at most 160 characters."""

    @property
    def output_type(self) -> type[ArticleWriterOutput]:
        return ArticleWriterOutput

    def _build_prompt(self, input_data: ArticleWriterInput) -> str:
        lines = [
            input_data.prompt.strip(),
            "",
            f"Word count: {input_data.word_count}",
            f"Tone: {input_data.tone}",
        ]
        research = input_data.research
        if research is not None:
            if research.key_points:
                lines.append("")
                lines.append("Key points:")
                lines.extend(f"- {point}" for point in research.key_points)
            if research.statistics:
                lines.append("")
                lines.append(f"Statistics: {', '.join(research.statistics)}")
            if research.sources:
                lines.append("")
                lines.append("Sources:")
                lines.extend(
                    f"- {source.title} ({source.url}): {source.excerpt}"
                    for source in research.sources
                )
        return "\n".join(lines)
