"""Unit tests for template content generation and the LLM writer fallback."""

from __future__ import annotations

import pytest

from contentflow.agents.article_writer import ArticleWriterInput, ArticleWriterOutput
from contentflow.config import settings
from contentflow.core.text import count_words, strip_html
from contentflow.schemas.automation import ContentRequest
from contentflow.schemas.research import ResearchData
from contentflow.services.content_generator import ContentGenerator, build_article_prompt
from contentflow.services.content_templates import (
    DEFAULT_TOPIC,
    LONGFORM_STEPS,
    TITLE_TEMPLATES,
    URL_FALLBACK_TOPIC,
    choose_title,
    extract_main_topic,
    longform_title,
    render_longform_section,
    topic_from_url,
)


class _FailingWriter:
    async def run(self, input_data: ArticleWriterInput) -> ArticleWriterOutput:
        raise RuntimeError("model unavailable")


class _StaticWriter:
    def __init__(self, output: ArticleWriterOutput) -> None:
        self.output = output
        self.inputs: list[ArticleWriterInput] = []

    async def run(self, input_data: ArticleWriterInput) -> ArticleWriterOutput:
        self.inputs.append(input_data)
        return self.output


@pytest.fixture(autouse=True)
def _no_llm_model(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "generation_model", None)


@pytest.mark.parametrize(
    ("prompt", "expected"),
    [
        ('Write a comprehensive article about "solar power"', "solar power"),
        ("Write about renewable energy", "renewable"),
        ("Blog post: the future", "future"),
        ("a an it", DEFAULT_TOPIC),
        ('Empty quotes "" then kubernetes', "Empty"),
    ],
)
def test_extract_main_topic(prompt: str, expected: str) -> None:
    assert extract_main_topic(prompt) == expected


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://example.com/blog/how_to-grow.php", "blog how to grow"),
        ("https://www.example.com/", "example.com"),
        ("https://example.com/solar%20panels", "solar panels"),
        ("not a url", URL_FALLBACK_TOPIC),
    ],
)
def test_topic_from_url(url: str, expected: str) -> None:
    assert topic_from_url(url) == expected


def test_choose_title_is_stable_per_topic() -> None:
    title = choose_title("solar power")

    assert title == choose_title("solar power")
    assert title in {template.format(topic="solar power") for template in TITLE_TEMPLATES}


def test_generate_from_templates_uses_topic_and_tone() -> None:
    generator = ContentGenerator()

    result = generator.generate_from_templates('Write about "solar power"', tone="casual")

    assert "solar power" in result.title
    assert result.content.startswith(f"<h1>{result.title}</h1>")
    assert "If you've been hearing about solar power" in result.content
    assert "<h2>" in result.content and "<ul>" in result.content and "<ol>" in result.content
    assert result.meta_description.startswith("Discover everything you need to know about solar power")


def test_generate_from_templates_includes_research() -> None:
    research = ResearchData(
        key_points=["Solar capacity doubled in three years across the surveyed markets"],
        statistics=["45%"],
        quotes=["Solar is the cheapest electricity in history"],
    )

    result = ContentGenerator().generate_from_templates('"solar power"', research_data=research)

    assert "What the Research Says About solar power" in result.content
    assert "Solar capacity doubled" in result.content
    assert "45%" in result.content
    assert "<blockquote>" in result.content


def test_generate_from_templates_escapes_topic() -> None:
    result = ContentGenerator().generate_from_templates('"<script>alert(1)</script>"')

    assert "<script>" not in result.content


@pytest.mark.asyncio
async def test_generate_without_model_uses_templates() -> None:
    generator = ContentGenerator()

    result = await generator.generate('"solar power"', word_count=800)

    assert generator.llm_enabled is False
    assert "solar power" in result.title


@pytest.mark.asyncio
async def test_generate_falls_back_when_writer_fails() -> None:
    generator = ContentGenerator(writer_factory=_FailingWriter)  # type: ignore[arg-type]

    result = await generator.generate('"solar power"', word_count=800)

    assert generator.llm_enabled is True
    assert result.title == choose_title("solar power")


@pytest.mark.asyncio
async def test_generate_uses_writer_output_and_fills_meta_description() -> None:
    writer = _StaticWriter(
        ArticleWriterOutput(
            title="Solar Power in 2026",
            content="<h1>Solar Power in 2026</h1><p>" + "Panels keep getting cheaper. " * 20 + "</p>",
        )
    )
    generator = ContentGenerator(writer_factory=lambda: writer)  # type: ignore[arg-type,return-value]

    result = await generator.generate("solar power", word_count=600, tone="friendly")

    assert result.title == "Solar Power in 2026"
    assert len(result.meta_description) <= 160
    assert result.meta_description.startswith("Solar Power in 2026 Panels keep")
    assert result.meta_description.endswith("...")
    assert writer.inputs[0].word_count == 600
    assert writer.inputs[0].tone == "friendly"


@pytest.mark.asyncio
async def test_generate_article_counts_visible_words() -> None:
    request = ContentRequest(
        id="req-1",
        type="keyword",
        input="solar power",
        target_keywords=[],
        word_count=800,
        tone="professional",
    )

    article = await ContentGenerator().generate_article(request, ResearchData())

    assert article.request_id == "req-1"
    assert article.keywords == ["solar power"]
    assert article.word_count == count_words(strip_html(article.content))
    assert "solar power" in article.title


def test_build_article_prompt_lists_research_and_keywords() -> None:
    request = ContentRequest(
        id="req-1",
        type="topic",
        input="solar power",
        target_keywords=["solar panels", "net metering"],
        word_count=1200,
        tone="authoritative",
    )
    research = ResearchData(key_points=["Point one", "Point two"], statistics=["45%"])

    prompt = build_article_prompt(request, research)

    assert prompt.startswith('Write a comprehensive, well-researched blog article about "solar power"')
    assert "- Point one\n- Point two" in prompt
    assert "Word count: 1200 words" in prompt
    assert prompt.endswith("TARGET KEYWORDS: solar panels, net metering")


def test_longform_first_section_carries_title() -> None:
    section = render_longform_section(0, "solar power", 2030, 12, word_budget=100)

    assert f"<h1>{longform_title('solar power', 2030)}</h1>" in section
    assert "12 authoritative sources" in section


def test_longform_sections_respect_word_budget() -> None:
    small = render_longform_section(2, "solar power", 2030, 5, word_budget=1)
    large = render_longform_section(2, "solar power", 2030, 5, word_budget=10_000)

    assert small.startswith("<h2>Market Landscape and Industry Analysis</h2>")
    assert count_words(strip_html(small)) < count_words(strip_html(large))
    assert "Asia-Pacific" in large
    assert "Asia-Pacific" not in small


@pytest.mark.parametrize("index", [-1, len(LONGFORM_STEPS)])
def test_longform_section_index_out_of_range(index: int) -> None:
    with pytest.raises(ValueError):
        render_longform_section(index, "solar power", 2030, 5, word_budget=100)
