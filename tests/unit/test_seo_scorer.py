"""Unit tests for SEO scoring and content analysis."""

from __future__ import annotations

from contentflow.schemas.content import Article
from contentflow.services.seo_scorer import (
    GENERATION_SUGGESTIONS,
    SEO_STEP_INCREMENT,
    SEO_STEPS,
    analyze_content,
    extract_headings,
    keyword_density,
    keyword_occurrences,
    readability_score,
    score_generation,
)


def _article(content: str) -> Article:
    return Article(id="article-1", title="Solar Power Guide", content=content)


def test_keyword_occurrences_respects_word_boundaries() -> None:
    text = "Solar power wins. SOLAR POWER grows. solar powered homes"

    assert keyword_occurrences(text, "solar power") == 2
    assert keyword_occurrences(text, "  ") == 0


def test_keyword_density_per_hundred_words() -> None:
    density = keyword_density("solar power is great and solar power wins", ["solar power", "wind"])

    assert density == {"solar power": 25.0, "wind": 0.0}


def test_keyword_density_handles_empty_text() -> None:
    assert keyword_density("", ["solar"]) == {"solar": 0.0}


def test_score_generation_is_fixed_increment_sum() -> None:
    article = _article("<h1>Solar Power Guide</h1><p>solar power everywhere</p>")

    result = score_generation(article, ["solar power"], [SEO_STEP_INCREMENT] * len(SEO_STEPS))

    assert result.seo_score == 95
    assert result.meta_description.startswith("Comprehensive guide to solar power.")
    assert result.suggestions == list(GENERATION_SUGGESTIONS)
    assert result.keyword_density["solar power"] > 0


def test_score_generation_caps_at_one_hundred() -> None:
    result = score_generation(_article("<p>x</p>"), [], [50, 50])

    assert result.seo_score == 100
    assert "Solar Power Guide" in result.meta_description


def test_extract_headings_strips_inner_markup() -> None:
    html = "<h1>Main <em>Title</em></h1><h2 class='x'>Section</h2><h3></h3>"

    assert extract_headings(html) == [(1, "Main Title"), (2, "Section")]


def test_analyze_content_short_document() -> None:
    html = "<h1>Solar Power</h1><p>Short intro about solar power.</p>"

    analysis = analyze_content(html, ["solar power"])

    assert analysis.score == 30
    assert analysis.meta_title == "Solar Power"
    assert analysis.meta_description == "Short intro about solar power."
    assert analysis.keyword_density == {"solar power": 28.57}
    assert analysis.heading_structure[0].level == 1
    assert analysis.heading_structure[0].keywords == ["solar power"]
    assert any("at least 500 words" in suggestion for suggestion in analysis.suggestions)
    assert any("Reduce keyword density" in suggestion for suggestion in analysis.suggestions)
    assert any("bullet points" in suggestion for suggestion in analysis.suggestions)
    assert not any("H1 heading" in suggestion for suggestion in analysis.suggestions)


def test_analyze_content_long_structured_document() -> None:
    filler = " ".join(["renewable energy keeps expanding across many regions"] * 20)
    paragraphs = "".join(f"<p>{filler} solar power matters.</p>" for _ in range(8))
    html = (
        "<h1>The Solar Power Handbook</h1>"
        "<h2>Why it matters</h2><h2>How to start</h2>"
        f"{paragraphs}<ul><li>Panels</li><li>Inverters</li></ul>"
    )

    analysis = analyze_content(html, ["solar power"])

    # 30 length + 10 H1 + 10 H2 + 5 keyword + 5 list + 5 paragraph + 10 long body
    assert analysis.score == 75
    assert analysis.suggestions == []


def test_analyze_content_without_h1_uses_keyword_title() -> None:
    analysis = analyze_content("<p>Plain text about wind farms.</p>", ["wind farms", ""])

    assert analysis.meta_title == "The Complete wind farms Guide"
    assert list(analysis.keyword_density) == ["wind farms"]
    assert "Add an H1 heading for better content structure" in analysis.suggestions


def test_analyze_content_missing_keyword_suggestion() -> None:
    analysis = analyze_content("<h1>Title</h1><p>Nothing relevant here.</p>", ["geothermal"])

    assert 'Include the keyword "geothermal" in your content' in analysis.suggestions


def test_readability_score_is_clamped() -> None:
    assert readability_score("") == 0
    assert readability_score("<p>   </p>") == 0
    assert 90 <= readability_score("<p>The cat sat on the mat.</p>") <= 100
