"""SEO scoring for generated articles.

`score_generation` is the fixed-increment metric reported by the generation
pipeline. `analyze_content` inspects the HTML itself and drives automation
scores and the `/seo/analyze` endpoint.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import textstat

from contentflow.core.text import count_words, strip_html, truncate
from contentflow.schemas.content import Article
from contentflow.schemas.seo import HeadingAnalysis, SEOAnalysis, SEOResult

SEO_STEP_INCREMENT = 20
SEO_FINAL_BONUS = 15
SEO_STEPS: tuple[str, ...] = (
    "Analyzing keyword density...",
    "Optimizing meta tags...",
    "Checking readability...",
    "Calculating SEO score...",
)
GENERATION_SUGGESTIONS: tuple[str, ...] = (
    "Add more internal links",
    "Include relevant images",
    "Optimize heading structure",
)

META_TITLE_LIMIT = 60
META_DESCRIPTION_LIMIT = 160
MIN_WORDS_SUGGESTED = 500
MIN_H2_SUGGESTED = 2
HEADING_PATTERN = re.compile(r"<h([1-6])[^>]*>(.*?)</h\1>", re.IGNORECASE | re.DOTALL)
PARAGRAPH_PATTERN = re.compile(r"<p[\s>]", re.IGNORECASE)
LIST_PATTERN = re.compile(r"<(?:ul|ol)[\s>]", re.IGNORECASE)


def keyword_occurrences(text: str, keyword: str) -> int:
    """Case-insensitive occurrences of a keyword phrase on word boundaries."""
    phrase = keyword.strip()
    if not phrase:
        return 0
    return len(re.findall(rf"(?<!\w){re.escape(phrase)}(?!\w)", text, re.IGNORECASE))


def keyword_density(text: str, keywords: Sequence[str]) -> dict[str, float]:
    """Occurrences per hundred words for each keyword."""
    total_words = count_words(text)
    density: dict[str, float] = {}
    for keyword in keywords:
        if total_words == 0:
            density[keyword] = 0.0
            continue
        density[keyword] = round(keyword_occurrences(text, keyword) / total_words * 100, 2)
    return density


def score_generation(
    article: Article,
    keywords: Sequence[str],
    step_increments: Sequence[int],
) -> SEOResult:
    """Fixed-increment SEO result for a pipeline run.

    The score is the sum of the per-step increments plus a constant bonus;
    it does not depend on the article content.
    """
    topic = keywords[0] if keywords else article.title
    return SEOResult(
        seo_score=min(sum(step_increments) + SEO_FINAL_BONUS, 100),
        meta_description=truncate(
            f"Comprehensive guide to {topic}. Expert insights, latest trends, and actionable "
            "strategies for success.",
            META_DESCRIPTION_LIMIT,
        ),
        keyword_density=keyword_density(strip_html(article.content), keywords),
        suggestions=list(GENERATION_SUGGESTIONS),
    )


def extract_headings(html: str) -> list[tuple[int, str]]:
    headings: list[tuple[int, str]] = []
    for level, inner in HEADING_PATTERN.findall(html):
        text = strip_html(inner)
        if text:
            headings.append((int(level), text))
    return headings


def _content_score(
    html: str,
    text: str,
    headings: list[tuple[int, str]],
    density: dict[str, float],
) -> int:
    score = 0
    word_count = count_words(text)
    if word_count >= 1000:
        score += 30
    elif word_count >= 500:
        score += 20
    else:
        score += 10

    levels = {level for level, _ in headings}
    if 1 in levels:
        score += 10
    if 2 in levels:
        score += 10

    for value in density.values():
        if 1 <= value <= 3:
            score += 10
        elif value > 0:
            score += 5

    if LIST_PATTERN.search(html):
        score += 5
    if PARAGRAPH_PATTERN.search(html):
        score += 5
    if len(html) > 2000:
        score += 10

    return min(score, 100)


def _suggestions(
    html: str,
    text: str,
    headings: list[tuple[int, str]],
    density: dict[str, float],
) -> list[str]:
    suggestions: list[str] = []
    if count_words(text) < MIN_WORDS_SUGGESTED:
        suggestions.append(
            f"Consider expanding the content to at least {MIN_WORDS_SUGGESTED} words for better SEO"
        )
    if not any(level == 1 for level, _ in headings):
        suggestions.append("Add an H1 heading for better content structure")
    if sum(1 for level, _ in headings if level == 2) < MIN_H2_SUGGESTED:
        suggestions.append("Add more H2 headings to improve content organization")

    for keyword, value in density.items():
        if value == 0:
            suggestions.append(f'Include the keyword "{keyword}" in your content')
        elif value > 3:
            suggestions.append(f'Reduce keyword density for "{keyword}" (currently {value:.1f}%)')

    if not LIST_PATTERN.search(html):
        suggestions.append("Add bullet points or numbered lists to improve readability")
    return suggestions


def _meta_title(headings: list[tuple[int, str]], keywords: Sequence[str]) -> str:
    for level, text in headings:
        if level == 1:
            return truncate(text, META_TITLE_LIMIT)
    primary = keywords[0] if keywords else "Guide"
    return f"The Complete {primary} Guide"


def _meta_description(html: str, text: str) -> str:
    paragraph = re.search(r"<p[^>]*>(.*?)</p>", html, re.IGNORECASE | re.DOTALL)
    lead = strip_html(paragraph.group(1)) if paragraph else ""
    return truncate(lead or text, META_DESCRIPTION_LIMIT)


def analyze_content(html: str, keywords: Sequence[str] = ()) -> SEOAnalysis:
    """Content-sensitive SEO analysis of an HTML document."""
    cleaned_keywords = [keyword.strip() for keyword in keywords if keyword.strip()]
    text = strip_html(html)
    headings = extract_headings(html)
    density = keyword_density(text, cleaned_keywords)

    return SEOAnalysis(
        score=_content_score(html, text, headings, density),
        keyword_density=density,
        suggestions=_suggestions(html, text, headings, density),
        meta_title=_meta_title(headings, cleaned_keywords),
        meta_description=_meta_description(html, text),
        heading_structure=[
            HeadingAnalysis(
                level=level,
                text=heading,
                keywords=[kw for kw in cleaned_keywords if kw.lower() in heading.lower()],
            )
            for level, heading in headings
        ],
    )


def readability_score(html: str) -> int:
    """Flesch reading ease of the visible text, clamped to 0-100."""
    text = strip_html(html)
    if not text:
        return 0
    score = textstat.flesch_reading_ease(text)
    return int(max(0, min(100, round(score))))
