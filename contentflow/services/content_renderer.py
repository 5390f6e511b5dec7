"""Export renderers for generated articles: HTML page, Markdown, and JSON."""

from __future__ import annotations

import re
from dataclasses import dataclass
from html import escape, unescape
from typing import Literal

import yaml

from contentflow.core.text import slugify
from contentflow.schemas.content import Article

ExportFormat = Literal["html", "markdown", "json"]

HTML_PAGE_STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            max-width: 800px;
            margin: 0 auto;
            padding: 2rem;
            color: #333;
        }
        h1, h2, h3, h4, h5, h6 { color: #2c3e50; margin-top: 2rem; margin-bottom: 1rem; }
        p, ul, ol { margin-bottom: 1rem; }
        ul, ol { padding-left: 2rem; }
        .meta { color: #666; font-size: 0.9rem; margin-bottom: 2rem; padding-bottom: 1rem; border-bottom: 1px solid #eee; }
"""

# Applied in order: inline markup first so block rules see plain text.
MARKDOWN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"<(?:strong|b)[^>]*>(.*?)</(?:strong|b)>", re.I | re.S), r"**\1**"),
    (re.compile(r"<(?:em|i)[^>]*>(.*?)</(?:em|i)>", re.I | re.S), r"*\1*"),
    (re.compile(r"<a[^>]*href=\"([^\"]*)\"[^>]*>(.*?)</a>", re.I | re.S), r"[\2](\1)"),
    (re.compile(r"<h1[^>]*>(.*?)</h1>", re.I | re.S), r"\n# \1\n\n"),
    (re.compile(r"<h2[^>]*>(.*?)</h2>", re.I | re.S), r"\n## \1\n\n"),
    (re.compile(r"<h3[^>]*>(.*?)</h3>", re.I | re.S), r"\n### \1\n\n"),
    (re.compile(r"<h4[^>]*>(.*?)</h4>", re.I | re.S), r"\n#### \1\n\n"),
    (re.compile(r"<h5[^>]*>(.*?)</h5>", re.I | re.S), r"\n##### \1\n\n"),
    (re.compile(r"<h6[^>]*>(.*?)</h6>", re.I | re.S), r"\n###### \1\n\n"),
    (re.compile(r"<li[^>]*>(.*?)</li>", re.I | re.S), r"- \1\n"),
    (re.compile(r"<p[^>]*>(.*?)</p>", re.I | re.S), r"\1\n\n"),
    (re.compile(r"<hr\s*/?>", re.I), "\n---\n\n"),
    (re.compile(r"</(?:ul|ol)>", re.I), "\n"),
    (re.compile(r"<[^>]+>"), ""),
    (re.compile(r"\n\s*\n\s*\n+"), "\n\n"),
)


@dataclass(frozen=True, slots=True)
class RenderedExport:
    """Rendered export body plus download metadata."""

    body: str
    filename: str
    media_type: str


def html_to_markdown(html: str) -> str:
    text = html
    for pattern, replacement in MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return unescape(text).strip()


def export_filename(article: Article, extension: str) -> str:
    """`<YYYY-MM-DD>-<title-slug>.<extension>`."""
    date = article.created_at.date().isoformat()
    return f"{date}-{slugify(article.title, fallback='article')}.{extension}"


def export_html(article: Article) -> str:
    """Standalone HTML page with meta tags and a sources list."""
    seo_score = f"{article.seo_score}/100" if article.seo_score is not None else "n/a"
    sources = "".join(
        f"<li><a href=\"{escape(source.url)}\" target=\"_blank\">{escape(source.title)}</a></li>"
        for source in article.sources
    )
    return (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n<head>\n"
        "    <meta charset=\"UTF-8\">\n"
        "    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\">\n"
        f"    <title>{escape(article.title)}</title>\n"
        f"    <meta name=\"description\" content=\"{escape(article.meta_description)}\">\n"
        f"    <meta name=\"keywords\" content=\"{escape(', '.join(article.keywords))}\">\n"
        f"    <style>{HTML_PAGE_STYLE}    </style>\n"
        "</head>\n<body>\n"
        "    <div class=\"meta\">\n"
        f"        <strong>Generated:</strong> {article.created_at.date().isoformat()} |\n"
        f"        <strong>Word Count:</strong> {article.word_count} |\n"
        f"        <strong>SEO Score:</strong> {seo_score}\n"
        "    </div>\n"
        f"{article.content}\n"
        "    <hr style=\"margin: 3rem 0;\">\n"
        "    <div class=\"meta\">\n"
        "        <h4>Sources:</h4>\n"
        f"        <ul>{sources}</ul>\n"
        "    </div>\n"
        "</body>\n</html>\n"
    )


def export_markdown(article: Article) -> str:
    """Markdown body with YAML front matter and a trailing sources list."""
    front_matter = yaml.safe_dump(
        {
            "title": article.title,
            "description": article.meta_description,
            "keywords": list(article.keywords),
            "created": article.created_at.isoformat(),
            "word_count": article.word_count,
            "seo_score": article.seo_score,
        },
        sort_keys=False,
        allow_unicode=True,
    )
    parts = [f"---\n{front_matter}---", html_to_markdown(article.content)]
    if article.sources:
        source_lines = "\n".join(f"- [{source.title}]({source.url})" for source in article.sources)
        parts.append(f"## Sources\n\n{source_lines}")
    return "\n\n".join(parts) + "\n"


def export_json(article: Article) -> str:
    return article.model_dump_json(indent=2)


def render_export(article: Article, export_format: ExportFormat) -> RenderedExport:
    """Render `article` in the requested format with its download filename."""
    if export_format == "html":
        return RenderedExport(export_html(article), export_filename(article, "html"), "text/html")
    if export_format == "markdown":
        return RenderedExport(
            export_markdown(article),
            export_filename(article, "md"),
            "text/markdown",
        )
    return RenderedExport(
        export_json(article),
        export_filename(article, "json"),
        "application/json",
    )
