"""Unit tests for settings parsing, logging format, and text helpers."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from contentflow.config import Settings
from contentflow.core.logging import JSONExtrasFormatter
from contentflow.core.text import count_words, slugify, strip_html, truncate

TWO_ORIGINS = ["https://a.example.com", "https://b.example.com"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["https://a.example.com", "https://b.example.com"]', TWO_ORIGINS),
        ("https://a.example.com, https://b.example.com", TWO_ORIGINS),
        ('"https://a.example.com"', ["https://a.example.com"]),
        ("", []),
    ],
)
def test_cors_origins_accepts_json_and_comma_separated(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
    expected: list[str],
) -> None:
    monkeypatch.setenv("CORS_ORIGINS", raw)

    assert Settings(_env_file=None).cors_origins == expected  # type: ignore[call-arg]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("api", "/api"), ("/api/", "/api"), ("/", ""), ("  v1 ", "/v1")],
)
def test_api_prefix_is_normalized(monkeypatch: pytest.MonkeyPatch, raw: str, expected: str) -> None:
    monkeypatch.setenv("API_PREFIX", raw)

    assert Settings(_env_file=None).api_prefix == expected  # type: ignore[call-arg]


def test_negative_delay_scale_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PIPELINE_DELAY_SCALE", "-1")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)  # type: ignore[call-arg]


def test_perplexity_enabled_requires_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PERPLEXITY_API_KEY", raising=False)
    monkeypatch.setenv("RESEARCH_PROVIDER", "perplexity")
    assert Settings(_env_file=None).perplexity_enabled is False  # type: ignore[call-arg]

    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")
    assert Settings(_env_file=None).perplexity_enabled is True  # type: ignore[call-arg]

    monkeypatch.setenv("RESEARCH_PROVIDER", "template")
    assert Settings(_env_file=None).perplexity_enabled is False  # type: ignore[call-arg]


def test_json_extras_formatter_appends_extras() -> None:
    record = logging.LogRecord(
        name="contentflow.services.generation_pipeline",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Generation started",
        args=(),
        exc_info=None,
    )
    record.generation_id = "gen-1"
    record.stage = 2

    line = JSONExtrasFormatter(datefmt="%Y-%m-%d %H:%M:%S").format(record)

    prefix, extras = line.split(" | Generation started ")
    assert prefix.endswith("| contentflow.services.generation_pipeline")
    assert json.loads(extras) == {"generation_id": "gen-1", "stage": 2}


def test_strip_html_and_count_words() -> None:
    text = strip_html("<h1>Solar &amp; Wind</h1>\n<p>Two   sources</p>")

    assert text == "Solar & Wind Two sources"
    assert count_words(text) == 5
    assert count_words("") == 0


def test_slugify_and_truncate() -> None:
    assert slugify("Solar Power: 2026 Edition!") == "solar-power-2026-edition"
    assert slugify("???") == "topic"
    assert truncate("short", 10) == "short"
    assert truncate("a longer sentence here", 10) == "a longe..."
