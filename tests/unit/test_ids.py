"""Unit tests for prefixed id generation."""

from __future__ import annotations

import re

from contentflow.core.ids import new_article_id, new_generation_id, new_id, new_request_id

ID_PATTERN = re.compile(r"^[a-z]+-[0-9a-z]{10,}-[0-9a-z]{9}$")


def test_new_id_format_and_uniqueness() -> None:
    ids = [new_id("gen") for _ in range(200)]

    assert len(ids) == len(set(ids))
    assert all(ID_PATTERN.match(item) for item in ids)


def test_ids_sort_by_creation_order_within_process() -> None:
    ids = [new_id("gen").split("-")[1] for _ in range(50)]

    assert ids == sorted(ids)


def test_prefixes() -> None:
    assert new_generation_id().startswith("gen-")
    assert new_request_id().startswith("req-")
    assert new_article_id().startswith("article-")
