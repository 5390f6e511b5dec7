"""Prefixed identifiers for generations, requests, and articles."""

from __future__ import annotations

import secrets
import threading
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_LAST_MILLIS = 0
_COUNTER = 0
_LOCK = threading.Lock()


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    chars: list[str] = []
    current = value
    while current:
        current, remainder = divmod(current, 36)
        chars.append(_ALPHABET[remainder])
    return "".join(reversed(chars))


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(max(length, 0)))


def new_id(prefix: str, *, random_length: int = 9) -> str:
    """Return `<prefix>-<time><counter>-<random>`, sortable by creation time."""
    global _LAST_MILLIS, _COUNTER

    now_millis = int(time.time() * 1000)
    with _LOCK:
        if now_millis == _LAST_MILLIS:
            _COUNTER += 1
        else:
            _LAST_MILLIS = now_millis
            _COUNTER = 0
        counter = _COUNTER

    time_part = _to_base36(now_millis)
    counter_part = _to_base36(counter).rjust(2, "0")
    return f"{prefix}-{time_part}{counter_part}-{_random_suffix(random_length)}"


def new_generation_id() -> str:
    return new_id("gen")


def new_request_id() -> str:
    return new_id("req")


def new_article_id() -> str:
    return new_id("article")
