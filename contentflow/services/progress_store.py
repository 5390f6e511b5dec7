"""Generation progress store with typed patches and TTL eviction."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis

from contentflow.config import settings
from contentflow.core.redis import get_redis_client
from contentflow.schemas.generation import GenerationRecord, Stage

logger = logging.getLogger(__name__)

GENERATION_KEY_PREFIX = "generation"
IMMUTABLE_RECORD_FIELDS = frozenset({"id", "steps"})
IMMUTABLE_STAGE_FIELDS = frozenset({"id"})


@dataclass(frozen=True, slots=True)
class SetField:
    """Replace a top-level record field."""

    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class SetStage:
    """Replace one field of the stage at `index`."""

    index: int
    field: str
    value: Any


GenerationPatch = SetField | SetStage


def apply_patches(
    record: GenerationRecord,
    patches: Iterable[GenerationPatch],
) -> GenerationRecord:
    """Return a new record with `patches` applied in order.

    Raises:
        ValueError: unknown field, immutable field, or stage index out of range.
        pydantic.ValidationError: a patched value does not fit the field type.
    """
    updates: dict[str, Any] = {}
    steps = list(record.steps)
    steps_changed = False

    for patch in patches:
        if isinstance(patch, SetStage):
            if not 0 <= patch.index < len(steps):
                raise ValueError(f"Stage index out of range: {patch.index}")
            if patch.field not in Stage.model_fields or patch.field in IMMUTABLE_STAGE_FIELDS:
                raise ValueError(f"Unknown or immutable stage field: {patch.field}")
            current = steps[patch.index]
            steps[patch.index] = Stage.model_validate(
                {**current.model_dump(), patch.field: patch.value}
            )
            steps_changed = True
        elif isinstance(patch, SetField):
            if (
                patch.field not in GenerationRecord.model_fields
                or patch.field in IMMUTABLE_RECORD_FIELDS
            ):
                raise ValueError(f"Unknown or immutable record field: {patch.field}")
            updates[patch.field] = patch.value
        else:
            raise TypeError(f"Unsupported patch type: {type(patch).__name__}")

    if steps_changed:
        updates["steps"] = steps
    if not updates:
        return record

    return GenerationRecord.model_validate({**dict(record), **updates})


class ProgressStore(ABC):
    """Keyed storage for generation records."""

    backend: str

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.progress_ttl_seconds

    @abstractmethod
    async def create(self, record: GenerationRecord) -> GenerationRecord:
        """Insert or replace the record under its id."""

    @abstractmethod
    async def get(self, generation_id: str) -> GenerationRecord | None:
        """Return a snapshot of the record, or None if unknown or expired."""

    @abstractmethod
    async def apply(
        self,
        generation_id: str,
        *patches: GenerationPatch,
    ) -> GenerationRecord | None:
        """Apply patches atomically; returns None (and writes nothing) if unknown."""

    @abstractmethod
    async def delete(self, generation_id: str) -> bool:
        """Remove a record; returns whether it existed."""

    async def evict_expired(self) -> int:
        """Drop expired entries; returns the number removed."""
        return 0


class InMemoryProgressStore(ProgressStore):
    """Process-local store; contents are lost on restart."""

    backend = "memory"

    def __init__(
        self,
        ttl_seconds: int | None = None,
        clock: Any = time.monotonic,
    ) -> None:
        super().__init__(ttl_seconds)
        self._clock = clock
        self._records: dict[str, tuple[GenerationRecord, float]] = {}

    def __len__(self) -> int:
        return len(self._records)

    def _expires_at(self) -> float:
        return self._clock() + self.ttl_seconds

    def _live(self, generation_id: str) -> GenerationRecord | None:
        entry = self._records.get(generation_id)
        if entry is None:
            return None
        record, expires_at = entry
        if expires_at <= self._clock():
            del self._records[generation_id]
            logger.info("Generation record expired", extra={"generation_id": generation_id})
            return None
        return record

    async def create(self, record: GenerationRecord) -> GenerationRecord:
        self._records[record.id] = (record, self._expires_at())
        return record.model_copy(deep=True)

    async def get(self, generation_id: str) -> GenerationRecord | None:
        record = self._live(generation_id)
        return record.model_copy(deep=True) if record is not None else None

    async def apply(
        self,
        generation_id: str,
        *patches: GenerationPatch,
    ) -> GenerationRecord | None:
        current = self._live(generation_id)
        if current is None:
            logger.warning(
                "Dropping patch for unknown generation",
                extra={"generation_id": generation_id, "patch_count": len(patches)},
            )
            return None
        updated = apply_patches(current, patches)
        self._records[generation_id] = (updated, self._expires_at())
        return updated.model_copy(deep=True)

    async def delete(self, generation_id: str) -> bool:
        return self._records.pop(generation_id, None) is not None

    async def evict_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._records.items() if expires_at <= now]
        for key in expired:
            del self._records[key]
        if expired:
            logger.info("Evicted expired generation records", extra={"count": len(expired)})
        return len(expired)


class RedisProgressStore(ProgressStore):
    """Redis-backed store; entries expire via key TTL refreshed on each write."""

    backend = "redis"

    def __init__(
        self,
        redis_client: Redis | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        super().__init__(ttl_seconds)
        self.redis = redis_client if redis_client is not None else get_redis_client()
        # Serializes read-modify-write cycles issued from this process.
        self._write_lock = asyncio.Lock()

    @staticmethod
    def _key(generation_id: str) -> str:
        return f"{GENERATION_KEY_PREFIX}:{generation_id}"

    async def _write(self, record: GenerationRecord) -> None:
        await self.redis.set(
            self._key(record.id),
            record.model_dump_json(),
            ex=self.ttl_seconds,
        )

    async def create(self, record: GenerationRecord) -> GenerationRecord:
        async with self._write_lock:
            await self._write(record)
        return record

    async def get(self, generation_id: str) -> GenerationRecord | None:
        raw = await self.redis.get(self._key(generation_id))
        if raw is None:
            return None

        try:
            return GenerationRecord.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning(
                "Invalid generation payload in Redis",
                extra={"generation_id": generation_id},
            )
            return None

    async def apply(
        self,
        generation_id: str,
        *patches: GenerationPatch,
    ) -> GenerationRecord | None:
        async with self._write_lock:
            current = await self.get(generation_id)
            if current is None:
                logger.warning(
                    "Dropping patch for unknown generation",
                    extra={"generation_id": generation_id, "patch_count": len(patches)},
                )
                return None
            updated = apply_patches(current, patches)
            await self._write(updated)
            return updated

    async def delete(self, generation_id: str) -> bool:
        async with self._write_lock:
            removed = await self.redis.delete(self._key(generation_id))
        return int(removed) > 0


_progress_store: ProgressStore | None = None


def get_progress_store() -> ProgressStore:
    """Get the singleton store for the configured backend."""
    global _progress_store
    if _progress_store is None:
        if settings.progress_store_backend == "redis":
            _progress_store = RedisProgressStore()
        else:
            _progress_store = InMemoryProgressStore()
        logger.info(
            "Progress store initialized",
            extra={
                "backend": _progress_store.backend,
                "ttl_seconds": _progress_store.ttl_seconds,
            },
        )
    return _progress_store
