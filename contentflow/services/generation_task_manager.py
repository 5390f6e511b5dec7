"""In-process asyncio task registry for generation pipeline runs."""

from __future__ import annotations

import asyncio
import logging

from contentflow.core.exceptions import GenerationAlreadyRunningError
from contentflow.schemas.generation import GenerationRecord
from contentflow.services.generation_pipeline import GenerationPipeline
from contentflow.services.progress_store import ProgressStore, get_progress_store

logger = logging.getLogger(__name__)


class GenerationTaskManager:
    """Start, cancel, and shut down pipeline runs, one task per generation id."""

    def __init__(
        self,
        store: ProgressStore | None = None,
        pipeline: GenerationPipeline | None = None,
    ) -> None:
        self.store = store if store is not None else get_progress_store()
        self.pipeline = pipeline if pipeline is not None else GenerationPipeline(self.store)
        self._tasks: dict[str, asyncio.Task[None]] = {}
        # Ids reserved between the running check and task registration.
        self._starting: set[str] = set()

    @property
    def running_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    def is_running(self, generation_id: str) -> bool:
        if generation_id in self._starting:
            return True
        task = self._tasks.get(generation_id)
        return task is not None and not task.done()

    async def start(self, record: GenerationRecord) -> GenerationRecord:
        """Store the initial record and schedule its pipeline run.

        Raises:
            GenerationAlreadyRunningError: a run for this id is still in flight.
        """
        if self.is_running(record.id):
            raise GenerationAlreadyRunningError(record.id)

        self._starting.add(record.id)
        try:
            created = await self.store.create(record)
            task = asyncio.create_task(
                self.pipeline.run(record.id, record.input, record.type, record.options),
                name=f"generation-{record.id}",
            )
            self._tasks[record.id] = task
        finally:
            self._starting.discard(record.id)
        task.add_done_callback(lambda done, generation_id=record.id: self._forget(generation_id, done))
        logger.info(
            "Generation task scheduled",
            extra={"generation_id": record.id, "running": self.running_count},
        )
        return created

    def _forget(self, generation_id: str, task: asyncio.Task[None]) -> None:
        if self._tasks.get(generation_id) is task:
            del self._tasks[generation_id]

    async def cancel(self, generation_id: str) -> bool:
        """Cancel a running generation and wait for it; returns whether one was running."""
        task = self._tasks.get(generation_id)
        if task is None or task.done():
            return False
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await self.pipeline.mark_cancelled(generation_id)
        logger.info("Generation task cancelled", extra={"generation_id": generation_id})
        return True

    async def wait(self, generation_id: str) -> None:
        """Wait for a run to finish, if one is in flight."""
        task = self._tasks.get(generation_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel every in-flight run."""
        running = {
            generation_id: task for generation_id, task in self._tasks.items() if not task.done()
        }
        if not running:
            return
        for task in running.values():
            task.cancel()
        await asyncio.gather(*running.values(), return_exceptions=True)
        for generation_id in running:
            await self.pipeline.mark_cancelled(generation_id)
        self._tasks.clear()
        logger.info("Generation tasks stopped", extra={"cancelled": len(running)})


_generation_task_manager: GenerationTaskManager | None = None


def get_generation_task_manager() -> GenerationTaskManager:
    """Get singleton generation task manager."""
    global _generation_task_manager
    if _generation_task_manager is None:
        _generation_task_manager = GenerationTaskManager()
    return _generation_task_manager
