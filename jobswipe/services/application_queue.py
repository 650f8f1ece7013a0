"""
In-process Application Queue

Runs the background phase of each application as its own asyncio task.
There is no persistence, retry or backpressure. An id is rejected while its
task is still running; finished ids are forgotten, since every submission
creates a new application id. A crash is logged, never raised to the caller.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict

logger = logging.getLogger(__name__)


class DuplicateEnqueueError(Exception):
    """The application id was already enqueued."""


class ApplicationQueue:
    """
    Fire-and-forget task runner for application processing.

    Usage:
        queue = ApplicationQueue()
        queue.enqueue(application_id, pipeline.process_application(...))
        await queue.join()   # tests and shutdown
    """

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        """Number of tasks still running."""
        return len(self._tasks)

    def is_enqueued(self, application_id: str) -> bool:
        """True while the task for application_id is still running."""
        return application_id in self._tasks

    def enqueue(self, application_id: str, coroutine: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """
        Schedule coroutine as the background task for application_id.

        Raises:
            DuplicateEnqueueError: If a task for this id is still running
        """
        if application_id in self._tasks:
            coroutine.close()
            raise DuplicateEnqueueError(f"Application {application_id} already enqueued")

        task = asyncio.create_task(coroutine, name=f"application:{application_id}")
        self._tasks[application_id] = task
        task.add_done_callback(lambda t: self._on_done(application_id, t))
        logger.info(f"Enqueued application {application_id} ({self.pending} in flight)")
        return task

    def _on_done(self, application_id: str, task: asyncio.Task) -> None:
        self._tasks.pop(application_id, None)
        if task.cancelled():
            logger.warning(f"Application task {application_id} was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Application task {application_id} crashed: {exc!r}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def join(self) -> None:
        """Wait until every task enqueued so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)
