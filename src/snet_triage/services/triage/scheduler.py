"""
Delayed Task Scheduler

Fire-unless-superseded scheduling of paced automated messages.
Delays run as background asyncio tasks; the caller never awaits
them. Each callback re-checks conversation state before acting.
"""

import asyncio
from collections import defaultdict
from typing import Awaitable, Callable, Optional
from uuid import UUID

from snet_triage.config.logging_config import get_logger

logger = get_logger(__name__)

DelayedCallback = Callable[[], Awaitable[None]]


class DelayedTaskScheduler:
    """
    Per-conversation registry of pending delayed callbacks.

    Callback failures are logged, never propagated into the
    event loop's unhandled-exception handler.
    """

    def __init__(self) -> None:
        self._tasks: dict[UUID, set[asyncio.Task]] = defaultdict(set)

    def schedule(self, key: UUID, delay: float, callback: DelayedCallback) -> asyncio.Task:
        """Run callback after delay seconds in the background."""
        task = asyncio.create_task(self._run(key, delay, callback))
        self._tasks[key].add(task)
        task.add_done_callback(lambda t: self._discard(key, t))
        return task

    async def _run(self, key: UUID, delay: float, callback: DelayedCallback) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Scheduled triage step failed",
                conversation_id=str(key),
                error_type=type(e).__name__,
                error=str(e),
            )

    def _discard(self, key: UUID, task: asyncio.Task) -> None:
        tasks = self._tasks.get(key)
        if tasks is None:
            return
        tasks.discard(task)
        if not tasks:
            self._tasks.pop(key, None)

    def pending(self, key: UUID) -> int:
        """Number of callbacks not yet finished for key."""
        return len(self._tasks.get(key, ()))

    def cancel(self, key: UUID) -> int:
        """Cancel every pending callback for key; returns how many."""
        tasks = list(self._tasks.pop(key, ()))
        for task in tasks:
            task.cancel()
        return len(tasks)

    async def drain(self, key: Optional[UUID] = None) -> None:
        """
        Wait until scheduled callbacks finish.

        Callbacks may schedule further callbacks; draining continues
        until nothing is left.
        """
        while True:
            if key is None:
                tasks = [t for group in self._tasks.values() for t in group]
            else:
                tasks = list(self._tasks.get(key, ()))
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel everything (application shutdown)."""
        keys = list(self._tasks)
        tasks = [t for k in keys for t in self._tasks.get(k, ())]
        for key in keys:
            self.cancel(key)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
