"""Asyncio Task Scheduler - periodic timers backed by asyncio tasks.

Invariants:
    - One asyncio task per armed timer; cancel() cancels that task
    - A failing callback is logged with its traceback and the timer keeps running
    - The first callback runs one full interval after arming

Design Decisions:
    - asyncio.sleep loop over loop.call_later chains: a tick's callback is awaited
      before the next sleep starts, so ticks of one timer never overlap
"""

import asyncio
import logging

from dynamic_rpc.core.ports import TickCallback

logger = logging.getLogger(__name__)


class AsyncioTimerHandle:
    """Cancellable handle around the task running one periodic timer."""

    def __init__(self, task: asyncio.Task):
        self._task = task
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        self._task.cancel()


class AsyncioTaskScheduler:
    """TaskScheduler implementation for a running asyncio event loop."""

    def call_every(
        self, interval_seconds: float, callback: TickCallback,
    ) -> AsyncioTimerHandle:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(interval_seconds, callback))
        return AsyncioTimerHandle(task)

    async def _run(self, interval_seconds: float, callback: TickCallback) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await callback()
            except Exception as e:
                logger.error(f"Periodic callback failed: {e}", exc_info=True)
