from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

CycleCallback = Callable[[], Awaitable[object]]


class FrameScheduler:
    """Runs a coroutine callback at the next refresh tick of the event loop.

    At most one callback is pending; scheduling again replaces it. ``cancel``
    drops the pending callback without touching a cycle already running.
    """

    def __init__(self, target_fps: float = 15.0) -> None:
        if target_fps <= 0:
            raise ValueError("target_fps must be > 0")
        self.interval = 1.0 / target_fps
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: CycleCallback, immediate: bool = False) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        delay = 0.0 if immediate else self.interval
        self._handle = loop.call_later(delay, self._fire, callback)

    def _fire(self, callback: CycleCallback) -> None:
        self._handle = None
        task = asyncio.ensure_future(callback())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Detection cycle crashed", exc_info=exc)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def drain(self) -> None:
        """Wait for cycles that are already running to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
