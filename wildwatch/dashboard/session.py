from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading

from wildwatch.controller.loop import DetectionLoopController, Snapshot
from wildwatch.controller.state import RunState

logger = logging.getLogger(__name__)


class BackgroundSession:
    """Runs a controller on a private event loop so a UI thread can drive it.

    The UI only reads ``snapshot`` (an immutable record swapped by the loop)
    and sends commands, which are marshalled onto the loop thread.
    """

    def __init__(self, controller: DetectionLoopController, join_timeout: float = 5.0) -> None:
        self.controller = controller
        self.join_timeout = join_timeout
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="wildwatch-session", daemon=True)
        self._started = False

    @property
    def snapshot(self) -> Snapshot:
        return self.controller.snapshot

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._thread.start()
        future = asyncio.run_coroutine_threadsafe(self.controller.bootstrap(), self._loop)
        future.add_done_callback(self._on_bootstrap_done)

    def _on_bootstrap_done(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Session bootstrap crashed", exc_info=exc)

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()

    def toggle(self, timeout: float = 5.0) -> RunState:
        future = asyncio.run_coroutine_threadsafe(self._toggle(), self._loop)
        return future.result(timeout)

    async def _toggle(self) -> RunState:
        return self.controller.toggle()

    def close(self) -> None:
        if not self._started or not self._thread.is_alive():
            self.controller.close()
            return
        future = asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop)
        try:
            future.result(self.join_timeout)
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(self.join_timeout)
        logger.info("Background session stopped")

    async def _shutdown(self) -> None:
        self.controller.close()
        await self.controller.scheduler.drain()
