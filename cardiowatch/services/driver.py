"""
Periodic tick driver.

Runs a synchronous callback on a fixed period inside the asyncio event loop.
The loop is the single writer: the callback and any external call made from
the same loop never interleave.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import structlog

logger = structlog.get_logger(__name__)


class TickDriver:
    """
    Idempotent start/stop wrapper around one periodic asyncio task.

    start() while running and stop() while stopped are no-ops, and a
    stop()/start() pair never leaves two tasks ticking.
    """

    def __init__(self, callback: Callable[[], object], interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.callback = callback
        self.interval_seconds = interval_seconds
        self.tick_count = 0
        self._task: asyncio.Task[None] | None = None
        self._stopping: asyncio.Task[None] | None = None
        self.logger = logger.bind(component="tick_driver")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Schedule the periodic task. Returns False if it was already running."""
        if self.running:
            return False
        self._task = asyncio.get_running_loop().create_task(self._run(), name="tick-driver")
        self.logger.info("tick_driver_started", interval_seconds=self.interval_seconds)
        return True

    def stop(self) -> bool:
        """Cancel the periodic task. Returns False if it was not running."""
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        self._stopping = task
        self.logger.info("tick_driver_stopped", ticks=self.tick_count)
        return True

    async def wait_stopped(self) -> None:
        """Wait for a cancelled task to finish unwinding."""
        task, self._stopping = self._stopping, None
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    @asynccontextmanager
    async def session(self) -> AsyncIterator["TickDriver"]:
        """
        Async context manager for proper task lifecycle.

        Why: Ensures the periodic task is cancelled and awaited even if the body raises.
        """
        self.start()
        try:
            yield self
        finally:
            self.stop()
            await self.wait_stopped()

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_deadline = loop.time()
        while True:
            try:
                self.callback()
            except Exception as e:
                self.logger.exception("tick_failed", error=str(e))
            self.tick_count += 1

            next_deadline += self.interval_seconds
            sleep_time = next_deadline - loop.time()
            if sleep_time > 0:
                await asyncio.sleep(sleep_time)
            else:
                self.logger.warning(
                    "tick_slower_than_interval",
                    lag_seconds=round(-sleep_time, 3),
                    interval_seconds=self.interval_seconds,
                )
                next_deadline = loop.time()
                await asyncio.sleep(0)
