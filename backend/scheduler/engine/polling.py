"""
Fixed-interval poll timer owned by a coordinator.
Runs a callback every ``interval_s`` seconds until stopped; no jitter, no backoff.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from shared.utils.logging import get_logger

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class PollTimer:
    """
    Cancellable periodic task.

    The first tick fires one interval after ``start``. Errors raised by the
    callback are logged and the loop keeps going, so a failing tick is retried
    at the next one.
    """

    def __init__(
        self,
        name: str,
        interval_s: float,
        callback: Callable[[], Awaitable[object]],
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._name = name
        self._interval_s = interval_s
        self._callback = callback
        self._sleep = sleep
        self._task: Optional[asyncio.Task[None]] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"poll:{self._name}")
        logger.debug("poll_timer_started", timer=self._name, interval_s=self._interval_s)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("poll_timer_stopped", timer=self._name, ticks=self.ticks)

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval_s)
            self.ticks += 1
            try:
                await self._callback()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error("poll_tick_error", timer=self._name, error=str(exc), exc_info=True)
