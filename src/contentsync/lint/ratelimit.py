"""Fixed-window throttle for starting network checks.

At most ``limit`` operations may *start* within any one window, however
many are still outstanding. Callers ``await throttle.acquire()`` before
starting an operation; once the window's budget is spent, ``acquire``
sleeps until the next window opens.

The throttle runs on a single event loop and never yields between
checking and consuming the budget, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional


class FixedWindowThrottle:
    """Allow at most *limit* starts per *window* seconds.

    Args:
        limit: Starts allowed per window; clamped to >= 1.
        window: Window length in seconds.
        clock: Monotonic clock, injectable for tests.
        sleep: Async sleep, injectable for tests.
    """

    def __init__(
        self,
        limit: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._limit = max(1, limit)
        self._window = window
        self._clock = clock
        self._sleep = sleep
        self._window_start: Optional[float] = None
        self._count = 0

    @property
    def limit(self) -> int:
        return self._limit

    async def acquire(self) -> None:
        while True:
            now = self._clock()
            if self._window_start is None or now - self._window_start >= self._window:
                self._window_start = now
                self._count = 0
            if self._count < self._limit:
                self._count += 1
                return
            await self._sleep(self._window - (now - self._window_start))
