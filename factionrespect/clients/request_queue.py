"""Rate-limited request queue for FactionRespect.

Serializes every outgoing Torn API call of one client instance. The Torn
API rejects keys that burst requests, so units of work are dispatched
strictly one at a time, in submission order, with a minimum gap between the
end of one dispatch and the start of the next.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimitedRequestQueue:
    """FIFO executor for asynchronous units of work.

    No reordering, deduplication or retry happens here. A unit that raises
    propagates to its own caller only; the next unit still runs. Depth is
    unbounded.

    A queue belongs to the event loop it is first used on.

    Args:
        min_interval_seconds: Minimum seconds between the end of one dispatch
            and the start of the next.
        clock: Monotonic clock, injectable for tests.
        sleep: Coroutine used to wait out the interval, injectable for tests.
    """

    def __init__(
        self,
        min_interval_seconds: float = 0.6,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        # asyncio.Lock wakes waiters in acquisition order, which gives FIFO dispatch
        self._lock = asyncio.Lock()
        self._last_dispatch_end: Optional[float] = None
        self.pending: int = 0
        self.dispatched: int = 0

    async def _wait_for_slot(self) -> None:
        if self._last_dispatch_end is None:
            return
        elapsed = self._clock() - self._last_dispatch_end
        if elapsed < self.min_interval_seconds:
            delay = self.min_interval_seconds - elapsed
            logger.debug("Rate limit: waiting %.3fs before next dispatch", delay)
            await self._sleep(delay)

    async def submit(self, work: Callable[[], Awaitable[T]]) -> T:
        """Enqueue a unit of work and wait for its result.

        Args:
            work: Zero-argument callable returning an awaitable.

        Returns:
            Whatever the awaitable returns.
        """
        self.pending += 1
        try:
            async with self._lock:
                await self._wait_for_slot()
                try:
                    return await work()
                finally:
                    self._last_dispatch_end = self._clock()
                    self.dispatched += 1
        finally:
            self.pending -= 1
