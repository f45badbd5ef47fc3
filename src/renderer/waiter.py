"""Bounded-timeout condition polling.

The render surface exposes no completion events, only flags that eventually
flip. Every synchronisation point in the pipeline goes through ``wait_until``.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable


Predicate = Callable[[], object]
SleepFunc = Callable[[float], Awaitable[object]]


class PollingWaiter:
    """Polls a predicate until it holds or a deadline passes."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the waiter.

        Args:
            clock: Monotonic clock in seconds.
            sleep: Coroutine function sleeping for a number of seconds.
        """
        self._clock = clock
        self._sleep = sleep

    async def wait(
        self,
        predicate: Predicate,
        timeout_ms: float = 1000,
        interval_ms: float = 100,
    ) -> bool:
        """Wait until ``predicate`` returns a truthy value.

        The predicate is evaluated immediately; when it already holds no
        sleep happens. A timeout resolves to False and never raises.

        Args:
            predicate: Zero-argument condition.
            timeout_ms: Budget in milliseconds.
            interval_ms: Re-evaluation interval in milliseconds.

        Returns:
            True if the predicate held before the deadline, False otherwise.
        """
        if predicate():
            return True

        deadline = self._clock() + timeout_ms / 1000
        interval = max(interval_ms, 0) / 1000
        while True:
            await self._sleep(interval)
            if predicate():
                return True
            if self._clock() >= deadline:
                return False

    async def delay(self, ms: float) -> None:
        """Sleep for a fixed settle delay.

        Args:
            ms: Delay in milliseconds.
        """
        await self._sleep(ms / 1000)


_default_waiter = PollingWaiter()


async def wait_until(
    predicate: Predicate,
    timeout_ms: float = 1000,
    interval_ms: float = 100,
) -> bool:
    """Wait for ``predicate`` with the default waiter."""
    return await _default_waiter.wait(predicate, timeout_ms, interval_ms)


async def delay(ms: float) -> None:
    """Sleep for ``ms`` milliseconds."""
    await _default_waiter.delay(ms)
