"""Unit tests for the polling waiter."""

import pytest

from src.renderer.waiter import PollingWaiter


class FakeClock:
    """Clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def waiter(clock: FakeClock) -> PollingWaiter:
    return PollingWaiter(clock=clock, sleep=clock.sleep)


class TestPollingWaiter:
    """Tests for PollingWaiter."""

    @pytest.mark.asyncio
    async def test_true_predicate_returns_without_sleeping(
        self, waiter: PollingWaiter, clock: FakeClock
    ) -> None:
        assert await waiter.wait(lambda: True, timeout_ms=1000, interval_ms=100)
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_false_predicate_times_out_near_deadline(
        self, waiter: PollingWaiter, clock: FakeClock
    ) -> None:
        """A never-true predicate resolves False after about the timeout."""
        assert not await waiter.wait(lambda: False, timeout_ms=1000, interval_ms=100)
        assert 1.0 <= clock.now <= 1.1

    @pytest.mark.asyncio
    async def test_predicate_becoming_true_stops_polling(
        self, waiter: PollingWaiter, clock: FakeClock
    ) -> None:
        assert await waiter.wait(lambda: clock.now >= 0.3, timeout_ms=1000, interval_ms=100)
        assert len(clock.sleeps) == 3

    @pytest.mark.asyncio
    async def test_timeout_never_raises(self, waiter: PollingWaiter) -> None:
        assert await waiter.wait(lambda: False, timeout_ms=0, interval_ms=10) is False

    @pytest.mark.asyncio
    async def test_delay_sleeps_for_milliseconds(
        self, waiter: PollingWaiter, clock: FakeClock
    ) -> None:
        await waiter.delay(250)
        assert clock.sleeps == [0.25]

    @pytest.mark.asyncio
    async def test_real_clock_short_wait(self) -> None:
        """Default waiter works on the running event loop."""
        flags = {"done": False}
        calls = 0

        def predicate() -> bool:
            nonlocal calls
            calls += 1
            if calls == 3:
                flags["done"] = True
            return flags["done"]

        assert await PollingWaiter().wait(predicate, timeout_ms=500, interval_ms=1)
