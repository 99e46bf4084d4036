"""Tests for the sliding window rate limiter."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from crpt_api.quota.limiter import SlidingWindowLimiter, TimeUnit, WindowConfig


class TestWindowConfig:
    """Tests for WindowConfig."""

    def test_per_unit(self) -> None:
        """Test building a config from a time unit."""
        config = WindowConfig.per(TimeUnit.MINUTES, 10)

        assert config.window_seconds == 60.0
        assert config.limit == 10

    def test_per_unit_from_string(self) -> None:
        """Test that unit names are accepted."""
        assert WindowConfig.per("days", 1).window_seconds == 86400.0
        assert WindowConfig.per("milliseconds", 1).window_seconds == pytest.approx(0.001)

    def test_rejects_non_positive_window(self) -> None:
        """Test that an empty window is a configuration error."""
        with pytest.raises(ValueError):
            WindowConfig(window_seconds=0, limit=5)
        with pytest.raises(ValueError):
            WindowConfig(window_seconds=-1, limit=5)

    def test_is_immutable(self) -> None:
        """Test that the config cannot be changed after creation."""
        config = WindowConfig(window_seconds=1, limit=1)
        with pytest.raises(AttributeError):
            config.limit = 2  # type: ignore[misc]


class TestSlidingWindowLimiter:
    """Tests for SlidingWindowLimiter."""

    @pytest.fixture
    def limiter(self, clock) -> SlidingWindowLimiter:
        """Create a limiter allowing 3 requests per 10 seconds."""
        return SlidingWindowLimiter(WindowConfig(window_seconds=10, limit=3), clock=clock)

    def test_grants_up_to_limit(self, limiter: SlidingWindowLimiter) -> None:
        """Test the first N calls are granted and the next is denied."""
        assert [limiter.try_acquire() for _ in range(3)] == [True, True, True]
        assert limiter.try_acquire() is False

    def test_denial_does_not_consume(self, limiter: SlidingWindowLimiter, clock) -> None:
        """Test that denied calls leave no trace in the window."""
        for _ in range(3):
            limiter.try_acquire()
        for _ in range(5):
            assert limiter.try_acquire() is False

        clock.advance(10.001)
        assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]

    def test_capacity_frees_one_for_one(self, limiter: SlidingWindowLimiter, clock) -> None:
        """Test grants age out individually."""
        limiter.try_acquire()
        clock.advance(4)
        limiter.try_acquire()
        limiter.try_acquire()
        assert limiter.try_acquire() is False

        # Only the first grant has aged out
        clock.advance(6.5)
        assert limiter.try_acquire() is True
        assert limiter.try_acquire() is False

        # The other two age out together
        clock.advance(4)
        assert limiter.remaining() == 2

    def test_boundary_timestamp_is_retained(self, clock) -> None:
        """Test a grant exactly one window old still counts."""
        limiter = SlidingWindowLimiter(WindowConfig(window_seconds=1, limit=1), clock=clock)
        assert limiter.try_acquire() is True

        clock.advance(1.0)
        assert limiter.try_acquire() is False

        clock.advance(0.001)
        assert limiter.try_acquire() is True

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_never_grants(self, clock, limit: int) -> None:
        """Test quota of zero or less always denies."""
        limiter = SlidingWindowLimiter(WindowConfig(window_seconds=1, limit=limit), clock=clock)

        for _ in range(10):
            assert limiter.try_acquire() is False
            clock.advance(5)

        assert limiter.remaining() == 0
        assert limiter.retry_after() is None

    def test_remaining(self, limiter: SlidingWindowLimiter) -> None:
        """Test remaining capacity tracking."""
        assert limiter.remaining() == 3
        limiter.try_acquire()
        assert limiter.remaining() == 2

    def test_retry_after(self, limiter: SlidingWindowLimiter, clock) -> None:
        """Test time until the next grant frees up."""
        assert limiter.retry_after() is None

        for _ in range(3):
            limiter.try_acquire()
        clock.advance(2.5)

        assert limiter.retry_after() == pytest.approx(7.5)

    def test_properties(self, limiter: SlidingWindowLimiter) -> None:
        """Test config accessors."""
        assert limiter.limit == 3
        assert limiter.window_seconds == 10
        assert limiter.config == WindowConfig(window_seconds=10, limit=3)

    def test_scenario_two_per_second(self, clock) -> None:
        """Test two grants per second with a frozen then advanced clock."""
        limiter = SlidingWindowLimiter(WindowConfig.per(TimeUnit.SECONDS, 2), clock=clock)

        assert limiter.try_acquire() is True
        assert limiter.try_acquire() is True
        assert limiter.try_acquire() is False

        clock.advance(1.005)
        assert limiter.try_acquire() is True

    def test_default_clock_is_monotonic(self) -> None:
        """Test the limiter works with the real clock."""
        limiter = SlidingWindowLimiter(WindowConfig(window_seconds=60, limit=1))

        assert limiter.try_acquire() is True
        assert limiter.try_acquire() is False


class TestConcurrentAcquire:
    """Tests for concurrent admission checks."""

    def test_threads_never_exceed_limit(self, clock) -> None:
        """Test racing threads are admitted at most `limit` times."""
        limiter = SlidingWindowLimiter(WindowConfig(window_seconds=60, limit=50), clock=clock)
        barrier = threading.Barrier(8)

        def hammer() -> int:
            barrier.wait()
            return sum(limiter.try_acquire() for _ in range(100))

        with ThreadPoolExecutor(max_workers=8) as pool:
            granted = sum(pool.map(lambda _: hammer(), range(8)))

        assert granted == 50

    @pytest.mark.asyncio
    async def test_tasks_never_exceed_limit(self, clock) -> None:
        """Test concurrent asyncio tasks are admitted at most `limit` times."""
        limiter = SlidingWindowLimiter(WindowConfig(window_seconds=60, limit=100), clock=clock)

        async def consume_many() -> list[bool]:
            results = []
            for _ in range(20):
                results.append(limiter.try_acquire())
                await asyncio.sleep(0)
            return results

        all_results = await asyncio.gather(*(consume_many() for _ in range(10)))
        all_allowed = [r for results in all_results for r in results]

        assert sum(all_allowed) == 100
