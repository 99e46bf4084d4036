"""
Sliding window rate limiting for outbound registry requests.

The limiter remembers when each request was admitted and grants a new
request only while fewer than ``limit`` grants fall inside the trailing
window. Capacity frees one-for-one as old grants age out.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class TimeUnit(str, Enum):
    """Window length units accepted in configuration."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    @property
    def seconds(self) -> float:
        """Length of one unit in seconds."""
        return _UNIT_SECONDS[self]


_UNIT_SECONDS = {
    TimeUnit.MILLISECONDS: 0.001,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
    TimeUnit.DAYS: 86400.0,
}


@dataclass(frozen=True)
class WindowConfig:
    """
    Quota policy: at most ``limit`` grants per ``window_seconds``.

    A limit of zero or less means nothing is ever granted.
    """

    window_seconds: float
    """Length of the sliding window in seconds."""

    limit: int
    """Maximum grants inside any window."""

    def __post_init__(self) -> None:
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

    @classmethod
    def per(cls, unit: TimeUnit | str, limit: int) -> WindowConfig:
        """Build a config allowing ``limit`` requests per one ``unit``."""
        return cls(window_seconds=TimeUnit(unit).seconds, limit=limit)


class SlidingWindowLimiter:
    """
    In-process sliding window rate limiter.

    Grant timestamps live in a deque, oldest first. A single lock makes
    evict-check-append indivisible, so concurrent callers (threads or
    asyncio tasks) can never be admitted past the limit. The lock is never
    held across I/O and ``try_acquire`` returns immediately.

    A timestamp exactly at ``now - window`` still counts as inside the
    window; only strictly older timestamps are evicted.
    """

    def __init__(
        self,
        config: WindowConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            config: Quota policy
            clock: Time source returning seconds as a float
        """
        self._config = config
        self._clock = clock
        self._grants: deque[float] = deque()
        self._lock = threading.Lock()

    @property
    def config(self) -> WindowConfig:
        return self._config

    @property
    def limit(self) -> int:
        return self._config.limit

    @property
    def window_seconds(self) -> float:
        return self._config.window_seconds

    def _evict(self, now: float) -> None:
        """Drop grants older than the window. Caller holds the lock."""
        cutoff = now - self._config.window_seconds
        while self._grants and self._grants[0] < cutoff:
            self._grants.popleft()

    def try_acquire(self) -> bool:
        """
        Try to admit one request.

        Returns:
            True if the request was granted and recorded, False otherwise
        """
        with self._lock:
            now = self._clock()
            self._evict(now)

            if len(self._grants) < self._config.limit:
                self._grants.append(now)
                logger.debug(
                    f"Granted request ({len(self._grants)}/{self._config.limit} "
                    f"in {self._config.window_seconds}s window)"
                )
                return True

            return False

    def remaining(self) -> int:
        """Number of grants available right now."""
        with self._lock:
            self._evict(self._clock())
            return max(0, self._config.limit - len(self._grants))

    def retry_after(self) -> float | None:
        """
        Seconds until the next grant becomes available.

        Returns:
            None when a grant is available now, or when the limit is zero
            and capacity never frees up
        """
        with self._lock:
            now = self._clock()
            self._evict(now)

            if self._config.limit <= 0 or len(self._grants) < self._config.limit:
                return None

            # The oldest grant leaves once it is strictly older than the window
            oldest = self._grants[0]
            return max(0.0, oldest + self._config.window_seconds - now)
