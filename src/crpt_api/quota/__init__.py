"""
Admission control for registry requests.

Provides an in-process sliding window limiter that caps how many
requests may be sent per rolling time window.
"""

from crpt_api.quota.limiter import (
    SlidingWindowLimiter,
    TimeUnit,
    WindowConfig,
)

__all__ = [
    "SlidingWindowLimiter",
    "TimeUnit",
    "WindowConfig",
]
