"""Sliding-window throttle over externally supplied timestamps.

The window owns no data. Callers hand it whatever timestamps they have
recorded and it answers whether one more send fits inside the limit.
Timestamps are monotonic seconds (``time.monotonic``).

Default: 30 sends per 3 hours.
"""

import logging
import time
from typing import Callable, Iterable, Optional

logger = logging.getLogger("chanwatch.ratelimit")

DEFAULT_PERIOD_SECONDS = 60 * 60 * 3
DEFAULT_MAX_COUNT = 30


class ThrottleWindow:
    """Count-limited sliding window.

    A timestamp is in the window iff ``now - timestamp < period``. Sending
    is allowed while fewer than ``max_count`` timestamps are in the window.
    """

    def __init__(
        self,
        period_seconds: float = DEFAULT_PERIOD_SECONDS,
        max_count: int = DEFAULT_MAX_COUNT,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize throttle window.

        Args:
            period_seconds: Window length in seconds
            max_count: Sends allowed within one window (>= 0)
            clock: Source of "now", monotonic seconds
        """
        if max_count < 0:
            raise ValueError(f"max_count must be >= 0, got {max_count}")
        if period_seconds < 0:
            raise ValueError(f"period_seconds must be >= 0, got {period_seconds}")
        self.period = period_seconds
        self.max_count = max_count
        self._clock = clock

    def in_window(self, timestamp: float, now: Optional[float] = None) -> bool:
        """Return True if ``timestamp`` is younger than the period."""
        if now is None:
            now = self._clock()
        return now - timestamp < self.period

    def count(self, timestamps: Iterable[float], now: Optional[float] = None) -> int:
        """Count timestamps currently inside the window."""
        if now is None:
            now = self._clock()
        return sum(1 for t in timestamps if self.in_window(t, now))

    def can_send(self, timestamps: Iterable[float], now: Optional[float] = None) -> bool:
        """Check whether one more send fits in the window.

        Args:
            timestamps: Every recorded send time, in or out of the window
            now: Evaluation time (defaults to the window clock)

        Returns:
            True if fewer than ``max_count`` timestamps are in the window.
            An empty collection is always sendable.
        """
        timestamps = list(timestamps)
        if not timestamps:
            return True
        return self.count(timestamps, now) < self.max_count

    def status(self, timestamps: Iterable[float], now: Optional[float] = None) -> dict:
        """Get current window status.

        Returns:
            Dict with in_window, remaining, max_count, period_seconds,
            reset_in_seconds
        """
        if now is None:
            now = self._clock()

        live = [t for t in timestamps if self.in_window(t, now)]
        reset_in = 0
        if live:
            oldest = min(live)
            reset_in = max(0, int(self.period - (now - oldest)))

        return {
            "in_window": len(live),
            "remaining": max(0, self.max_count - len(live)),
            "max_count": self.max_count,
            "period_seconds": self.period,
            "reset_in_seconds": reset_in,
        }

    def __repr__(self) -> str:
        return f"ThrottleWindow(period_seconds={self.period}, max_count={self.max_count})"
