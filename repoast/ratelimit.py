"""Minimum-interval gate for calls to the summarization service."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class RateLimiter:
    """Spaces successive grants at least ``min_interval_ms`` apart.

    The check, wait and timestamp update run under one lock, so concurrent
    callers receive strictly increasing grant times with the full interval
    between each pair. Waiting callers sleep rather than spin.
    """

    def __init__(
        self,
        min_interval_ms: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval_ms < 0:
            raise ValueError("min_interval_ms must not be negative")
        self.min_interval_ms = min_interval_ms
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_grant: Optional[float] = None

    @property
    def last_grant(self) -> Optional[float]:
        return self._last_grant

    def acquire(self) -> float:
        """Block until the interval since the previous grant has elapsed; return the grant time."""
        interval = self.min_interval_ms / 1000.0
        with self._lock:
            now = self._clock()
            if self._last_grant is not None:
                remaining = self._last_grant + interval - now
                while remaining > 0:
                    self._sleep(remaining)
                    now = self._clock()
                    remaining = self._last_grant + interval - now
            self._last_grant = now
            return now


__all__ = ["RateLimiter"]
