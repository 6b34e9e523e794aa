"""Sliding-window attempt counter used by the access-code self-service."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Callable
from threading import Lock


class SlidingWindowLimiter:
    """Counts attempts per key within the last ``window_seconds``.

    Every call to :meth:`hit` is recorded, including the refused ones, so a
    client that keeps retrying stays blocked until it pauses for a full window.
    """

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] | None = None) -> None:
        if limit <= 0:
            raise ValueError("Limit must be positive.")
        if window_seconds <= 0:
            raise ValueError("Window must be positive.")
        self._limit = limit
        self._window = float(window_seconds)
        self._clock = clock or time.monotonic
        self._lock = Lock()
        self._attempts: dict[str, deque[float]] = defaultdict(deque)

    @property
    def limit(self) -> int:
        return self._limit

    def hit(self, key: str) -> bool:
        """Record an attempt for ``key`` and return whether it is within the limit."""
        now = self._clock()
        with self._lock:
            attempts = self._attempts[key]
            self._expire(attempts, now)
            allowed = len(attempts) < self._limit
            attempts.append(now)
            return allowed

    def count(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            attempts = self._attempts.get(key)
            if not attempts:
                return 0
            self._expire(attempts, now)
            return len(attempts)

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()

    def _expire(self, attempts: deque[float], now: float) -> None:
        cutoff = now - self._window
        while attempts and attempts[0] <= cutoff:
            attempts.popleft()
