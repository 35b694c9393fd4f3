"""Sliding-window rate limiting keyed by user id."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable

from ..core.ports.rate_limit_port import RateLimitStorePort


class SlidingWindowRateLimitStore(RateLimitStorePort):
    """In-memory sliding-window request log.

    Each key holds the millisecond timestamps of its accepted requests. A key's
    expired timestamps are pruned on its own ``hit``; every ``sweep_interval``
    hits, keys with no request inside the window are dropped altogether so the
    log does not grow with every user id ever seen.

    ``clock`` returns seconds (``time.monotonic`` by default).
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: int = 1000,
    ) -> None:
        self._clock = clock
        self._sweep_interval = max(1, sweep_interval)
        self._hits_since_sweep = 0
        self._requests: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def hit(self, key: str, limit: int, window_ms: float) -> bool:
        with self._lock:
            now = self._now_ms()

            self._hits_since_sweep += 1
            if self._hits_since_sweep >= self._sweep_interval:
                self._sweep(now, window_ms)

            timestamps = self._requests.get(key)
            if timestamps is not None:
                while timestamps and now - timestamps[0] >= window_ms:
                    timestamps.popleft()

            if (len(timestamps) if timestamps else 0) >= limit:
                return False

            if timestamps is None:
                timestamps = self._requests[key] = deque()
            timestamps.append(now)
            return True

    def _sweep(self, now: float, window_ms: float) -> None:
        expired = [k for k, ts in self._requests.items() if not ts or now - ts[-1] >= window_ms]
        for k in expired:
            del self._requests[k]
        self._hits_since_sweep = 0

    def reset(self, key: str) -> None:
        with self._lock:
            self._requests.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._requests.clear()
            self._hits_since_sweep = 0

    def active_keys(self) -> int:
        with self._lock:
            return len(self._requests)
