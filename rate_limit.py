# rate_limit.py
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the key's window resets


@dataclass
class _Window:
    start: float
    count: int = 0


class FixedWindowRateLimiter:
    """
    Per-key request counter over fixed windows.

    A key's window opens on its first hit and resets `window_seconds` later.
    Expired windows are swept at most once per `window_seconds`, so keys that
    never come back do not stay in memory. Safe to share between request
    threads.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> None:
        # caller holds self._lock
        if now - self._last_sweep < self.window_seconds:
            return
        self._windows = {
            key: w
            for key, w in self._windows.items()
            if now - w.start < self.window_seconds
        }
        self._last_sweep = now

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            self._sweep(now)

            window = self._windows.get(key)
            if window is None or now - window.start >= self.window_seconds:
                window = _Window(start=now)
                self._windows[key] = window

            reset_after = max(0.0, self.window_seconds - (now - window.start))
            if window.count >= self.max_requests:
                return RateLimitDecision(False, self.max_requests, 0, reset_after)

            window.count += 1
            return RateLimitDecision(
                True, self.max_requests, self.max_requests - window.count, reset_after
            )

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._last_sweep = self._clock()
