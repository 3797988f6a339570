"""Fixed-window rate limiter for the public audit endpoint."""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, NamedTuple, Optional

from loguru import logger

from ..config import get_settings


class RateLimitDecision(NamedTuple):
    """Outcome of a rate-limit check. ``reset_at`` is a Unix timestamp."""
    allowed: bool
    remaining: int
    reset_at: float


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """
    Per-key fixed-window limiter.

    The first request from a key opens a window of ``window_seconds``;
    up to ``max_requests`` requests are allowed inside it. Windows live in
    process memory, so the limit is per process.

    Expired windows are dropped by :meth:`sweep`, which :meth:`check` also
    runs at most once per ``sweep_interval`` seconds.
    """

    def __init__(
        self,
        max_requests: Optional[int] = None,
        window_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        sweep_interval: Optional[float] = None,
    ):
        settings = get_settings()
        self.max_requests = max_requests or settings.public_audit_rate_limit
        self.window_seconds = window_seconds or settings.public_audit_rate_window_seconds
        self.sweep_interval = sweep_interval or settings.rate_limit_sweep_seconds
        self._clock = clock

        self._windows: dict[str, _Window] = {}
        self._last_sweep = clock()
        self._lock = Lock()

    def check(self, key: str) -> RateLimitDecision:
        """Count one request for *key* and say whether it is allowed."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.sweep_interval:
                self._sweep_locked(now)

            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                window = _Window(count=1, reset_at=now + self.window_seconds)
                self._windows[key] = window
                return RateLimitDecision(True, self.max_requests - 1, window.reset_at)

            if window.count >= self.max_requests:
                logger.info("Rate limit exceeded for {}", key)
                return RateLimitDecision(False, 0, window.reset_at)

            window.count += 1
            return RateLimitDecision(True, self.max_requests - window.count, window.reset_at)

    def sweep(self) -> int:
        """Drop expired windows. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        expired = [key for key, window in self._windows.items() if now > window.reset_at]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        if expired:
            logger.debug("Swept {} expired rate-limit window(s)", len(expired))
        return len(expired)

    def reset(self) -> None:
        """Forget every window."""
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


# Global rate limiter instance
_rate_limiter: Optional[FixedWindowRateLimiter] = None


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Get the global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = FixedWindowRateLimiter()
    return _rate_limiter
