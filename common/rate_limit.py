"""
In-memory sliding-window rate limiting (swap for Redis when running more than one worker).
"""
import threading
import time
from typing import Dict, List, NamedTuple

from common.config import config


class RateLimitResult(NamedTuple):
    success: bool
    remaining: int
    reset_time: int  # epoch milliseconds


class RateLimiter:
    """Track request timestamps per identifier."""

    PURGE_INTERVAL = 60.0

    def __init__(self, idle_seconds: float = None):
        self.idle_seconds = idle_seconds if idle_seconds is not None else config.rate_limit_idle_seconds
        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.Lock()
        self._last_purge = time.time()

    def check(self, identifier: str, limit: int = 5, window_seconds: float = 60.0) -> RateLimitResult:
        """Record a request for identifier unless it is over the limit."""
        now = time.time()
        window_start = now - window_seconds

        with self._lock:
            self._maybe_purge(now)

            requests = [t for t in self._requests.get(identifier, []) if t > window_start]
            self._requests[identifier] = requests

            if len(requests) >= limit:
                return RateLimitResult(
                    success=False,
                    remaining=0,
                    reset_time=int((requests[0] + window_seconds) * 1000)
                )

            requests.append(now)
            return RateLimitResult(
                success=True,
                remaining=limit - len(requests),
                reset_time=int((now + window_seconds) * 1000)
            )

    def reset(self) -> None:
        """Forget every identifier."""
        with self._lock:
            self._requests.clear()
            self._last_purge = time.time()

    def size(self) -> int:
        with self._lock:
            return len(self._requests)

    def _maybe_purge(self, now: float) -> None:
        # caller holds the lock
        if now - self._last_purge < self.PURGE_INTERVAL:
            return
        cutoff = now - self.idle_seconds
        for key in list(self._requests):
            recent = [t for t in self._requests[key] if t > cutoff]
            if recent:
                self._requests[key] = recent
            else:
                del self._requests[key]
        self._last_purge = now


# Shared limiter for the HTTP endpoints
rate_limiter = RateLimiter()
