from __future__ import annotations

import math
import time

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from inventory_api.config import Settings
from inventory_api.core.errors import RateLimitExceeded


class RateLimiter:
    """Fixed-window request counter keyed by client address."""

    def __init__(self, scope: str, max_requests: int, window_seconds: int, message: str):
        self.scope = scope
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self._storage)

    def hit(self, client_key: str) -> int:
        """Count one request; return the remaining allowance or raise ``RateLimitExceeded``."""
        if not self._strategy.hit(self._item, self.scope, client_key):
            raise RateLimitExceeded(self.message, retry_after=self.retry_after(client_key))
        return self._strategy.get_window_stats(self._item, self.scope, client_key).remaining

    def retry_after(self, client_key: str) -> int:
        stats = self._strategy.get_window_stats(self._item, self.scope, client_key)
        return max(1, int(math.ceil(stats.reset_time - time.time())))

    def reset(self) -> None:
        self._storage.reset()


def build_rate_limiters(settings: Settings) -> list[tuple[str, RateLimiter]]:
    """Path-prefix rules; every matching rule counts the request."""
    window = settings.RATE_LIMIT_WINDOW_SECONDS
    return [
        (
            "/api/",
            RateLimiter(
                scope="general",
                max_requests=settings.RATE_LIMIT_GENERAL_MAX,
                window_seconds=window,
                message="Too many requests from this IP",
            ),
        ),
        (
            "/api/auth/",
            RateLimiter(
                scope="auth",
                max_requests=settings.RATE_LIMIT_AUTH_MAX,
                window_seconds=window,
                message="Too many authentication attempts",
            ),
        ),
    ]


__all__ = ["RateLimiter", "build_rate_limiters"]
