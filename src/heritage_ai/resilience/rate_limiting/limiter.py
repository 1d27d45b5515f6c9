"""Fixed-window rate limiter for per-client admission control."""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger()


@dataclass
class RateLimitConfig:
    """Rate limiting configuration."""

    limit: int = 10
    window_size: float = 60.0  # seconds
    max_entries: int = 10000


@dataclass
class RateLimitResult:
    """Rate limiting result."""

    allowed: bool
    remaining: int
    reset_time: float
    retry_after: float | None = None
    limit: int = 0
    used: int = 0


@dataclass
class RateWindow:
    """Admission counter for one client within one window."""

    count: int
    window_start: float
    limit: int
    window_duration: float

    def is_expired(self, now: float) -> bool:
        return now > self.window_start + self.window_duration

    @property
    def reset_time(self) -> float:
        return self.window_start + self.window_duration


class FixedWindowRateLimiter:
    """Fixed window rate limiter.

    The first admission for a client (or the first after its window has
    lapsed) opens a new window with a count of one. Within a window, requests
    are admitted while the count is below the limit; a denial does not
    increment the count.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize fixed window rate limiter.

        Args:
            config: Rate limiting configuration
            clock: Time source in seconds, injectable for tests
        """
        self.config = config
        self._clock = clock
        self.windows: OrderedDict[str, RateWindow] = OrderedDict()
        self._lock = asyncio.Lock()

    async def admit(self, key: str) -> RateLimitResult:
        """Admit or deny one request for ``key``."""
        async with self._lock:
            now = self._clock()
            window = self.windows.get(key)

            if window is None or window.is_expired(now):
                window = RateWindow(
                    count=1,
                    window_start=now,
                    limit=self.config.limit,
                    window_duration=self.config.window_size,
                )
                self._store(key, window)
                return self._allowed(window)

            if window.count < window.limit:
                window.count += 1
                return self._allowed(window)

            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_time=window.reset_time,
                retry_after=max(0.0, window.reset_time - now),
                limit=window.limit,
                used=window.count,
            )

    async def get_usage(self, key: str) -> dict[str, Any]:
        """Get current usage for a key without admitting anything."""
        async with self._lock:
            now = self._clock()
            window = self.windows.get(key)

            if window is None or window.is_expired(now):
                return {
                    "count": 0,
                    "limit": self.config.limit,
                    "window_start": None,
                    "window_size": self.config.window_size,
                }

            return {
                "count": window.count,
                "limit": window.limit,
                "window_start": window.window_start,
                "window_size": window.window_duration,
            }

    async def reset(self, key: str) -> None:
        """Reset rate limit for a key."""
        async with self._lock:
            self.windows.pop(key, None)

    def _store(self, key: str, window: RateWindow) -> None:
        self.windows[key] = window
        self.windows.move_to_end(key)
        while len(self.windows) > self.config.max_entries:
            evicted, _ = self.windows.popitem(last=False)
            logger.debug("Evicted rate window", key=evicted)

    def _allowed(self, window: RateWindow) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            remaining=window.limit - window.count,
            reset_time=window.reset_time,
            limit=window.limit,
            used=window.count,
        )
