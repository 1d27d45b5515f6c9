"""Per-client, per-endpoint admission control."""

from .limiter import FixedWindowRateLimiter, RateLimitConfig, RateLimitResult, RateWindow
from .manager import RateLimitManager

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitConfig",
    "RateLimitResult",
    "RateWindow",
    "RateLimitManager",
]
