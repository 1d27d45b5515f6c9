"""Rate limit manager holding one limiter per endpoint."""

import time
from collections.abc import Callable
from typing import Any

import structlog

from heritage_ai.config.settings import RateLimitSettings
from heritage_ai.domain.models import Endpoint

from .limiter import FixedWindowRateLimiter, RateLimitConfig, RateLimitResult

logger = structlog.get_logger()


class RateLimitManager:
    """Manages per-endpoint rate limiting.

    Each endpoint gets its own limiter; a client exhausting one endpoint's
    allowance is still admitted on the others.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.limiters: dict[str, FixedWindowRateLimiter] = {}
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: RateLimitSettings,
        clock: Callable[[], float] = time.monotonic,
    ) -> "RateLimitManager":
        """Build a manager with the configured limit for every endpoint."""
        manager = cls(clock=clock)
        limits = {
            Endpoint.COMPOSITE: (settings.composite_limit, settings.composite_window),
            Endpoint.IMAGE: (settings.image_limit, settings.image_window),
            Endpoint.ANALYSIS: (settings.analysis_limit, settings.analysis_window),
        }
        for endpoint, (limit, window) in limits.items():
            manager.add_limiter(
                endpoint,
                RateLimitConfig(
                    limit=limit,
                    window_size=window,
                    max_entries=settings.max_tracked_clients,
                ),
            )
        return manager

    def add_limiter(
        self, endpoint: Endpoint | str, config: RateLimitConfig
    ) -> FixedWindowRateLimiter:
        """Add rate limiter for an endpoint."""
        name = Endpoint(endpoint).value
        limiter = FixedWindowRateLimiter(config, clock=self._clock)
        self.limiters[name] = limiter

        logger.info(
            "Added rate limiter for endpoint",
            endpoint=name,
            limit=config.limit,
            window_size=config.window_size,
        )

        return limiter

    def get_limiter(self, endpoint: Endpoint | str) -> FixedWindowRateLimiter | None:
        return self.limiters.get(_endpoint_name(endpoint))

    async def admit(self, client_id: str, endpoint: Endpoint | str) -> RateLimitResult:
        """Admit or deny a request from ``client_id`` to ``endpoint``."""
        limiter = self.get_limiter(endpoint)

        if not limiter:
            logger.warning("No rate limiter found for endpoint", endpoint=endpoint)
            # Allow request if no limiter configured
            return RateLimitResult(allowed=True, remaining=0, reset_time=0.0)

        result = await limiter.admit(client_id)
        if not result.allowed:
            logger.info(
                "Rate limit exceeded",
                endpoint=_endpoint_name(endpoint),
                client_id=client_id,
                retry_after=result.retry_after,
            )
        return result

    async def get_usage(self, client_id: str, endpoint: Endpoint | str) -> dict[str, Any]:
        """Get current usage for a client on an endpoint."""
        limiter = self.get_limiter(endpoint)

        if not limiter:
            return {
                "endpoint": _endpoint_name(endpoint),
                "client_id": client_id,
                "error": "No rate limiter configured",
            }

        usage = await limiter.get_usage(client_id)
        usage["endpoint"] = _endpoint_name(endpoint)
        usage["client_id"] = client_id
        return usage

    async def reset(self, client_id: str, endpoint: Endpoint | str) -> None:
        """Reset rate limit for a client on an endpoint."""
        limiter = self.get_limiter(endpoint)
        if limiter:
            await limiter.reset(client_id)
            logger.info(
                "Reset rate limit",
                endpoint=_endpoint_name(endpoint),
                client_id=client_id,
            )

    def get_stats(self) -> dict[str, Any]:
        """Get rate limit manager statistics."""
        return {
            "total_limiters": len(self.limiters),
            "endpoints": {
                name: {
                    "limit": limiter.config.limit,
                    "window_size": limiter.config.window_size,
                    "tracked_clients": len(limiter.windows),
                }
                for name, limiter in self.limiters.items()
            },
        }


def _endpoint_name(endpoint: Endpoint | str) -> str:
    return endpoint.value if isinstance(endpoint, Endpoint) else endpoint
