"""Resilience patterns for upstream provider calls.

Admission control, response caching, deadline-bounded invocation, retry
with backoff, all-or-nothing fan-out and ordered provider fallback.
"""

from .cache import CacheEntry, ResponseCache, fingerprint
from .exceptions import (
    IncompleteResultException,
    RateLimitExceededException,
    ResilienceException,
    RetryExhaustedException,
    UpstreamServiceException,
    UpstreamTimeoutException,
    is_retryable,
)
from .fallback import ChainProvider, FallbackChain, FallbackChainResolver
from .fanout import FanOutCoordinator
from .rate_limiting import (
    FixedWindowRateLimiter,
    RateLimitConfig,
    RateLimitManager,
    RateLimitResult,
)
from .retry import RetryConfig, RetryController
from .timeout import TimeoutInvoker, is_empty_result

__all__ = [
    # Exceptions
    "ResilienceException",
    "RateLimitExceededException",
    "UpstreamTimeoutException",
    "UpstreamServiceException",
    "IncompleteResultException",
    "RetryExhaustedException",
    "is_retryable",
    # Rate limiting
    "FixedWindowRateLimiter",
    "RateLimitConfig",
    "RateLimitManager",
    "RateLimitResult",
    # Cache
    "CacheEntry",
    "ResponseCache",
    "fingerprint",
    # Invocation
    "TimeoutInvoker",
    "is_empty_result",
    "RetryConfig",
    "RetryController",
    "FanOutCoordinator",
    # Fallback
    "ChainProvider",
    "FallbackChain",
    "FallbackChainResolver",
]
