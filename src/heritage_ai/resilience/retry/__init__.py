"""Retry with backoff for transient upstream failures."""

from .config import RetryConfig
from .controller import RetryController
from .strategies import (
    ExponentialBackoffStrategy,
    LinearBackoffStrategy,
    RetryStrategy,
    strategy_for,
)

__all__ = [
    "RetryConfig",
    "RetryController",
    "RetryStrategy",
    "LinearBackoffStrategy",
    "ExponentialBackoffStrategy",
    "strategy_for",
]
