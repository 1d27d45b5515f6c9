"""Backoff strategies used between retry attempts."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from tenacity import RetryCallState

from .config import RetryConfig


class RetryStrategy(ABC):
    """Abstract base class for backoff strategies."""

    @abstractmethod
    def calculate_delay(self, attempt: int, config: RetryConfig) -> float:
        """Delay before the attempt following attempt number ``attempt`` (1-based)."""

    def wait(self, config: RetryConfig) -> Callable[[RetryCallState], float]:
        """Adapt the strategy to a tenacity ``wait`` callable."""

        def _wait(retry_state: RetryCallState) -> float:
            return self.calculate_delay(retry_state.attempt_number, config)

        return _wait


class LinearBackoffStrategy(RetryStrategy):
    """Sleeps ``base_delay * attempt`` seconds."""

    def calculate_delay(self, attempt: int, config: RetryConfig) -> float:
        return min(config.base_delay * attempt, config.max_delay)


class ExponentialBackoffStrategy(RetryStrategy):
    """Sleeps ``base_delay * multiplier ** (attempt - 1)`` seconds."""

    def calculate_delay(self, attempt: int, config: RetryConfig) -> float:
        delay = config.base_delay * (config.multiplier ** (attempt - 1))
        return min(delay, config.max_delay)


def strategy_for(config: RetryConfig) -> RetryStrategy:
    """Pick the strategy named by ``config.backoff``."""
    if config.backoff == "exponential":
        return ExponentialBackoffStrategy()
    return LinearBackoffStrategy()
