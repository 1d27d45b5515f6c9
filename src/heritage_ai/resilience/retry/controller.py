"""Retry controller wrapping tenacity's ``AsyncRetrying``."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
)

from ..exceptions import RetryExhaustedException, is_retryable
from .config import RetryConfig
from .strategies import RetryStrategy, strategy_for

logger = structlog.get_logger()

T = TypeVar("T")


class RetryController:
    """Re-invokes a failing operation with backoff.

    Transient failures are retried until ``max_attempts`` is reached, after
    which ``RetryExhaustedException`` carries the last error. Non-retryable
    failures (rate limiting, authentication) propagate on the first attempt.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        strategy: RetryStrategy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or RetryConfig()
        self.strategy = strategy or strategy_for(self.config)
        self._sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: int | None = None,
        base_delay: float | None = None,
        service_name: str = "upstream",
    ) -> T:
        """Run ``operation`` until it succeeds or attempts are exhausted.

        Args:
            operation: Zero-argument factory returning a fresh awaitable per attempt
            max_attempts: Overrides the configured attempt count
            base_delay: Overrides the configured base delay
            service_name: Name used in logs and in the exhaustion error

        Raises:
            RetryExhaustedException: When every attempt failed with a retryable error
        """
        config = self.config
        if max_attempts is not None or base_delay is not None:
            config = config.model_copy(
                update={
                    key: value
                    for key, value in (
                        ("max_attempts", max_attempts),
                        ("base_delay", base_delay),
                    )
                    if value is not None
                }
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(config.max_attempts),
            wait=self.strategy.wait(config),
            retry=retry_if_exception(is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry(service_name),
        )

        try:
            async for attempt in retrying:
                with attempt:
                    result = await operation()
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                "Operation failed after all retries",
                service_name=service_name,
                attempts=config.max_attempts,
                error_type=type(last_error).__name__ if last_error else None,
                error_message=str(last_error) if last_error else None,
            )
            raise RetryExhaustedException(
                service_name, config.max_attempts, last_error
            ) from last_error

        if attempt.retry_state.attempt_number > 1:
            logger.info(
                "Operation succeeded after retries",
                service_name=service_name,
                attempts=attempt.retry_state.attempt_number,
            )
        return result

    @staticmethod
    def _log_retry(service_name: str) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "Operation failed, retrying",
                service_name=service_name,
                attempt=retry_state.attempt_number,
                delay=retry_state.next_action.sleep if retry_state.next_action else None,
                error_type=type(error).__name__ if error else None,
                error_message=str(error) if error else None,
            )

        return before_sleep
