"""Deadline-bounded invocation of upstream operations."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from heritage_ai.domain.models import AttemptOutcome, UpstreamAttempt

from .exceptions import UpstreamTimeoutException

logger = structlog.get_logger()

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]


class TimeoutInvoker:
    """Runs an operation against a deadline.

    When the deadline passes first the operation is cancelled, so its late
    result can never reach a cache or a caller.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock

    async def invoke(
        self, operation: Operation[T], deadline: float, provider: str = "upstream"
    ) -> T:
        """Await ``operation()`` for at most ``deadline`` seconds.

        Raises:
            UpstreamTimeoutException: If the deadline elapses first
        """
        try:
            return await asyncio.wait_for(operation(), timeout=deadline)
        except TimeoutError as e:
            logger.warning(
                "Upstream call timed out", provider=provider, timeout=deadline
            )
            raise UpstreamTimeoutException(provider, deadline) from e

    async def attempt(
        self, operation: Operation[Any], deadline: float, provider: str
    ) -> UpstreamAttempt:
        """Invoke ``operation`` and record the outcome instead of raising."""
        record = UpstreamAttempt(
            provider=provider, started_at=self._clock(), deadline=deadline
        )
        try:
            record.value = await self.invoke(operation, deadline, provider)
            record.outcome = AttemptOutcome.SUCCESS
        except UpstreamTimeoutException as e:
            record.outcome = AttemptOutcome.TIMEOUT
            record.error = str(e)
        except Exception as e:
            record.outcome = AttemptOutcome.ERROR
            record.error = str(e)
        finally:
            record.finished_at = self._clock()
        return record


def is_empty_result(value: Any) -> bool:
    """Whether an upstream value carries nothing usable."""
    if value is None:
        return True
    if isinstance(value, str | bytes | list | tuple | dict | set):
        return len(value) == 0
    return False
