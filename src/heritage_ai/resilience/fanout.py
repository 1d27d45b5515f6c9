"""Concurrent all-or-nothing invocation of a group of upstream calls."""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog

from .exceptions import IncompleteResultException, is_retryable
from .timeout import TimeoutInvoker, is_empty_result

logger = structlog.get_logger()


class FanOutCoordinator:
    """Starts every operation of a group at once and joins them by role.

    The group succeeds only when every member returns a non-empty value
    before the deadline. On the first failure the remaining members are
    cancelled and their results discarded.
    """

    def __init__(self, invoker: TimeoutInvoker | None = None):
        self.invoker = invoker or TimeoutInvoker()

    async def fan_out(
        self,
        operations: Mapping[str, Callable[[], Awaitable[Any]]],
        deadline: float,
    ) -> dict[str, Any]:
        """Run all ``operations`` concurrently, each bounded by ``deadline``.

        Returns:
            Results keyed by role, in the order the roles were given

        Raises:
            IncompleteResultException: If any member fails, times out or is empty
        """
        if not operations:
            return {}

        tasks = {
            role: asyncio.create_task(
                self._run_member(role, operation, deadline), name=f"fanout:{role}"
            )
            for role, operation in operations.items()
        }

        try:
            await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in tasks.values() if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        for role, task in tasks.items():
            if task.cancelled():
                continue
            error = task.exception()
            if error is not None:
                logger.warning(
                    "Fan-out group failed",
                    failed_role=role,
                    error_type=type(error).__name__,
                    error=str(error),
                    cancelled=[r for r, t in tasks.items() if t.cancelled()],
                )
                if isinstance(error, IncompleteResultException):
                    raise error
                raise IncompleteResultException(
                    role, str(error), is_retryable=is_retryable(error)
                ) from error

        return {role: task.result() for role, task in tasks.items()}

    async def _run_member(
        self, role: str, operation: Callable[[], Awaitable[Any]], deadline: float
    ) -> Any:
        value = await self.invoker.invoke(operation, deadline, provider=role)
        if is_empty_result(value):
            raise IncompleteResultException(role, "empty result")
        return value
