"""Tests for the fan-out coordinator."""

import asyncio

import pytest

from heritage_ai.domain.models import ErrorCode
from heritage_ai.resilience.exceptions import (
    IncompleteResultException,
    UpstreamServiceException,
)
from heritage_ai.resilience.fanout import FanOutCoordinator


def returning(value, delay: float = 0.0):
    async def operation():
        if delay:
            await asyncio.sleep(delay)
        return value

    return operation


def failing(error: Exception, delay: float = 0.0):
    async def operation():
        if delay:
            await asyncio.sleep(delay)
        raise error

    return operation


class TestFanOutCoordinator:
    """Test all-or-nothing fan-out."""

    @pytest.fixture
    def coordinator(self):
        """Create a coordinator."""
        return FanOutCoordinator()

    @pytest.mark.asyncio
    async def test_results_keyed_by_role(self, coordinator):
        """Test that results follow roles, not completion order."""
        results = await coordinator.fan_out(
            {
                "slow": returning("first", delay=0.05),
                "fast": returning("second"),
            },
            deadline=1.0,
        )

        assert results == {"slow": "first", "fast": "second"}
        assert list(results) == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_members_run_concurrently(self, coordinator):
        """Test that members overlap in time."""
        loop = asyncio.get_running_loop()
        started = loop.time()

        await coordinator.fan_out(
            {f"role{i}": returning(i + 1, delay=0.1) for i in range(4)},
            deadline=1.0,
        )

        assert loop.time() - started < 0.35

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self, coordinator):
        """Test that one failure fails the group and cancels the rest."""
        sibling_cancelled = asyncio.Event()

        async def long_running():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                sibling_cancelled.set()
                raise
            return "late"

        with pytest.raises(IncompleteResultException) as exc_info:
            await coordinator.fan_out(
                {
                    "broken": failing(ValueError("boom"), delay=0.01),
                    "slow": long_running,
                },
                deadline=5.0,
            )

        assert exc_info.value.failed_role == "broken"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert sibling_cancelled.is_set()

    @pytest.mark.asyncio
    async def test_empty_result_fails_group(self, coordinator):
        """Test that an empty member result counts as a failure."""
        with pytest.raises(IncompleteResultException) as exc_info:
            await coordinator.fan_out(
                {"full": returning({"a": 1}), "empty": returning({})},
                deadline=1.0,
            )

        assert exc_info.value.failed_role == "empty"
        assert exc_info.value.reason == "empty result"

    @pytest.mark.asyncio
    async def test_timeout_fails_group(self, coordinator):
        """Test that a member missing the deadline fails the group."""
        with pytest.raises(IncompleteResultException) as exc_info:
            await coordinator.fan_out(
                {"ok": returning("x"), "stuck": returning("y", delay=10)},
                deadline=0.05,
            )

        assert exc_info.value.failed_role == "stuck"
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_non_retryable_member_error_propagates_retryability(
        self, coordinator
    ):
        """Test that a non-retryable member failure makes the group non-retryable."""
        error = UpstreamServiceException(
            "bad key",
            service_name="text",
            is_retryable=False,
            error_code=ErrorCode.AUTHENTICATION_ERROR,
        )

        with pytest.raises(IncompleteResultException) as exc_info:
            await coordinator.fan_out({"auth": failing(error)}, deadline=1.0)

        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_empty_group(self, coordinator):
        """Test that no operations yield no results."""
        assert await coordinator.fan_out({}, deadline=1.0) == {}
