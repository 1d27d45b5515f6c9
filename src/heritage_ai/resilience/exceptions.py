"""Resilience-specific exceptions.

Transient classes (timeouts, retryable upstream errors, incomplete fan-outs)
are absorbed by the retry controller and the fallback resolver. Only
``RetryExhaustedException`` and ``RateLimitExceededException`` reach the
orchestrator, which turns them into envelopes.
"""

from typing import Any

from heritage_ai.domain.exceptions import HeritageAIException
from heritage_ai.domain.models import ErrorCode


class ResilienceException(HeritageAIException):
    """Base exception for resilience patterns."""

    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message, error_code, details, correlation_id)


class RateLimitExceededException(ResilienceException):
    """Admission denied, or a provider answered "too many requests"."""

    is_retryable = False

    def __init__(
        self,
        service_name: str,
        retry_after: float | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(
            f"Rate limit exceeded for service: {service_name}",
            ErrorCode.RATE_LIMIT_ERROR,
            {"service_name": service_name, "retry_after": retry_after},
            correlation_id,
        )
        self.service_name = service_name
        self.retry_after = retry_after


class UpstreamTimeoutException(ResilienceException):
    """An upstream call did not finish before its deadline."""

    is_retryable = True

    def __init__(
        self,
        service_name: str,
        timeout_duration: float,
        correlation_id: str | None = None,
    ):
        super().__init__(
            f"Upstream call to {service_name} timed out after {timeout_duration}s",
            ErrorCode.TIMEOUT_ERROR,
            {"service_name": service_name, "timeout_duration": timeout_duration},
            correlation_id,
        )
        self.service_name = service_name
        self.timeout_duration = timeout_duration


class UpstreamServiceException(ResilienceException):
    """A provider returned a failure."""

    def __init__(
        self,
        message: str,
        service_name: str,
        status_code: int | None = None,
        is_retryable: bool = True,
        error_code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        correlation_id: str | None = None,
    ):
        super().__init__(
            message,
            error_code,
            {
                "service_name": service_name,
                "status_code": status_code,
                "is_retryable": is_retryable,
            },
            correlation_id,
        )
        self.service_name = service_name
        self.status_code = status_code
        self.is_retryable = is_retryable

    @property
    def is_authentication_error(self) -> bool:
        return self.error_code == ErrorCode.AUTHENTICATION_ERROR


class IncompleteResultException(ResilienceException):
    """A fan-out group did not produce every required member."""

    is_retryable = True

    def __init__(
        self,
        failed_role: str,
        reason: str,
        is_retryable: bool = True,
        correlation_id: str | None = None,
    ):
        super().__init__(
            f"Incomplete result: '{failed_role}' failed ({reason})",
            ErrorCode.INCOMPLETE_RESULT,
            {"failed_role": failed_role, "reason": reason},
            correlation_id,
        )
        self.failed_role = failed_role
        self.reason = reason
        self.is_retryable = is_retryable


class RetryExhaustedException(ResilienceException):
    """Retry attempts exhausted exception."""

    def __init__(
        self,
        service_name: str,
        max_attempts: int,
        last_error: BaseException | None,
        correlation_id: str | None = None,
    ):
        super().__init__(
            f"Retry attempts exhausted for service: {service_name}",
            ErrorCode.RETRY_EXHAUSTED,
            {
                "service_name": service_name,
                "max_attempts": max_attempts,
                "last_error": str(last_error) if last_error else None,
            },
            correlation_id,
        )
        self.service_name = service_name
        self.max_attempts = max_attempts
        self.last_error = last_error


def is_retryable(error: BaseException) -> bool:
    """Whether an error is worth another attempt.

    Unknown exceptions (network errors raised by client libraries, JSON
    decoding failures) count as transient.
    """
    if isinstance(error, ResilienceException):
        return error.is_retryable
    return isinstance(error, Exception)
