"""Errors raised by the HTTP client."""

from enum import Enum

from heritage_ai.domain.models import ErrorCode
from heritage_ai.resilience.exceptions import ResilienceException


class ClientErrorCause(str, Enum):
    """Why a client call gave up."""

    RATE_LIMIT = "rate_limit"
    CONNECTIVITY = "connectivity"
    UNKNOWN = "unknown"


class ClientCallError(ResilienceException):
    """A call failed after the client's retries; carries a user-facing message."""

    is_retryable = False

    def __init__(
        self,
        message: str,
        cause: ClientErrorCause = ClientErrorCause.UNKNOWN,
        status_code: int | None = None,
    ):
        error_code = {
            ClientErrorCause.RATE_LIMIT: ErrorCode.RATE_LIMIT_ERROR,
            ClientErrorCause.CONNECTIVITY: ErrorCode.EXTERNAL_SERVICE_ERROR,
        }.get(cause, ErrorCode.INTERNAL_ERROR)
        super().__init__(
            message,
            error_code,
            {"cause": cause.value, "status_code": status_code},
        )
        self.cause = cause
        self.status_code = status_code


class ClientRateLimitError(ClientCallError):
    """The server rejected the call for rate limiting. Never retried."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: float | None = None,
    ):
        super().__init__(message, ClientErrorCause.RATE_LIMIT, status_code=429)
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after
