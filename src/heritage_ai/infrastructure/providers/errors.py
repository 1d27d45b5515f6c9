"""Classification of upstream provider failures."""

from typing import Any

import httpx

from heritage_ai.domain.models import ErrorCode
from heritage_ai.resilience.exceptions import (
    ResilienceException,
    UpstreamServiceException,
)


class ProviderErrorClassifier:
    """Maps provider exceptions onto the resilience taxonomy.

    HTTP status codes are used when the exception carries one; otherwise the
    message and exception type name are matched against known patterns.
    """

    ERROR_PATTERNS: dict[str, ErrorCode] = {
        # Authentication errors
        "authentication": ErrorCode.AUTHENTICATION_ERROR,
        "unauthorized": ErrorCode.AUTHENTICATION_ERROR,
        "unauthenticated": ErrorCode.AUTHENTICATION_ERROR,
        "api key not valid": ErrorCode.AUTHENTICATION_ERROR,
        "invalid_api_key": ErrorCode.AUTHENTICATION_ERROR,
        "permission_denied": ErrorCode.AUTHENTICATION_ERROR,
        "permissiondenied": ErrorCode.AUTHENTICATION_ERROR,
        # Rate limiting errors
        "rate limit": ErrorCode.RATE_LIMIT_ERROR,
        "rate_limit": ErrorCode.RATE_LIMIT_ERROR,
        "ratelimit": ErrorCode.RATE_LIMIT_ERROR,
        "too many requests": ErrorCode.RATE_LIMIT_ERROR,
        "too_many_requests": ErrorCode.RATE_LIMIT_ERROR,
        "resource_exhausted": ErrorCode.RATE_LIMIT_ERROR,
        "resourceexhausted": ErrorCode.RATE_LIMIT_ERROR,
        "quota": ErrorCode.RATE_LIMIT_ERROR,
        # Timeout errors
        "timeout": ErrorCode.TIMEOUT_ERROR,
        "timed out": ErrorCode.TIMEOUT_ERROR,
        "deadline_exceeded": ErrorCode.TIMEOUT_ERROR,
        "deadlineexceeded": ErrorCode.TIMEOUT_ERROR,
        # Invalid requests
        "invalid_argument": ErrorCode.VALIDATION_ERROR,
        "invalidargument": ErrorCode.VALIDATION_ERROR,
        "bad request": ErrorCode.VALIDATION_ERROR,
    }

    STATUS_CODES: dict[int, ErrorCode] = {
        400: ErrorCode.VALIDATION_ERROR,
        401: ErrorCode.AUTHENTICATION_ERROR,
        403: ErrorCode.AUTHENTICATION_ERROR,
        408: ErrorCode.TIMEOUT_ERROR,
        429: ErrorCode.RATE_LIMIT_ERROR,
        504: ErrorCode.TIMEOUT_ERROR,
    }

    # Failures that another attempt cannot fix
    NON_RETRYABLE = {
        ErrorCode.AUTHENTICATION_ERROR,
        ErrorCode.RATE_LIMIT_ERROR,
        ErrorCode.VALIDATION_ERROR,
    }

    @classmethod
    def classify(
        cls, error: BaseException, provider: str, context: str = ""
    ) -> ResilienceException:
        if isinstance(error, ResilienceException):
            return error

        status_code = cls._status_code(error)
        error_code = cls.STATUS_CODES.get(status_code) if status_code else None
        if error_code is None:
            error_code = cls._match_patterns(
                f"{type(error).__name__} {error}".lower()
            )

        message = f"{context}: {error}" if context else str(error)
        return UpstreamServiceException(
            message,
            service_name=provider,
            status_code=status_code,
            is_retryable=error_code not in cls.NON_RETRYABLE,
            error_code=error_code,
        )

    @classmethod
    def _match_patterns(cls, text: str) -> ErrorCode:
        for pattern, error_code in cls.ERROR_PATTERNS.items():
            if pattern in text:
                return error_code
        return ErrorCode.EXTERNAL_SERVICE_ERROR

    @staticmethod
    def _status_code(error: BaseException) -> int | None:
        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code
        code: Any = getattr(error, "code", None)
        if isinstance(code, int) and 100 <= code < 600:
            return code
        status: Any = getattr(error, "status_code", None)
        if isinstance(status, int):
            return status
        return None


def classify_provider_error(
    error: BaseException, provider: str, context: str = ""
) -> ResilienceException:
    """Convert any provider exception into a classified resilience exception."""
    return ProviderErrorClassifier.classify(error, provider, context)
