"""Exception hierarchy for the Heritage AI application."""

from typing import Any

from .models import ErrorCode


class HeritageAIException(Exception):
    """Base exception for the Heritage AI application."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: dict[str, Any] | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}
        self.correlation_id = correlation_id


class ValidationException(HeritageAIException):
    """Validation error exception."""

    def __init__(self, message: str, field: str, value: Any):
        super().__init__(
            message, ErrorCode.VALIDATION_ERROR, {"field": field, "value": str(value)}
        )
        self.field = field


class ConfigurationException(HeritageAIException):
    """Invalid or incomplete configuration."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)
