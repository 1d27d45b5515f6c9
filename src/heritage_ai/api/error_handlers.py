"""Exception handlers that turn failures into ``ErrorResponse`` bodies.

Degraded and rejected outcomes never reach these handlers: the orchestrator
returns them as envelopes. What lands here is malformed input, a
misconfigured deployment, or a bug.
"""

from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from heritage_ai.domain.exceptions import HeritageAIException
from heritage_ai.domain.models import ErrorCode
from heritage_ai.observability.logging import get_correlation_id

logger = structlog.get_logger()

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.RATE_LIMIT_ERROR: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.AUTHENTICATION_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.CONFIGURATION_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.TIMEOUT_ERROR: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.RETRY_EXHAUSTED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.INCOMPLETE_RESULT: status.HTTP_502_BAD_GATEWAY,
}


class ErrorResponse(BaseModel):
    """Body returned for every request that could not be served."""

    error: bool = True
    code: str
    message: str
    details: dict[str, Any] | None = None
    correlation_id: str | None = None
    timestamp: str
    path: str


class FieldError(BaseModel):
    field: str
    message: str
    value: Any


class ValidationErrorResponse(ErrorResponse):
    code: str = ErrorCode.VALIDATION_ERROR.value
    validation_errors: list[FieldError]


def _context(request: Request) -> dict[str, Any]:
    return {
        "correlation_id": get_correlation_id()
        or getattr(request.state, "correlation_id", None),
        "timestamp": datetime.now(UTC).isoformat(),
        "path": request.url.path,
    }


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Report every field FastAPI rejected while parsing the body."""
    if not isinstance(exc, RequestValidationError):
        raise exc

    body = ValidationErrorResponse(
        message="Validation failed",
        validation_errors=[
            FieldError(
                field=".".join(str(part) for part in error["loc"]),
                message=error["msg"],
                value=error.get("input"),
            )
            for error in exc.errors()
        ],
        **_context(request),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body.model_dump(mode="json"),
    )


async def application_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    if not isinstance(exc, HeritageAIException):
        raise exc

    status_code = STATUS_BY_CODE.get(
        exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    log = logger.warning if status_code < 500 else logger.error
    log(
        "Request failed",
        error_code=exc.error_code.value,
        error=str(exc),
        status_code=status_code,
        path=request.url.path,
    )

    body = ErrorResponse(
        code=exc.error_code.value,
        message=str(exc),
        details=exc.details or None,
        **_context(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def unexpected_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.exception("Unexpected error", path=request.url.path)
    body = ErrorResponse(
        code=ErrorCode.INTERNAL_ERROR.value,
        message="An unexpected error occurred",
        details={"exception_type": type(exc).__name__},
        **_context(request),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )
