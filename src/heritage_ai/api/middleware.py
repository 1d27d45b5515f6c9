"""HTTP middleware: correlation IDs and access logging."""

import time

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from heritage_ai.observability.logging.correlation import (
    CORRELATION_HEADER,
    CorrelationContext,
)

logger = structlog.get_logger()


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Bind the caller's ``X-Correlation-ID`` (or a fresh one) to the request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        with CorrelationContext(request.headers.get(CORRELATION_HEADER)) as context:
            request.state.correlation_id = context.correlation_id
            response = await call_next(request)

        response.headers[CORRELATION_HEADER] = context.correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers["X-Process-Time"] = f"{elapsed:.6f}"
        logger.info(
            "Request processed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=elapsed,
            client_ip=request.client.host if request.client else None,
            correlation_id=getattr(request.state, "correlation_id", None),
        )
        return response
