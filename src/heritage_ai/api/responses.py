"""Mapping of orchestrator envelopes onto HTTP responses."""

import math

from fastapi import status
from fastapi.responses import JSONResponse

from heritage_ai.domain.models import EndpointResponse, ResponseStatus


def envelope_response(envelope: EndpointResponse) -> JSONResponse:  # type: ignore[type-arg]
    """``ok`` and ``degraded`` are 200; ``rejected`` is 429 with ``Retry-After``."""
    headers: dict[str, str] = {}
    status_code = status.HTTP_200_OK

    if envelope.status == ResponseStatus.REJECTED:
        status_code = status.HTTP_429_TOO_MANY_REQUESTS
        retry_after = envelope.retry_after or 0.0
        headers["Retry-After"] = str(max(1, math.ceil(retry_after)))

    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json", by_alias=True),
        headers=headers,
    )
