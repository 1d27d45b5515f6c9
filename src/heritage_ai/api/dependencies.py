"""Shared API dependencies."""

import structlog
from fastapi import HTTPException, Request

from heritage_ai.core.dependency_container import ServiceContainer
from heritage_ai.core.orchestrator import RequestOrchestrator

logger = structlog.get_logger()

UNKNOWN_CLIENT = "unknown"


def get_container(request: Request) -> ServiceContainer:
    """Service container created by the application lifespan."""
    container: ServiceContainer | None = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return container


async def get_orchestrator(request: Request) -> RequestOrchestrator:
    """Get orchestrator instance from the service container."""
    container = get_container(request)
    try:
        return await container.get_orchestrator()
    except Exception as e:
        logger.error("Failed to get orchestrator", error=str(e))
        raise HTTPException(status_code=500, detail="Service unavailable") from e


def get_client_identity(request: Request) -> str:
    """Rate-limit key for the caller.

    Taken from the ``client-ip`` header, then the first ``x-forwarded-for``
    entry, then the socket peer. Headers are set by the fronting proxy and
    can be forged by clients that reach the service directly.
    """
    client_ip = request.headers.get("client-ip", "").strip()
    if client_ip:
        return client_ip

    forwarded_for = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded_for.split(",")[0].strip()
    if first_hop:
        return first_hop

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT
