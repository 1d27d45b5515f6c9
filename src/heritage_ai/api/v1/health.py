"""Health check API endpoints."""

from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status

from heritage_ai import __version__
from heritage_ai.api.dependencies import get_container
from heritage_ai.core.dependency_container import ServiceContainer

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", response_model=dict[str, str])
async def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
    }


@router.get("/ready", response_model=dict[str, Any])
async def readiness_check(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> dict[str, Any]:
    """Readiness check: the orchestrator is wired and serving."""
    if not container.is_initialized:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready",
        )

    orchestrator = await container.get_orchestrator()
    stats = orchestrator.get_stats()
    return {
        "status": "ready",
        "timestamp": datetime.now(UTC).isoformat(),
        "checks": {
            "text_provider": (
                "configured"
                if stats["text_provider_configured"]
                else "not_configured"
            ),
            "image_chain": stats["image_chain"],
        },
        "caches": stats["caches"],
        "rate_limits": stats["rate_limits"],
    }


@router.get("/live", response_model=dict[str, str])
async def liveness_check() -> dict[str, str]:
    """Liveness check for Kubernetes."""
    return {
        "status": "alive",
        "timestamp": datetime.now(UTC).isoformat(),
    }
