"""Main API router that combines all v1 endpoints."""

from fastapi import APIRouter

from heritage_ai.api.v1 import health, images, places

router = APIRouter(prefix="/api/v1")

router.include_router(places.router)
router.include_router(images.router)
router.include_router(health.router)
