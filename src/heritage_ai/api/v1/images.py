"""Image generation and photo analysis endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from heritage_ai.api.dependencies import get_client_identity, get_orchestrator
from heritage_ai.api.responses import envelope_response
from heritage_ai.core.orchestrator import RequestOrchestrator
from heritage_ai.domain.models import (
    AnalysisResponse,
    AnalyzeImagesRequest,
    GenerateImageRequest,
    ImageResponse,
)

router = APIRouter(prefix="/images", tags=["images"])


@router.post(
    "/generate",
    response_model=ImageResponse,
    responses={429: {"model": ImageResponse}},
)
async def generate_image(
    body: GenerateImageRequest,
    orchestrator: Annotated[RequestOrchestrator, Depends(get_orchestrator)],
    client_id: Annotated[str, Depends(get_client_identity)],
) -> JSONResponse:
    """An image of the site: generated, searched, or a placeholder."""
    envelope = await orchestrator.fetch_image(
        client_id, body.place_name, body.visual_description
    )
    return envelope_response(envelope)


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses={429: {"model": AnalysisResponse}},
)
async def analyze_images(
    body: AnalyzeImagesRequest,
    orchestrator: Annotated[RequestOrchestrator, Depends(get_orchestrator)],
    client_id: Annotated[str, Depends(get_client_identity)],
) -> JSONResponse:
    """Localized analysis of up to five base64-encoded photos."""
    envelope = await orchestrator.analyze_images(
        client_id, body.images, body.language
    )
    return envelope_response(envelope)
