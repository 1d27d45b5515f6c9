"""Heritage site details endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from heritage_ai.api.dependencies import get_client_identity, get_orchestrator
from heritage_ai.api.responses import envelope_response
from heritage_ai.core.orchestrator import RequestOrchestrator
from heritage_ai.domain.models import CompositeResponse, PlaceDetailsRequest

router = APIRouter(prefix="/places", tags=["places"])


@router.post(
    "/details",
    response_model=CompositeResponse,
    responses={429: {"model": CompositeResponse}},
)
async def fetch_place_details(
    body: PlaceDetailsRequest,
    orchestrator: Annotated[RequestOrchestrator, Depends(get_orchestrator)],
    client_id: Annotated[str, Depends(get_client_identity)],
) -> JSONResponse:
    """Metadata, insight and visualization sections for a heritage site."""
    envelope = await orchestrator.fetch_composite(
        client_id, body.place_name, body.language
    )
    return envelope_response(envelope)
