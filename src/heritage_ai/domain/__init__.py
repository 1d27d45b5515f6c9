"""Domain layer for the Heritage AI application.

Payload models, response envelopes and the base exception hierarchy.
"""

from .exceptions import (
    ConfigurationException,
    HeritageAIException,
    ValidationException,
)
from .models import (
    AnalysisResponse,
    AnalysisResult,
    AttemptOutcome,
    ChainResolution,
    CompositeResponse,
    CompositeResult,
    DegradedReason,
    Endpoint,
    EndpointResponse,
    ErrorCode,
    ImageProvider,
    ImageResponse,
    ImageResult,
    PlaceMetadata,
    ResponseStatus,
    Section,
    ServedFrom,
    UpstreamAttempt,
    VisualExperience,
)

__all__ = [
    # Models
    "AnalysisResponse",
    "AnalysisResult",
    "AttemptOutcome",
    "ChainResolution",
    "CompositeResponse",
    "CompositeResult",
    "DegradedReason",
    "Endpoint",
    "EndpointResponse",
    "ErrorCode",
    "ImageProvider",
    "ImageResponse",
    "ImageResult",
    "PlaceMetadata",
    "ResponseStatus",
    "Section",
    "ServedFrom",
    "UpstreamAttempt",
    "VisualExperience",
    # Exceptions
    "ConfigurationException",
    "HeritageAIException",
    "ValidationException",
]
