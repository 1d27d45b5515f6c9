"""Domain models for the Heritage AI application."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class Endpoint(str, Enum):
    """Logical endpoints served by the orchestrator."""

    COMPOSITE = "composite"
    IMAGE = "image"
    ANALYSIS = "analysis"


class ResponseStatus(str, Enum):
    """Response classes visible to the consuming layer."""

    OK = "ok"
    DEGRADED = "degraded"
    REJECTED = "rejected"


class DegradedReason(str, Enum):
    """Machine-readable reason attached to non-ok responses."""

    RATE_LIMITED = "rate_limited"
    UPSTREAM_EXHAUSTED = "upstream_exhausted"
    NO_CREDENTIALS = "no_credentials"


class ServedFrom(str, Enum):
    """Where a payload came from."""

    CACHE = "cache"
    LIVE = "live"
    FALLBACK = "fallback"


class ImageProvider(str, Enum):
    """Providers in the image sourcing chain, in fallback order."""

    PRIMARY_GENERATOR = "primary-generator"
    SEARCH_A = "search-A"
    SEARCH_B = "search-B"
    PLACEHOLDER = "placeholder"


class AttemptOutcome(str, Enum):
    """Outcome of a single upstream attempt."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Standardized error codes."""

    VALIDATION_ERROR = "validation_error"
    AUTHENTICATION_ERROR = "authentication_error"
    RATE_LIMIT_ERROR = "rate_limit_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"
    TIMEOUT_ERROR = "timeout_error"
    INCOMPLETE_RESULT = "incomplete_result"
    RETRY_EXHAUSTED = "retry_exhausted"
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_ERROR = "internal_error"


@dataclass
class UpstreamAttempt:
    """Record of one call to an upstream provider.

    Scoped to a single request's resolution and never persisted.
    """

    provider: str
    started_at: float
    deadline: float
    outcome: AttemptOutcome | None = None
    value: Any = None
    error: str | None = None
    finished_at: float | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == AttemptOutcome.SUCCESS

    @property
    def duration(self) -> float | None:
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "outcome": self.outcome.value if self.outcome else None,
            "duration": self.duration,
            "error": self.error,
        }


@dataclass
class ChainResolution:
    """Result of walking a fallback chain."""

    value: Any
    provider: str
    attempts: list[UpstreamAttempt] = field(default_factory=list)


# Payload models
class PayloadModel(BaseModel):
    """Base for payloads returned to the consuming layer."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        use_enum_values=True,
        populate_by_name=True,
    )


class Section(PayloadModel):
    """A titled block of localized content."""

    title: str = ""
    content: str | list[str] = ""

    def text(self) -> str:
        if isinstance(self.content, list):
            return " ".join(self.content)
        return self.content


class PlaceMetadata(PayloadModel):
    """Header facts about a heritage site."""

    place_name: str = Field(default="", alias="placeName")
    location: str = ""
    time_period: str = Field(default="", alias="timePeriod")
    who_built_it: str = Field(default="", alias="whoBuiltIt")
    architectural_style: str = Field(default="", alias="architecturalStyle")


class VisualExperience(PayloadModel):
    """Presentation hints for the insight view."""

    title_animation: str = "fade-in"
    background_visual: str = "traditional"
    transition_style: str = "smooth"
    highlight_effect: str = "subtle"
    reading_rhythm: str = "medium"


class CompositeResult(PayloadModel):
    """Metadata, narrative and visual sections produced together."""

    metadata: PlaceMetadata
    detected_language: str
    narrative_sections: list[Section] = Field(default_factory=list)
    visual_sections: list[Section] = Field(default_factory=list)
    visualization_description: str = ""
    visual_experience: VisualExperience = Field(default_factory=VisualExperience)
    served_from: ServedFrom = ServedFrom.LIVE


class ImageResult(PayloadModel):
    """An image reference and the provider that produced it."""

    image_ref: str
    provider: ImageProvider
    served_from: ServedFrom = ServedFrom.LIVE


class AnalysisResult(PayloadModel):
    """Sections describing user-supplied photos."""

    sections: list[Section] = Field(default_factory=list)
    served_from: ServedFrom = ServedFrom.LIVE


PayloadT = TypeVar("PayloadT", bound=BaseModel)


class EndpointResponse(BaseModel, Generic[PayloadT]):
    """Envelope for every endpoint: ok, degraded or rejected."""

    model_config = ConfigDict(use_enum_values=True)

    status: ResponseStatus
    reason: DegradedReason | None = None
    payload: PayloadT
    message: str | None = None
    retry_after: float | None = None

    @classmethod
    def ok(cls, payload: PayloadT) -> "EndpointResponse[PayloadT]":
        return cls(status=ResponseStatus.OK, payload=payload)

    @classmethod
    def degraded(
        cls, payload: PayloadT, reason: DegradedReason, message: str | None = None
    ) -> "EndpointResponse[PayloadT]":
        return cls(
            status=ResponseStatus.DEGRADED,
            reason=reason,
            payload=payload,
            message=message,
        )

    @classmethod
    def rejected(
        cls, payload: PayloadT, retry_after: float | None = None
    ) -> "EndpointResponse[PayloadT]":
        return cls(
            status=ResponseStatus.REJECTED,
            reason=DegradedReason.RATE_LIMITED,
            payload=payload,
            message="Rate limit exceeded. Please try again later.",
            retry_after=retry_after,
        )

    @property
    def is_ok(self) -> bool:
        return self.status == ResponseStatus.OK


# Request models
class PlaceDetailsRequest(BaseModel):
    """Request body for the composite endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    place_name: str = Field(alias="placeName", min_length=1)
    language: str = Field(min_length=1)


class GenerateImageRequest(BaseModel):
    """Request body for the image endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    place_name: str = Field(alias="placeName", min_length=1)
    visual_description: str = Field(default="", alias="visualDescription")


class AnalyzeImagesRequest(BaseModel):
    """Request body for the analysis endpoint."""

    images: list[str] = Field(min_length=1)
    language: str = "English"


CompositeResponse = EndpointResponse[CompositeResult]
ImageResponse = EndpointResponse[ImageResult]
AnalysisResponse = EndpointResponse[AnalysisResult]
