"""Request orchestration for the three endpoints.

Every request walks the same states: rate check, cache check, upstream
strategy, cache write. Upstream failures never escape as exceptions; they
become ``degraded`` envelopes carrying fallback content.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from heritage_ai.config.settings import TimeoutSettings
from heritage_ai.domain.exceptions import ValidationException
from heritage_ai.domain.models import (
    AnalysisResponse,
    AnalysisResult,
    CompositeResponse,
    CompositeResult,
    DegradedReason,
    Endpoint,
    ImageProvider,
    ImageResponse,
    ImageResult,
    PlaceMetadata,
    Section,
    ServedFrom,
    VisualExperience,
)
from heritage_ai.infrastructure.providers.base import TextGenerationProvider
from heritage_ai.resilience.cache import ResponseCache, fingerprint
from heritage_ai.resilience.exceptions import (
    ResilienceException,
    RetryExhaustedException,
    UpstreamServiceException,
)
from heritage_ai.resilience.fallback import FallbackChain, FallbackChainResolver
from heritage_ai.resilience.fanout import FanOutCoordinator
from heritage_ai.resilience.rate_limiting import RateLimitManager
from heritage_ai.resilience.retry import RetryController
from heritage_ai.resilience.timeout import TimeoutInvoker

from . import prompts
from .fallback_content import (
    PLACEHOLDER_BASE_URL,
    mock_analysis,
    mock_composite,
    placeholder_image_url,
)

logger = structlog.get_logger()

MAX_SUBJECT_LENGTH = 200
MAX_LANGUAGE_LENGTH = 50
MAX_CONTEXT_LENGTH = 500
MAX_ANALYSIS_IMAGES = 5
DEFAULT_ANALYSIS_LANGUAGE = "English"

# Composite fan-out roles
METADATA = "metadata"
INSIGHTS = "insights"
VISUALIZATION = "visualization"
VISUAL_EXPERIENCE = "visual_experience"

COMPOSITE_DEGRADED_MESSAGE = (
    "Detailed heritage information is temporarily unavailable; "
    "showing limited information."
)
ANALYSIS_DEGRADED_MESSAGE = "Image analysis is temporarily unavailable."
NO_CREDENTIALS_MESSAGE = "Content generation is not configured."


def sanitize(value: str | None, max_length: int) -> str:
    """Trim surrounding whitespace and cap the length."""
    return (value or "").strip()[:max_length]


def require(value: str | None, max_length: int, field: str) -> str:
    sanitized = sanitize(value, max_length)
    if not sanitized:
        raise ValidationException(f"{field} must not be empty", field, value)
    return sanitized


def parse_sections(document: Mapping[str, Any], role: str) -> list[Section]:
    """Sections of a localized JSON document; at least one is required."""
    raw = document.get("sections")
    if not isinstance(raw, list) or not raw:
        raise UpstreamServiceException(
            f"Response for '{role}' has no sections", service_name=role
        )
    return [Section.model_validate(section) for section in raw]


def visualization_description(sections: list[Section]) -> str:
    """Text of the first 3D/visualization section, else of the first section."""
    for section in sections:
        title = section.title.lower()
        if "3d" in title or "visualization" in title:
            return section.text()
    return sections[0].text()


def _failure_reason(error: BaseException) -> DegradedReason:
    """``no_credentials`` when the root failure was an authentication error."""
    cause: BaseException | None = error
    while cause is not None:
        if (
            isinstance(cause, UpstreamServiceException)
            and cause.is_authentication_error
        ):
            return DegradedReason.NO_CREDENTIALS
        if isinstance(cause, RetryExhaustedException):
            cause = cause.last_error
        else:
            cause = cause.__cause__
    return DegradedReason.UPSTREAM_EXHAUSTED


class RequestOrchestrator:
    """Serves composite, image and analysis requests resiliently."""

    def __init__(
        self,
        rate_limits: RateLimitManager,
        composite_cache: ResponseCache,
        image_cache: ResponseCache,
        text_provider: TextGenerationProvider,
        image_chain: FallbackChain,
        timeouts: TimeoutSettings | None = None,
        retry: RetryController | None = None,
        invoker: TimeoutInvoker | None = None,
        fan_out: FanOutCoordinator | None = None,
        resolver: FallbackChainResolver | None = None,
        placeholder_base_url: str = PLACEHOLDER_BASE_URL,
    ):
        self.rate_limits = rate_limits
        self.composite_cache = composite_cache
        self.image_cache = image_cache
        self.text_provider = text_provider
        self.image_chain = image_chain
        self.timeouts = timeouts or TimeoutSettings()
        self.retry = retry or RetryController()
        self.invoker = invoker or TimeoutInvoker()
        self.fan_out = fan_out or FanOutCoordinator(self.invoker)
        self.resolver = resolver or FallbackChainResolver(self.invoker)
        self.placeholder_base_url = placeholder_base_url

    # Composite
    async def fetch_composite(
        self, client_id: str, subject: str, language: str
    ) -> CompositeResponse:
        """Metadata, narrative and visual sections for a heritage site."""
        subject = require(subject, MAX_SUBJECT_LENGTH, "placeName")
        language = require(language, MAX_LANGUAGE_LENGTH, "language")
        log = logger.bind(endpoint=Endpoint.COMPOSITE.value, client_id=client_id)

        admission = await self.rate_limits.admit(client_id, Endpoint.COMPOSITE)
        if not admission.allowed:
            return CompositeResponse.rejected(
                mock_composite(subject, language), admission.retry_after
            )

        key = fingerprint("place", subject, language)
        cached = await self.composite_cache.get(key)
        if cached is not None:
            log.info("Serving composite from cache", key=key)
            return CompositeResponse.ok(
                cached.model_copy(update={"served_from": ServedFrom.CACHE.value})
            )

        if not self.text_provider.is_configured:
            log.warning("Text provider credentials missing, serving fallback")
            return CompositeResponse.degraded(
                mock_composite(subject, language),
                DegradedReason.NO_CREDENTIALS,
                NO_CREDENTIALS_MESSAGE,
            )

        try:
            result = await self.retry.run(
                lambda: self._compose(subject, language), service_name="composite"
            )
        except ResilienceException as e:
            log.error("Composite generation failed", error=str(e))
            return CompositeResponse.degraded(
                mock_composite(subject, language),
                _failure_reason(e),
                COMPOSITE_DEGRADED_MESSAGE,
            )

        await self.composite_cache.put(key, result)
        return CompositeResponse.ok(result)

    async def _compose(self, subject: str, language: str) -> CompositeResult:
        text = self.text_provider
        system = prompts.LOCALIZATION_SYSTEM_INSTRUCTION
        results = await self.fan_out.fan_out(
            {
                METADATA: lambda: text.generate_json(
                    prompts.metadata_prompt(subject, language)
                ),
                INSIGHTS: lambda: text.generate_json(
                    prompts.sections_prompt(subject, language, "deep_insight"), system
                ),
                VISUALIZATION: lambda: text.generate_json(
                    prompts.sections_prompt(subject, language, "3d_visualization"),
                    system,
                ),
                VISUAL_EXPERIENCE: lambda: text.generate_json(
                    prompts.visual_experience_prompt(subject, language)
                ),
            },
            deadline=self.timeouts.text_generation,
        )

        try:
            narrative = parse_sections(results[INSIGHTS], INSIGHTS)
            visual = parse_sections(results[VISUALIZATION], VISUALIZATION)
            return CompositeResult(
                metadata=PlaceMetadata.model_validate(results[METADATA]),
                detected_language=results[INSIGHTS].get("language") or language,
                narrative_sections=narrative,
                visual_sections=visual,
                visualization_description=visualization_description(visual),
                visual_experience=VisualExperience.model_validate(
                    results[VISUAL_EXPERIENCE]
                ),
                served_from=ServedFrom.LIVE,
            )
        except ValidationError as e:
            raise UpstreamServiceException(
                f"Malformed composite response: {e.error_count()} errors",
                service_name="composite",
            ) from e

    # Image
    async def fetch_image(
        self, client_id: str, subject: str, descriptive_context: str = ""
    ) -> ImageResponse:
        """An image for a heritage site from the first provider that has one."""
        subject = require(subject, MAX_SUBJECT_LENGTH, "placeName")
        description = sanitize(descriptive_context, MAX_CONTEXT_LENGTH)
        log = logger.bind(endpoint=Endpoint.IMAGE.value, client_id=client_id)

        admission = await self.rate_limits.admit(client_id, Endpoint.IMAGE)
        if not admission.allowed:
            return ImageResponse.rejected(
                self._placeholder(subject), admission.retry_after
            )

        key = fingerprint("image", subject)
        cached = await self.image_cache.get(key)
        if cached is not None:
            log.info("Serving image from cache", key=key)
            return ImageResponse.ok(
                cached.model_copy(update={"served_from": ServedFrom.CACHE.value})
            )

        resolution = await self.resolver.resolve(
            self.image_chain, {"place_name": subject, "description": description}
        )

        if resolution.provider == ImageProvider.PLACEHOLDER.value:
            return ImageResponse.ok(
                ImageResult(
                    image_ref=resolution.value,
                    provider=ImageProvider.PLACEHOLDER,
                    served_from=ServedFrom.FALLBACK,
                )
            )

        result = ImageResult(
            image_ref=resolution.value,
            provider=ImageProvider(resolution.provider),
            served_from=ServedFrom.LIVE,
        )
        await self.image_cache.put(key, result)
        log.info("Image resolved", provider=resolution.provider)
        return ImageResponse.ok(result)

    def _placeholder(self, subject: str) -> ImageResult:
        return ImageResult(
            image_ref=placeholder_image_url(subject, self.placeholder_base_url),
            provider=ImageProvider.PLACEHOLDER,
            served_from=ServedFrom.FALLBACK,
        )

    # Analysis
    async def analyze_images(
        self,
        client_id: str,
        images: list[str],
        language: str = DEFAULT_ANALYSIS_LANGUAGE,
    ) -> AnalysisResponse:
        """Localized description of up to five user photos. Never cached."""
        images = [image for image in images if image and image.strip()]
        if not images:
            raise ValidationException("images must not be empty", "images", images)
        images = images[:MAX_ANALYSIS_IMAGES]
        language = sanitize(language, MAX_LANGUAGE_LENGTH) or DEFAULT_ANALYSIS_LANGUAGE
        log = logger.bind(endpoint=Endpoint.ANALYSIS.value, client_id=client_id)

        admission = await self.rate_limits.admit(client_id, Endpoint.ANALYSIS)
        if not admission.allowed:
            return AnalysisResponse.rejected(mock_analysis(), admission.retry_after)

        if not self.text_provider.is_configured:
            log.warning("Vision provider credentials missing, serving fallback")
            return AnalysisResponse.degraded(
                mock_analysis(), DegradedReason.NO_CREDENTIALS, NO_CREDENTIALS_MESSAGE
            )

        try:
            result = await self.retry.run(
                lambda: self._analyze(images, language), service_name="analysis"
            )
        except ResilienceException as e:
            log.error("Image analysis failed", error=str(e), image_count=len(images))
            return AnalysisResponse.degraded(
                mock_analysis(), _failure_reason(e), ANALYSIS_DEGRADED_MESSAGE
            )

        return AnalysisResponse.ok(result)

    async def _analyze(self, images: list[str], language: str) -> AnalysisResult:
        document = await self.invoker.invoke(
            lambda: self.text_provider.analyze_images(
                images,
                prompts.photo_analysis_prompt(language),
                prompts.LOCALIZATION_SYSTEM_INSTRUCTION,
            ),
            deadline=self.timeouts.image_analysis,
            provider="vision",
        )
        try:
            sections = parse_sections(document, "analysis")
        except ValidationError as e:
            raise UpstreamServiceException(
                "Malformed analysis response", service_name="analysis"
            ) from e
        return AnalysisResult(sections=sections, served_from=ServedFrom.LIVE)

    def get_stats(self) -> dict[str, Any]:
        return {
            "rate_limits": self.rate_limits.get_stats(),
            "caches": [self.composite_cache.stats(), self.image_cache.stats()],
            "image_chain": self.image_chain.provider_names,
            "text_provider_configured": self.text_provider.is_configured,
        }
