"""Async HTTP client for the Heritage AI API."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from heritage_ai.config.settings import RetrySettings
from heritage_ai.core.fallback_content import placeholder_image_url
from heritage_ai.domain.models import (
    AnalysisResponse,
    CompositeResponse,
    DegradedReason,
    ImageProvider,
    ImageResponse,
    ImageResult,
    ResponseStatus,
    ServedFrom,
)
from heritage_ai.resilience.exceptions import (
    ResilienceException,
    RetryExhaustedException,
    UpstreamServiceException,
)
from heritage_ai.resilience.retry import RetryConfig, RetryController

from .exceptions import ClientCallError, ClientErrorCause, ClientRateLimitError

logger = structlog.get_logger()

EnvelopeT = TypeVar("EnvelopeT", bound=BaseModel)

PLACES_PATH = "/api/v1/places/details"
IMAGES_PATH = "/api/v1/images/generate"
ANALYSIS_PATH = "/api/v1/images/analyze"


@dataclass(frozen=True)
class ErrorMessages:
    """User-facing messages for one operation."""

    rate_limited: str
    failed: str


PLACE_MESSAGES = ErrorMessages(
    rate_limited="Too many requests. Please try again in a moment.",
    failed=(
        "Unable to load heritage information. "
        "Please check your connection and try again."
    ),
)
IMAGE_MESSAGES = ErrorMessages(
    rate_limited="Too many requests. Please try again in a moment.",
    failed="Unable to generate an image.",
)
ANALYSIS_MESSAGES = ErrorMessages(
    rate_limited="Too many analysis requests. Please try again in a moment.",
    failed="Unable to analyze images. Please try again later.",
)


class HeritageAPIClient:
    """Calls the API with bounded retries and exponential backoff.

    Rate-limit rejections are raised immediately as ``ClientRateLimitError``.
    Other failures are retried; when retries run out a ``ClientCallError``
    with a user-facing message is raised. Image generation never raises and
    falls back to a placeholder image instead.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        settings: RetrySettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or RetrySettings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url, timeout=timeout
        )
        self._sleep = sleep

    async def __aenter__(self) -> "HeritageAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_place_details(
        self, place_name: str, language: str
    ) -> CompositeResponse:
        return await self._call(
            PLACES_PATH,
            {"placeName": place_name, "language": language},
            CompositeResponse,
            self.settings.client_retries,
            PLACE_MESSAGES,
        )

    async def generate_image(
        self, place_name: str, visual_description: str = ""
    ) -> ImageResult:
        """Image for a site; a placeholder when the call fails for any reason."""
        try:
            envelope = await self._call(
                IMAGES_PATH,
                {"placeName": place_name, "visualDescription": visual_description},
                ImageResponse,
                self.settings.client_image_retries,
                IMAGE_MESSAGES,
            )
            return envelope.payload
        except Exception as e:
            logger.warning(
                "Image generation failed, using placeholder",
                place_name=place_name,
                error_type=type(e).__name__,
                cause=e.cause.value if isinstance(e, ClientCallError) else None,
            )
            return ImageResult(
                image_ref=placeholder_image_url(place_name),
                provider=ImageProvider.PLACEHOLDER,
                served_from=ServedFrom.FALLBACK,
            )

    async def analyze_images(
        self, images: list[str], language: str = "English"
    ) -> AnalysisResponse:
        return await self._call(
            ANALYSIS_PATH,
            {"images": images, "language": language},
            AnalysisResponse,
            self.settings.client_retries,
            ANALYSIS_MESSAGES,
        )

    async def _call(
        self,
        path: str,
        body: dict[str, Any],
        envelope: type[EnvelopeT],
        retries: int,
        messages: ErrorMessages,
    ) -> EnvelopeT:
        controller = RetryController(
            RetryConfig.for_client(self.settings, retries), sleep=self._sleep
        )
        try:
            return await controller.run(
                lambda: self._post(path, body, envelope), service_name=path
            )
        except ClientRateLimitError as e:
            logger.warning("Request rate limited", path=path)
            raise ClientRateLimitError(messages.rate_limited, e.retry_after) from e
        except RetryExhaustedException as e:
            cause = (
                ClientErrorCause.CONNECTIVITY
                if isinstance(e.last_error, httpx.TransportError)
                else ClientErrorCause.UNKNOWN
            )
            raise ClientCallError(messages.failed, cause) from e.last_error
        except ResilienceException as e:
            status_code = getattr(e, "status_code", None)
            raise ClientCallError(
                messages.failed, ClientErrorCause.UNKNOWN, status_code
            ) from e

    async def _post(
        self, path: str, body: dict[str, Any], envelope: type[EnvelopeT]
    ) -> EnvelopeT:
        response = await self._client.post(path, json=body)

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise ClientRateLimitError(retry_after=_retry_after(response))

        if response.is_error:
            raise UpstreamServiceException(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                service_name=path,
                status_code=response.status_code,
                is_retryable=response.is_server_error,
            )

        data = response.json()
        if isinstance(data, dict) and (
            data.get("status") == ResponseStatus.REJECTED.value
            or data.get("reason") == DegradedReason.RATE_LIMITED.value
        ):
            raise ClientRateLimitError(retry_after=data.get("retry_after"))

        # Envelope mismatches are not retried
        try:
            return envelope.model_validate(data)
        except ValidationError as e:
            raise UpstreamServiceException(
                f"Malformed response body: {e.error_count()} validation errors",
                service_name=path,
                status_code=response.status_code,
                is_retryable=False,
            ) from e


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    try:
        return float(value) if value else None
    except ValueError:
        return None
