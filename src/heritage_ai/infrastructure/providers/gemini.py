"""Google Gemini text, vision and image providers."""

import base64
import binascii
import json
from typing import Any

import google.generativeai as genai
import structlog

from heritage_ai.core.prompts import image_prompt
from heritage_ai.domain.models import ErrorCode, ImageProvider
from heritage_ai.resilience.exceptions import UpstreamServiceException

from .base import ImageSourceProvider, TextGenerationProvider
from .errors import classify_provider_error

logger = structlog.get_logger()

JSON_GENERATION_CONFIG = genai.types.GenerationConfig(
    response_mime_type="application/json",
    candidate_count=1,
)

# Vision input is sent as JPEG regardless of the data URI prefix
VISION_MIME_TYPE = "image/jpeg"


def configure_gemini(api_key: str | None) -> None:
    """Configure the Gemini SDK once per process."""
    if api_key:
        genai.configure(api_key=api_key)  # type: ignore[attr-defined]


def strip_data_uri(image: str) -> str:
    """Return the base64 body of a ``data:`` URI, or the input unchanged."""
    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image


class GeminiTextProvider(TextGenerationProvider):
    """Gemini JSON generation for text prompts and photo analysis."""

    name = "gemini-text"

    def __init__(
        self,
        api_key: str | None,
        text_model: str = "gemini-3-flash-preview",
        vision_model: str = "gemini-3-flash-preview",
    ):
        self.api_key = api_key
        self.text_model = text_model
        self.vision_model = vision_model

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate_json(
        self, prompt: str, system_instruction: str | None = None
    ) -> dict[str, Any]:
        return await self._generate(self.text_model, prompt, system_instruction)

    async def analyze_images(
        self,
        images: list[str],
        prompt: str,
        system_instruction: str | None = None,
    ) -> dict[str, Any]:
        parts: list[Any] = []
        for image in images:
            try:
                data = base64.b64decode(strip_data_uri(image), validate=False)
            except (binascii.Error, ValueError) as e:
                raise UpstreamServiceException(
                    "Image is not valid base64",
                    service_name=self.name,
                    is_retryable=False,
                    error_code=ErrorCode.VALIDATION_ERROR,
                ) from e
            parts.append({"mime_type": VISION_MIME_TYPE, "data": data})
        parts.append(prompt)
        return await self._generate(self.vision_model, parts, system_instruction)

    async def _generate(
        self, model_name: str, contents: Any, system_instruction: str | None
    ) -> dict[str, Any]:
        model = genai.GenerativeModel(  # type: ignore[attr-defined]
            model_name=model_name,
            system_instruction=system_instruction,
            generation_config=JSON_GENERATION_CONFIG,
        )

        try:
            response = await model.generate_content_async(contents)
            text = response.text
        except Exception as e:
            logger.error("Gemini generation failed", model=model_name, error=str(e))
            raise classify_provider_error(e, self.name, "Gemini generation") from e

        if not text:
            raise UpstreamServiceException(
                "Empty response from Gemini", service_name=self.name
            )

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise UpstreamServiceException(
                f"Gemini returned invalid JSON: {e}", service_name=self.name
            ) from e

        if not isinstance(document, dict):
            raise UpstreamServiceException(
                "Gemini returned a non-object JSON document", service_name=self.name
            )
        return document


class GeminiImageProvider(ImageSourceProvider):
    """Primary image generator: renders the subject with a Gemini image model."""

    name = ImageProvider.PRIMARY_GENERATOR.value

    def __init__(self, api_key: str | None, model: str = "gemini-2.5-flash-image"):
        self.api_key = api_key
        self.model = model

    async def find_image(self, place_name: str, description: str) -> str | None:
        if not self.api_key:
            return None

        model = genai.GenerativeModel(model_name=self.model)  # type: ignore[attr-defined]
        try:
            response = await model.generate_content_async(
                image_prompt(place_name, description)
            )
        except Exception as e:
            raise classify_provider_error(e, self.name, "Gemini image generation") from e

        return self.extract_image(response)

    @staticmethod
    def extract_image(response: Any) -> str | None:
        """First inline image in the response, as a ``data:`` URI."""
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                data = getattr(inline, "data", None)
                if not data:
                    continue
                if isinstance(data, bytes):
                    data = base64.b64encode(data).decode("ascii")
                return f"data:{inline.mime_type};base64,{data}"
        return None
