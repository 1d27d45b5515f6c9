"""OpenAI chat-completions text and vision provider."""

import json
from typing import Any

import structlog
from openai import AsyncOpenAI

from heritage_ai.resilience.exceptions import UpstreamServiceException

from .base import TextGenerationProvider
from .errors import classify_provider_error

logger = structlog.get_logger()

JSON_RESPONSE_FORMAT = {"type": "json_object"}


def image_data_uri(image: str) -> str:
    """Vision input as a ``data:`` URI; bare base64 is assumed to be JPEG."""
    if image.startswith("data:"):
        return image
    return f"data:image/jpeg;base64,{image}"


class OpenAITextProvider(TextGenerationProvider):
    """Alternative text generator selected with ``TEXT_PROVIDER=openai``."""

    name = "openai-text"

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-5",
        base_url: str | None = None,
        max_tokens: int = 4000,
        client: AsyncOpenAI | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client = client
        self._base_url = base_url

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> AsyncOpenAI:
        # Retries are owned by the orchestrator's retry controller
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key, base_url=self._base_url, max_retries=0
            )
        return self._client

    async def generate_json(
        self, prompt: str, system_instruction: str | None = None
    ) -> dict[str, Any]:
        return await self._complete(prompt, system_instruction)

    async def analyze_images(
        self,
        images: list[str],
        prompt: str,
        system_instruction: str | None = None,
    ) -> dict[str, Any]:
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        content.extend(
            {"type": "image_url", "image_url": {"url": image_data_uri(image)}}
            for image in images
        )
        return await self._complete(content, system_instruction)

    async def _complete(
        self, content: Any, system_instruction: str | None
    ) -> dict[str, Any]:
        messages: list[dict[str, Any]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": content})

        try:
            response = await self.client.chat.completions.create(  # type: ignore[call-overload]
                model=self.model,
                messages=messages,
                response_format=JSON_RESPONSE_FORMAT,
                max_completion_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.error("OpenAI generation failed", model=self.model, error=str(e))
            raise classify_provider_error(e, self.name, "OpenAI generation") from e

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise UpstreamServiceException(
                "Empty response from OpenAI", service_name=self.name
            )

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise UpstreamServiceException(
                f"OpenAI returned invalid JSON: {e}", service_name=self.name
            ) from e

        if not isinstance(document, dict):
            raise UpstreamServiceException(
                "OpenAI returned a non-object JSON document", service_name=self.name
            )
        return document
