"""Provider interfaces used by the orchestrator."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from heritage_ai.resilience.fallback import ChainProvider


class TextGenerationProvider(ABC):
    """Generative text and vision model returning JSON documents."""

    name: str = "text-generator"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for the provider are present."""

    @abstractmethod
    async def generate_json(
        self, prompt: str, system_instruction: str | None = None
    ) -> dict[str, Any]:
        """Generate a JSON object from a text prompt."""

    @abstractmethod
    async def analyze_images(
        self,
        images: list[str],
        prompt: str,
        system_instruction: str | None = None,
    ) -> dict[str, Any]:
        """Generate a JSON object describing base64-encoded images."""


class ImageSourceProvider(ChainProvider):
    """A step in the image sourcing chain.

    ``fetch`` receives the request context (``place_name`` and
    ``description``) and returns an image reference, or ``None`` when the
    provider has nothing for the subject.
    """

    async def fetch(self, context: Mapping[str, Any]) -> str | None:
        return await self.find_image(
            context["place_name"], context.get("description", "")
        )

    @abstractmethod
    async def find_image(self, place_name: str, description: str) -> str | None:
        """Return an image reference for ``place_name``."""
