"""Terminal image provider."""

from heritage_ai.core.fallback_content import PLACEHOLDER_BASE_URL, placeholder_image_url
from heritage_ai.domain.models import ImageProvider

from .base import ImageSourceProvider


class PlaceholderImageProvider(ImageSourceProvider):
    """Builds a placeholder image URL from the subject name. Never fails."""

    name = ImageProvider.PLACEHOLDER.value
    infallible = True

    def __init__(self, base_url: str = PLACEHOLDER_BASE_URL):
        self.base_url = base_url

    async def find_image(self, place_name: str, description: str) -> str:
        return placeholder_image_url(place_name, self.base_url)
