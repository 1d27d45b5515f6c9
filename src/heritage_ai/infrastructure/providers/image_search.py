"""Image search providers: Unsplash (search-A) and Wikimedia (search-B)."""

from typing import Any

import httpx
import structlog

from heritage_ai.core.prompts import image_search_query
from heritage_ai.domain.models import ImageProvider

from .base import ImageSourceProvider
from .errors import classify_provider_error

logger = structlog.get_logger()


class HTTPImageSearchProvider(ImageSourceProvider):
    """Shared request handling for JSON image search APIs."""

    def __init__(self, client: httpx.AsyncClient, api_url: str):
        self.client = client
        self.api_url = api_url

    async def _get_json(
        self,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            response = await self.client.get(
                self.api_url, params=params, headers=headers
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise classify_provider_error(e, self.name, "Image search") from e


class UnsplashSearchProvider(HTTPImageSearchProvider):
    """Landscape photo search on Unsplash."""

    name = ImageProvider.SEARCH_A.value

    def __init__(
        self,
        client: httpx.AsyncClient,
        access_key: str | None,
        api_url: str = "https://api.unsplash.com/search/photos",
    ):
        super().__init__(client, api_url)
        self.access_key = access_key

    async def find_image(self, place_name: str, description: str) -> str | None:
        if not self.access_key:
            return None

        data = await self._get_json(
            {
                "query": image_search_query(place_name),
                "per_page": 1,
                "orientation": "landscape",
            },
            headers={"Authorization": f"Client-ID {self.access_key}"},
        )
        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            return None
        url: str | None = results[0].get("urls", {}).get("regular")
        return url


class WikimediaSearchProvider(HTTPImageSearchProvider):
    """Lead image of the matching Wikipedia article."""

    name = ImageProvider.SEARCH_B.value

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: str = "https://en.wikipedia.org/w/api.php",
    ):
        super().__init__(client, api_url)

    async def find_image(self, place_name: str, description: str) -> str | None:
        data = await self._get_json(
            {
                "action": "query",
                "titles": place_name,
                "prop": "pageimages",
                "format": "json",
                "pithumbsize": 800,
                "origin": "*",
            }
        )
        if not isinstance(data, dict):
            return None
        pages = (data.get("query") or {}).get("pages")
        if not pages:
            return None
        page = next(iter(pages.values()))
        source: str | None = (page.get("thumbnail") or {}).get("source")
        return source
