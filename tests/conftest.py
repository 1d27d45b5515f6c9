"""Test configuration and fixtures."""

import asyncio
import os
from collections.abc import Mapping
from typing import Any

import pytest

# Set required environment variables for tests
os.environ["ENVIRONMENT"] = "testing"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("TEXT_PROVIDER", None)
os.environ.pop("UNSPLASH_ACCESS_KEY", None)

from heritage_ai.config.settings import TimeoutSettings  # noqa: E402
from heritage_ai.core.orchestrator import RequestOrchestrator  # noqa: E402
from heritage_ai.domain.models import Endpoint  # noqa: E402
from heritage_ai.infrastructure.providers import (  # noqa: E402
    ImageSourceProvider,
    PlaceholderImageProvider,
    TextGenerationProvider,
)
from heritage_ai.resilience.cache import ResponseCache  # noqa: E402
from heritage_ai.resilience.fallback import FallbackChain  # noqa: E402
from heritage_ai.resilience.rate_limiting import (  # noqa: E402
    RateLimitConfig,
    RateLimitManager,
)
from heritage_ai.resilience.retry import RetryConfig, RetryController  # noqa: E402

METADATA_DOCUMENT = {
    "placeName": "Taj Mahal",
    "location": "Agra, India",
    "timePeriod": "1632-1653",
    "whoBuiltIt": "Shah Jahan",
    "architecturalStyle": "Mughal",
}
INSIGHTS_DOCUMENT = {
    "language": "English",
    "mode": "deep_insight",
    "sections": [
        {"title": "Overview", "content": "A white marble mausoleum."},
        {"title": "Did You Know?", "content": ["One", "Two", "Three"]},
    ],
}
VISUALIZATION_DOCUMENT = {
    "language": "English",
    "mode": "3d_visualization",
    "sections": [
        {"title": "Depth & Spatial Layers", "content": "Gardens lead to the tomb."},
        {"title": "3D Visualization Description", "content": "A domed tomb."},
    ],
}
VISUAL_EXPERIENCE_DOCUMENT = {
    "title_animation": "fade-in",
    "background_visual": "marble",
    "transition_style": "smooth",
    "highlight_effect": "glow",
    "reading_rhythm": "slow",
}
ANALYSIS_DOCUMENT = {
    "language": "English",
    "mode": "photo_analysis",
    "sections": [{"title": "Image Description", "content": "A carved archway."}],
}


def document_for(prompt: str) -> dict[str, Any]:
    """Canned document for a prompt, chosen by the prompt's task."""
    if "Extract basic metadata" in prompt:
        return METADATA_DOCUMENT
    if "Selected mode: deep_insight" in prompt:
        return INSIGHTS_DOCUMENT
    if "Selected mode: 3d_visualization" in prompt:
        return VISUALIZATION_DOCUMENT
    if "visual experience director" in prompt:
        return VISUAL_EXPERIENCE_DOCUMENT
    if "Selected mode: photo_analysis" in prompt:
        return ANALYSIS_DOCUMENT
    raise AssertionError(f"Unexpected prompt: {prompt[:60]}")


class FakeTextProvider(TextGenerationProvider):
    """Text provider answering from canned documents.

    ``failures`` is a list of exceptions raised by successive calls before
    the canned answers are returned; ``delay`` is awaited before each call,
    or only before calls whose prompt contains ``slow_marker`` when it is set.
    """

    name = "fake-text"

    def __init__(
        self,
        configured: bool = True,
        failures: list[BaseException] | None = None,
        delay: float = 0.0,
        slow_marker: str | None = None,
    ):
        self.configured = configured
        self.failures = list(failures or [])
        self.delay = delay
        self.slow_marker = slow_marker
        self.calls: list[str] = []
        self.analyzed: list[list[str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate_json(
        self, prompt: str, system_instruction: str | None = None
    ) -> dict[str, Any]:
        self.calls.append(prompt)
        return await self._answer(prompt)

    async def analyze_images(
        self,
        images: list[str],
        prompt: str,
        system_instruction: str | None = None,
    ) -> dict[str, Any]:
        self.calls.append(prompt)
        self.analyzed.append(images)
        return await self._answer(prompt)

    async def _answer(self, prompt: str) -> dict[str, Any]:
        if self.delay and (self.slow_marker is None or self.slow_marker in prompt):
            await asyncio.sleep(self.delay)
        if self.failures:
            raise self.failures.pop(0)
        return document_for(prompt)


class FakeImageProvider(ImageSourceProvider):
    """Image provider returning a fixed value or raising a fixed error."""

    def __init__(
        self,
        name: str,
        result: str | None = None,
        error: BaseException | None = None,
    ):
        self.name = name
        self.result = result
        self.error = error
        self.calls: list[Mapping[str, Any]] = []

    async def find_image(self, place_name: str, description: str) -> str | None:
        self.calls.append({"place_name": place_name, "description": description})
        if self.error is not None:
            raise self.error
        return self.result


class ManualClock:
    """Clock advanced explicitly by tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def clock():
    """Create a manual clock."""
    return ManualClock()


@pytest.fixture
def recorded_sleep():
    """Create a sleep recorder."""
    return RecordingSleep()


@pytest.fixture
def text_provider():
    """Create a configured fake text provider."""
    return FakeTextProvider()


@pytest.fixture
def image_providers():
    """Create the image chain's providers, all empty except the placeholder."""
    return {
        "primary-generator": FakeImageProvider("primary-generator"),
        "search-A": FakeImageProvider("search-A"),
        "search-B": FakeImageProvider("search-B"),
        "placeholder": PlaceholderImageProvider(),
    }


@pytest.fixture
def build_orchestrator(clock, recorded_sleep, text_provider, image_providers):
    """Factory for an orchestrator wired with fakes and tunable limits."""

    def _build(
        composite_limit: int = 10,
        image_limit: int = 5,
        analysis_limit: int = 3,
        timeouts: TimeoutSettings | None = None,
    ) -> RequestOrchestrator:
        rate_limits = RateLimitManager(clock=clock)
        for endpoint, limit in (
            (Endpoint.COMPOSITE, composite_limit),
            (Endpoint.IMAGE, image_limit),
            (Endpoint.ANALYSIS, analysis_limit),
        ):
            rate_limits.add_limiter(endpoint, RateLimitConfig(limit=limit))

        return RequestOrchestrator(
            rate_limits=rate_limits,
            composite_cache=ResponseCache("composite", ttl=3600.0, clock=clock),
            image_cache=ResponseCache("image", ttl=7200.0, clock=clock),
            text_provider=text_provider,
            image_chain=FallbackChain(
                "image", list(image_providers.values()), deadline=1.0
            ),
            timeouts=timeouts or TimeoutSettings(),
            retry=RetryController(
                RetryConfig(max_attempts=2, base_delay=1.0), sleep=recorded_sleep
            ),
        )

    return _build


@pytest.fixture
def orchestrator(build_orchestrator):
    """Create an orchestrator with default limits."""
    return build_orchestrator()
