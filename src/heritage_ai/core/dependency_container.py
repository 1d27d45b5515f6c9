"""Dependency injection container wiring the orchestrator and its collaborators."""

import asyncio
from typing import Any

import httpx
import structlog

from heritage_ai.config.settings import ApplicationSettings, ProviderSettings
from heritage_ai.domain.models import Endpoint
from heritage_ai.infrastructure.providers import (
    GeminiImageProvider,
    GeminiTextProvider,
    OpenAITextProvider,
    PlaceholderImageProvider,
    TextGenerationProvider,
    UnsplashSearchProvider,
    WikimediaSearchProvider,
    configure_gemini,
)
from heritage_ai.resilience.cache import ResponseCache
from heritage_ai.resilience.fallback import FallbackChain, FallbackChainResolver
from heritage_ai.resilience.fanout import FanOutCoordinator
from heritage_ai.resilience.rate_limiting import RateLimitManager
from heritage_ai.resilience.retry import RetryConfig, RetryController
from heritage_ai.resilience.timeout import TimeoutInvoker

from .orchestrator import RequestOrchestrator

logger = structlog.get_logger()


def build_text_provider(providers: ProviderSettings) -> TextGenerationProvider:
    """The text and vision provider named by ``TEXT_PROVIDER``."""
    if providers.text_provider == "openai":
        return OpenAITextProvider(
            providers.openai_api_key,
            model=providers.openai_model,
            base_url=providers.openai_base_url,
        )
    return GeminiTextProvider(
        providers.gemini_api_key,
        text_model=providers.text_model,
        vision_model=providers.vision_model,
    )


class ServiceContainer:
    """Owns process-lifetime state: limiters, caches, providers and HTTP client."""

    def __init__(self, settings: ApplicationSettings) -> None:
        self.settings = settings
        self._services: dict[str, Any] = {}
        self._lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the container and all services."""
        async with self._lock:
            if self._initialized:
                return

            settings = self.settings
            providers = settings.providers

            configure_gemini(providers.gemini_api_key)
            http_client = httpx.AsyncClient(timeout=settings.timeouts.image_search)
            self._services["http_client"] = http_client

            invoker = TimeoutInvoker()
            image_chain = FallbackChain(
                Endpoint.IMAGE.value,
                [
                    GeminiImageProvider(providers.gemini_api_key, providers.image_model),
                    UnsplashSearchProvider(
                        http_client,
                        providers.unsplash_access_key,
                        providers.unsplash_api_url,
                    ),
                    WikimediaSearchProvider(http_client, providers.wikimedia_api_url),
                    PlaceholderImageProvider(providers.placeholder_base_url),
                ],
                deadline=settings.timeouts.image_generation,
            )

            self._services["orchestrator"] = RequestOrchestrator(
                rate_limits=RateLimitManager.from_settings(settings.rate_limit),
                composite_cache=ResponseCache(
                    Endpoint.COMPOSITE.value,
                    ttl=settings.cache.composite_ttl,
                    max_entries=settings.cache.max_entries,
                ),
                image_cache=ResponseCache(
                    Endpoint.IMAGE.value,
                    ttl=settings.cache.image_ttl,
                    max_entries=settings.cache.max_entries,
                ),
                text_provider=build_text_provider(providers),
                image_chain=image_chain,
                timeouts=settings.timeouts,
                retry=RetryController(RetryConfig.for_upstream(settings.retry)),
                invoker=invoker,
                fan_out=FanOutCoordinator(invoker),
                resolver=FallbackChainResolver(invoker),
                placeholder_base_url=providers.placeholder_base_url,
            )

            self._initialized = True
            logger.info(
                "Service container initialized",
                text_provider=providers.text_provider,
                text_provider_configured=providers.has_text_credentials,
                image_chain=image_chain.provider_names,
            )

    async def get_orchestrator(self) -> RequestOrchestrator:
        """Get orchestrator instance."""
        if not self._initialized:
            await self.initialize()

        orchestrator: RequestOrchestrator | None = self._services.get("orchestrator")
        if not orchestrator:
            raise RuntimeError("Orchestrator not available")
        return orchestrator

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def shutdown(self) -> None:
        """Release the shared HTTP client and drop all services."""
        async with self._lock:
            http_client: httpx.AsyncClient | None = self._services.get("http_client")
            if http_client is not None:
                await http_client.aclose()
            self._services.clear()
            self._initialized = False
            logger.info("Service container shutdown")
