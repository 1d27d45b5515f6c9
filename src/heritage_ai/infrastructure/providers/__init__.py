"""Upstream providers: generative text, image generation and image search."""

from .base import ImageSourceProvider, TextGenerationProvider
from .errors import ProviderErrorClassifier, classify_provider_error
from .gemini import GeminiImageProvider, GeminiTextProvider, configure_gemini
from .image_search import UnsplashSearchProvider, WikimediaSearchProvider
from .openai_text import OpenAITextProvider
from .placeholder import PlaceholderImageProvider

__all__ = [
    "TextGenerationProvider",
    "ImageSourceProvider",
    "ProviderErrorClassifier",
    "classify_provider_error",
    "GeminiTextProvider",
    "GeminiImageProvider",
    "configure_gemini",
    "OpenAITextProvider",
    "UnsplashSearchProvider",
    "WikimediaSearchProvider",
    "PlaceholderImageProvider",
]
