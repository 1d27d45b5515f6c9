"""Tests for Gemini providers and provider error classification."""

import base64
import json
from types import SimpleNamespace

import httpx
import pytest

from heritage_ai.domain.models import ErrorCode
from heritage_ai.infrastructure.providers import (
    GeminiImageProvider,
    GeminiTextProvider,
    ProviderErrorClassifier,
    classify_provider_error,
)
from heritage_ai.infrastructure.providers import gemini
from heritage_ai.resilience.exceptions import (
    RateLimitExceededException,
    UpstreamServiceException,
)


class FakeGenerativeModel:
    """Stand-in for ``genai.GenerativeModel`` returning a fixed response."""

    response: object = None
    error: Exception | None = None
    instances: list["FakeGenerativeModel"] = []

    def __init__(self, model_name, system_instruction=None, generation_config=None):
        self.model_name = model_name
        self.system_instruction = system_instruction
        self.contents = None
        FakeGenerativeModel.instances.append(self)

    async def generate_content_async(self, contents):
        self.contents = contents
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_model(monkeypatch):
    """Patch the Gemini SDK model class."""
    FakeGenerativeModel.response = None
    FakeGenerativeModel.error = None
    FakeGenerativeModel.instances = []
    monkeypatch.setattr(gemini.genai, "GenerativeModel", FakeGenerativeModel)
    return FakeGenerativeModel


class TestProviderErrorClassifier:
    """Test provider error classification."""

    @pytest.mark.parametrize(
        "message,error_code,retryable",
        [
            (
                "API key not valid. Please pass a valid API key.",
                ErrorCode.AUTHENTICATION_ERROR,
                False,
            ),
            (
                "429 Resource has been exhausted (e.g. check quota).",
                ErrorCode.RATE_LIMIT_ERROR,
                False,
            ),
            ("Deadline Exceeded: request timed out", ErrorCode.TIMEOUT_ERROR, True),
            ("Internal server error", ErrorCode.EXTERNAL_SERVICE_ERROR, True),
        ],
    )
    def test_message_patterns(self, message, error_code, retryable):
        """Test classification by message text."""
        error = classify_provider_error(RuntimeError(message), "gemini-text")

        assert isinstance(error, UpstreamServiceException)
        assert error.error_code == error_code
        assert error.is_retryable is retryable

    def test_status_code_wins(self):
        """Test that an HTTP status takes precedence over the message."""
        request = httpx.Request("GET", "https://example.test")
        response = httpx.Response(429, request=request)
        error = httpx.HTTPStatusError("timeout", request=request, response=response)

        classified = ProviderErrorClassifier.classify(error, "search-A")

        assert classified.error_code == ErrorCode.RATE_LIMIT_ERROR
        assert classified.status_code == 429
        assert classified.is_retryable is False

    def test_code_attribute(self):
        """Test SDK errors that expose an integer ``code``."""
        error = RuntimeError("denied")
        error.code = 403  # type: ignore[attr-defined]

        classified = classify_provider_error(error, "gemini-text")

        assert classified.is_authentication_error

    def test_resilience_errors_pass_through(self):
        """Test that already classified errors are returned unchanged."""
        error = RateLimitExceededException("gemini")

        assert classify_provider_error(error, "gemini-text") is error

    def test_context_prefixes_message(self):
        """Test that context is prepended to the message."""
        classified = classify_provider_error(
            RuntimeError("boom"), "gemini-text", "Gemini generation"
        )

        assert str(classified) == "Gemini generation: boom"


class TestGeminiTextProvider:
    """Test JSON generation through the Gemini SDK."""

    @pytest.fixture
    def provider(self):
        """Create a configured provider."""
        return GeminiTextProvider("test-key", text_model="text", vision_model="vision")

    def test_is_configured(self):
        """Test credential detection."""
        assert GeminiTextProvider("key").is_configured is True
        assert GeminiTextProvider(None).is_configured is False

    @pytest.mark.asyncio
    async def test_generate_json(self, provider, fake_model):
        """Test that a JSON object is parsed from the response text."""
        fake_model.response = SimpleNamespace(text=json.dumps({"a": 1}))

        result = await provider.generate_json("prompt", "system")

        assert result == {"a": 1}
        model = fake_model.instances[0]
        assert model.model_name == "text"
        assert model.system_instruction == "system"

    @pytest.mark.asyncio
    async def test_invalid_json_is_retryable(self, provider, fake_model):
        """Test that malformed output is treated as a transient failure."""
        fake_model.response = SimpleNamespace(text="not json")

        with pytest.raises(UpstreamServiceException) as exc_info:
            await provider.generate_json("prompt")

        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_non_object_rejected(self, provider, fake_model):
        """Test that a JSON array is not accepted as a document."""
        fake_model.response = SimpleNamespace(text="[1, 2]")

        with pytest.raises(UpstreamServiceException, match="non-object"):
            await provider.generate_json("prompt")

    @pytest.mark.asyncio
    async def test_sdk_errors_classified(self, provider, fake_model):
        """Test that SDK exceptions are classified."""
        fake_model.error = RuntimeError("API key not valid")

        with pytest.raises(UpstreamServiceException) as exc_info:
            await provider.generate_json("prompt")

        assert exc_info.value.is_authentication_error

    @pytest.mark.asyncio
    async def test_analyze_images_sends_jpeg_parts(self, provider, fake_model):
        """Test that images are decoded and sent before the prompt."""
        fake_model.response = SimpleNamespace(text=json.dumps({"sections": []}))
        encoded = base64.b64encode(b"jpeg-bytes").decode()

        await provider.analyze_images([f"data:image/png;base64,{encoded}"], "describe")

        model = fake_model.instances[0]
        assert model.model_name == "vision"
        assert model.contents[0] == {"mime_type": "image/jpeg", "data": b"jpeg-bytes"}
        assert model.contents[-1] == "describe"


class TestGeminiImageProvider:
    """Test the primary image generator."""

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self, fake_model):
        """Test that an unconfigured generator yields nothing."""
        assert await GeminiImageProvider(None).find_image("Taj Mahal", "") is None
        assert fake_model.instances == []

    @pytest.mark.asyncio
    async def test_returns_inline_image(self, fake_model):
        """Test that inline image data becomes a data URI."""
        part = SimpleNamespace(
            inline_data=SimpleNamespace(mime_type="image/png", data=b"png")
        )
        fake_model.response = SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))]
        )

        result = await GeminiImageProvider("key").find_image("Taj Mahal", "domes")

        assert result == "data:image/png;base64,cG5n"
        assert "Taj Mahal" in fake_model.instances[0].contents

    def test_extract_image_without_image(self):
        """Test that text-only responses yield None."""
        part = SimpleNamespace(inline_data=None, text="no image")
        response = SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))]
        )

        assert GeminiImageProvider.extract_image(response) is None

    def test_extract_image_keeps_base64_strings(self):
        """Test that already encoded data is used as is."""
        part = SimpleNamespace(
            inline_data=SimpleNamespace(mime_type="image/jpeg", data="QUJD")
        )
        response = SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))]
        )

        assert GeminiImageProvider.extract_image(response) == (
            "data:image/jpeg;base64,QUJD"
        )
