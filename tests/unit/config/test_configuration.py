"""Unit tests for configuration management."""

import pytest
import structlog

from heritage_ai.config.settings import (
    ApplicationSettings,
    CacheSettings,
    ConfigurationValidator,
    DevelopmentSettings,
    Environment,
    ProductionSettings,
    ProviderSettings,
    RateLimitSettings,
    RetrySettings,
    TimeoutSettings,
    get_settings,
)
from heritage_ai.config import settings as config
from heritage_ai.observability.logging import (
    CorrelationContext,
    CorrelationIDProcessor,
    LogFormat,
    get_correlation_id,
    setup_logging,
)


class TestSettingsDefaults:
    """Test default configuration values."""

    def test_rate_limits(self):
        """Test default per-endpoint limits."""
        settings = RateLimitSettings()

        assert (settings.composite_limit, settings.composite_window) == (10, 60.0)
        assert (settings.image_limit, settings.image_window) == (5, 60.0)
        assert (settings.analysis_limit, settings.analysis_window) == (3, 60.0)

    def test_cache(self):
        """Test default cache TTLs."""
        settings = CacheSettings()

        assert settings.composite_ttl == 3600.0
        assert settings.image_ttl == 7200.0

    def test_retry(self):
        """Test default retry policy."""
        settings = RetrySettings()

        assert settings.upstream_max_attempts == 2
        assert settings.upstream_base_delay == 1.0
        assert settings.upstream_backoff == "linear"
        assert settings.client_retries == 2
        assert settings.client_image_retries == 1

    def test_timeouts(self):
        """Test default deadlines."""
        settings = TimeoutSettings()

        assert settings.text_generation == 15.0
        assert settings.image_generation == 20.0
        assert settings.image_analysis == 20.0

    def test_invalid_backoff(self):
        """Test that unknown backoff names are rejected."""
        with pytest.raises(ValueError):
            RetrySettings(upstream_backoff="random")


class TestEnvironmentOverrides:
    """Test settings loaded from the environment."""

    def test_rate_limit_env(self, monkeypatch):
        """Test prefixed environment variables."""
        monkeypatch.setenv("RATE_LIMIT_IMAGE_LIMIT", "7")

        assert RateLimitSettings().image_limit == 7

    def test_provider_credentials(self, monkeypatch):
        """Test provider keys from the environment."""
        monkeypatch.setenv("GEMINI_API_KEY", "secret")

        settings = ProviderSettings()

        assert settings.gemini_api_key == "secret"
        assert settings.has_text_credentials is True

    @pytest.mark.parametrize(
        "environment,expected",
        [
            ("development", DevelopmentSettings),
            ("testing", config.TestingSettings),
            ("production", ProductionSettings),
            ("staging", ApplicationSettings),
        ],
    )
    def test_get_settings(self, monkeypatch, environment, expected):
        """Test settings selection by environment."""
        monkeypatch.setenv("ENVIRONMENT", environment)

        assert type(get_settings()) is expected

    @pytest.mark.parametrize("value", ["Production", " PRODUCTION "])
    def test_environment_name_any_case(self, monkeypatch, value):
        """Test that the environment name is matched regardless of case."""
        monkeypatch.setenv("ENVIRONMENT", value)

        settings = get_settings()

        assert type(settings) is ProductionSettings
        assert settings.is_production is True

    def test_unknown_environment_is_development(self, monkeypatch):
        """Test that an unrecognised environment name does not fail."""
        monkeypatch.setenv("ENVIRONMENT", "staging")

        settings = ApplicationSettings()

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.is_production is False

    def test_subclass_environment_not_overridden(self, monkeypatch):
        """Test that an environment subclass keeps its own environment."""
        monkeypatch.setenv("ENVIRONMENT", "testing")

        assert ProductionSettings().is_production is True
        assert DevelopmentSettings().environment == Environment.DEVELOPMENT

    def test_testing_settings_have_no_delays(self):
        """Test that test settings retry without sleeping."""
        settings = config.TestingSettings()

        assert settings.environment == Environment.TESTING
        assert settings.retry.upstream_base_delay == 0.0


class TestConfigurationValidator:
    """Test configuration validation."""

    def test_production_requires_credentials(self):
        """Test that production without a key is flagged."""
        settings = ProductionSettings(providers=ProviderSettings(gemini_api_key=None))

        errors = ConfigurationValidator.validate_settings(settings)

        assert any("GEMINI_API_KEY" in error for error in errors)

    def test_development_is_valid(self):
        """Test that development settings pass."""
        assert ConfigurationValidator.validate_settings(DevelopmentSettings()) == []

    def test_production_debug_flagged(self):
        """Test that debug mode in production is flagged."""
        settings = ProductionSettings(
            debug=True, providers=ProviderSettings(gemini_api_key="secret")
        )

        errors = ConfigurationValidator.validate_settings(settings)

        assert errors == ["Debug mode should be disabled in production"]


class TestLogging:
    """Test logging setup and correlation IDs."""

    def test_setup_logging(self):
        """Test that structlog is configured."""
        setup_logging(format_type=LogFormat.CONSOLE)

        assert structlog.is_configured()

    def test_correlation_context(self):
        """Test that the context sets and restores the correlation ID."""
        assert get_correlation_id() is None

        with CorrelationContext("req-1") as context:
            assert context.correlation_id == "req-1"
            assert get_correlation_id() == "req-1"

        assert get_correlation_id() is None

    def test_processor_adds_correlation_id(self):
        """Test that log events carry the correlation ID."""
        processor = CorrelationIDProcessor()

        with CorrelationContext("req-2"):
            event = processor(None, "info", {"event": "hello"})

        assert event["correlation_id"] == "req-2"

    def test_processor_without_context(self):
        """Test that events are untouched outside a request."""
        processor = CorrelationIDProcessor()

        assert processor(None, "info", {"event": "hello"}) == {"event": "hello"}
