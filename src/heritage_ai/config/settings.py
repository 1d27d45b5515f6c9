"""
Configuration management for the Heritage AI application.

Environment-specific settings with validation; each concern is a separate
``BaseSettings`` group with its own environment prefix, aggregated by
``ApplicationSettings`` and selected through ``get_settings``.
"""

import os
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environments."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RateLimitSettings(BaseSettings):
    """Per-endpoint admission limits.

    Limits differ only because upstream cost differs; the algorithm is the same.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_", env_file=".env", extra="ignore"
    )

    composite_limit: int = Field(default=10, ge=1)
    composite_window: float = Field(default=60.0, gt=0)
    image_limit: int = Field(default=5, ge=1)
    image_window: float = Field(default=60.0, gt=0)
    analysis_limit: int = Field(default=3, ge=1)
    analysis_window: float = Field(default=60.0, gt=0)

    # Bound on tracked clients per endpoint
    max_tracked_clients: int = Field(default=10000, ge=1)


class CacheSettings(BaseSettings):
    """Response cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CACHE_", env_file=".env", extra="ignore"
    )

    composite_ttl: float = Field(default=3600.0, gt=0)  # 1 hour
    image_ttl: float = Field(default=7200.0, gt=0)  # 2 hours
    max_entries: int = Field(default=1000, ge=1)


class RetrySettings(BaseSettings):
    """Retry configuration for upstream calls and the client-side caller."""

    model_config = SettingsConfigDict(
        env_prefix="RETRY_", env_file=".env", extra="ignore"
    )

    # Server-side upstream retries
    upstream_max_attempts: int = Field(default=2, ge=1, le=10)
    upstream_base_delay: float = Field(default=1.0, ge=0.0)
    upstream_backoff: Literal["linear", "exponential"] = "linear"

    # Client-side caller retries (in addition to the first attempt)
    client_retries: int = Field(default=2, ge=0, le=10)
    client_image_retries: int = Field(default=1, ge=0, le=10)
    client_base_delay: float = Field(default=1.0, ge=0.0)


class TimeoutSettings(BaseSettings):
    """Per-operation-class deadlines, in seconds."""

    model_config = SettingsConfigDict(
        env_prefix="TIMEOUT_", env_file=".env", extra="ignore"
    )

    text_generation: float = Field(default=15.0, gt=0)
    image_generation: float = Field(default=20.0, gt=0)
    image_analysis: float = Field(default=20.0, gt=0)
    image_search: float = Field(default=10.0, gt=0)


class ProviderSettings(BaseSettings):
    """Upstream provider credentials and endpoints."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    text_provider: Literal["gemini", "openai"] = "gemini"

    gemini_api_key: str | None = None
    openai_api_key: str | None = None
    unsplash_access_key: str | None = None

    text_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-2.5-flash-image"
    vision_model: str = "gemini-3-flash-preview"
    openai_model: str = "gpt-5"
    openai_base_url: str | None = None

    unsplash_api_url: str = "https://api.unsplash.com/search/photos"
    wikimedia_api_url: str = "https://en.wikipedia.org/w/api.php"
    placeholder_base_url: str = "https://via.placeholder.com/1200x675/2c2419/d4af37"

    @property
    def text_api_key_name(self) -> str:
        return f"{self.text_provider.upper()}_API_KEY"

    @property
    def has_text_credentials(self) -> bool:
        if self.text_provider == "openai":
            return bool(self.openai_api_key)
        return bool(self.gemini_api_key)


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_", env_file=".env", extra="ignore"
    )

    log_level: LogLevel = LogLevel.INFO
    log_format: str = "json"
    log_file: str | None = None


class ApplicationSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = "Heritage AI"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 8000

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    # Set by the environment subclasses; ENVIRONMENT cannot override it
    pinned_environment: ClassVar[Environment | None] = None

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v: Any) -> Any:
        """Accept any casing; names outside ``Environment`` mean development."""
        if isinstance(v, str):
            try:
                return Environment(v.strip().lower())
            except ValueError:
                return Environment.DEVELOPMENT
        return v

    @model_validator(mode="after")
    def apply_pinned_environment(self) -> "ApplicationSettings":
        if self.pinned_environment is not None:
            self.environment = self.pinned_environment
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION


class DevelopmentSettings(ApplicationSettings):
    """Development environment settings."""

    pinned_environment = Environment.DEVELOPMENT
    debug: bool = True

    observability: ObservabilitySettings = Field(
        default_factory=lambda: ObservabilitySettings(
            log_level=LogLevel.DEBUG, log_format="console"
        )
    )


class TestingSettings(ApplicationSettings):
    """Testing environment settings."""

    pinned_environment = Environment.TESTING
    debug: bool = True

    retry: RetrySettings = Field(
        default_factory=lambda: RetrySettings(
            upstream_base_delay=0.0, client_base_delay=0.0
        )
    )
    observability: ObservabilitySettings = Field(
        default_factory=lambda: ObservabilitySettings(log_level=LogLevel.WARNING)
    )


class ProductionSettings(ApplicationSettings):
    """Production environment settings."""

    pinned_environment = Environment.PRODUCTION
    debug: bool = False


def get_settings() -> ApplicationSettings:
    """Get application settings based on environment."""
    environment = os.getenv("ENVIRONMENT", "development").strip().lower()

    if environment == "development":
        return DevelopmentSettings()
    elif environment == "production":
        return ProductionSettings()
    elif environment == "testing":
        return TestingSettings()
    else:
        return ApplicationSettings()


class ConfigurationValidator:
    """Validates application configuration."""

    @staticmethod
    def validate_settings(settings: ApplicationSettings) -> list[str]:
        """Validate settings and return list of errors."""
        errors = []

        if settings.is_production:
            if settings.debug:
                errors.append("Debug mode should be disabled in production")
            if not settings.providers.has_text_credentials:
                errors.append(
                    f"{settings.providers.text_api_key_name} is not set; "
                    "every response will be degraded"
                )

        return errors

