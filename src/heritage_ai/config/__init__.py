"""Application configuration."""

from .settings import (
    ApplicationSettings,
    CacheSettings,
    Environment,
    LogLevel,
    ObservabilitySettings,
    ProviderSettings,
    RateLimitSettings,
    RetrySettings,
    TimeoutSettings,
    get_settings,
)

__all__ = [
    "ApplicationSettings",
    "CacheSettings",
    "Environment",
    "LogLevel",
    "ObservabilitySettings",
    "ProviderSettings",
    "RateLimitSettings",
    "RetrySettings",
    "TimeoutSettings",
    "get_settings",
]
