"""Retry configuration models."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from heritage_ai.config.settings import RetrySettings


class RetryConfig(BaseModel):
    """Retry configuration for upstream calls."""

    max_attempts: int = Field(
        default=2, ge=1, le=10, description="Maximum attempts, including the first"
    )
    base_delay: float = Field(
        default=1.0, ge=0.0, le=60.0, description="Base delay in seconds"
    )
    max_delay: float = Field(
        default=60.0, ge=0.0, le=300.0, description="Maximum delay in seconds"
    )
    multiplier: float = Field(
        default=2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier"
    )
    backoff: Literal["linear", "exponential"] = "linear"

    @field_validator("max_delay")
    @classmethod
    def validate_max_delay(cls, v: float, info: Any) -> float:
        """Ensure max_delay is not below base_delay."""
        if info.data.get("base_delay") and v < info.data["base_delay"]:
            raise ValueError("max_delay must not be less than base_delay")
        return v

    @classmethod
    def for_upstream(cls, settings: RetrySettings) -> "RetryConfig":
        """Server-side retry policy for upstream provider calls."""
        return cls(
            max_attempts=settings.upstream_max_attempts,
            base_delay=settings.upstream_base_delay,
            backoff=settings.upstream_backoff,
        )

    @classmethod
    def for_client(cls, settings: RetrySettings, retries: int) -> "RetryConfig":
        """Client-side retry policy: ``retries`` extra attempts, exponential."""
        return cls(
            max_attempts=retries + 1,
            base_delay=settings.client_base_delay,
            backoff="exponential",
        )
