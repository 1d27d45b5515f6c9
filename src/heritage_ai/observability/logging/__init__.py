"""Structured logging configuration and utilities."""

from .config import LogFormat, setup_logging
from .correlation import (
    CorrelationContext,
    CorrelationIDProcessor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "setup_logging",
    "LogFormat",
    "CorrelationContext",
    "CorrelationIDProcessor",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]
