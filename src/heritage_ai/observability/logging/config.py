"""Logging configuration and setup."""

import logging
import sys
from enum import Enum

import structlog
from structlog.stdlib import LoggerFactory

from heritage_ai.config.settings import LogLevel, ObservabilitySettings

from .correlation import CorrelationIDProcessor


class LogFormat(str, Enum):
    """Logging formats."""

    JSON = "json"
    CONSOLE = "console"


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    format_type: LogFormat = LogFormat.JSON,
    log_file: str | None = None,
    enable_correlation: bool = True,
    include_timestamps: bool = True,
) -> None:
    """Setup structured logging configuration."""
    handler: logging.Handler = (
        logging.FileHandler(log_file) if log_file else logging.StreamHandler(sys.stdout)
    )
    logging.basicConfig(
        level=getattr(logging, level.value),
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if enable_correlation:
        processors.append(CorrelationIDProcessor())

    if include_timestamps:
        processors.append(structlog.processors.TimeStamper(fmt="ISO"))

    if format_type == LogFormat.CONSOLE:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_settings(settings: ObservabilitySettings) -> None:
    """Configure logging from the observability settings group."""
    try:
        format_type = LogFormat(settings.log_format)
    except ValueError:
        format_type = LogFormat.JSON
    setup_logging(
        level=LogLevel(settings.log_level),
        format_type=format_type,
        log_file=settings.log_file,
    )

