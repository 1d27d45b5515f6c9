"""Request-scoped correlation IDs.

The ID lives in a context variable so that every log line emitted while
serving a request, including those from fan-out tasks, carries it.
"""

import contextvars
import uuid
from typing import Any

CORRELATION_HEADER = "X-Correlation-ID"

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> contextvars.Token[str | None]:
    return _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    return uuid.uuid4().hex


class CorrelationIDProcessor:
    """structlog processor stamping the current correlation ID on events."""

    def __init__(self, key: str = "correlation_id"):
        self.key = key

    def __call__(
        self, logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        correlation_id = _correlation_id.get()
        if correlation_id is not None:
            event_dict.setdefault(self.key, correlation_id)
        return event_dict


class CorrelationContext:
    """Bind a correlation ID for the duration of a ``with`` block."""

    def __init__(self, correlation_id: str | None = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> "CorrelationContext":
        self._token = set_correlation_id(self.correlation_id)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
            self._token = None
