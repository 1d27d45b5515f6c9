"""Client for the Heritage AI HTTP API."""

from .api_client import HeritageAPIClient
from .exceptions import ClientCallError, ClientErrorCause, ClientRateLimitError

__all__ = [
    "HeritageAPIClient",
    "ClientCallError",
    "ClientErrorCause",
    "ClientRateLimitError",
]
