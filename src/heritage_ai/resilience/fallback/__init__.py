"""Ordered multi-provider fallback."""

from .chain import ChainProvider, FallbackChain
from .resolver import FallbackChainResolver

__all__ = ["ChainProvider", "FallbackChain", "FallbackChainResolver"]
