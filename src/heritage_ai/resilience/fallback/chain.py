"""Ordered provider chains for one capability."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from heritage_ai.domain.exceptions import ConfigurationException


class ChainProvider(ABC):
    """A provider that can take part in a fallback chain."""

    name: str = "provider"

    #: Set on providers that never fail and never block, such as generators
    #: of placeholder content. Only these may close a chain.
    infallible: bool = False

    @abstractmethod
    async def fetch(self, context: Mapping[str, Any]) -> Any:
        """Produce a value for ``context``, or ``None`` when there is nothing."""


class FallbackChain:
    """Providers tried in order until one yields a usable value."""

    def __init__(
        self,
        capability: str,
        providers: Sequence[ChainProvider],
        deadline: float,
    ):
        if not providers:
            raise ConfigurationException(
                f"Fallback chain '{capability}' has no providers",
                {"capability": capability},
            )
        if not providers[-1].infallible:
            raise ConfigurationException(
                f"Fallback chain '{capability}' must end with an infallible provider",
                {"capability": capability, "terminal": providers[-1].name},
            )

        self.capability = capability
        self.providers = tuple(providers)
        self.deadline = deadline

    @property
    def terminal(self) -> ChainProvider:
        return self.providers[-1]

    @property
    def provider_names(self) -> list[str]:
        return [provider.name for provider in self.providers]

    def __len__(self) -> int:
        return len(self.providers)
