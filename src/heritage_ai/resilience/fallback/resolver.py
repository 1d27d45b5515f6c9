"""Walks a fallback chain until a provider yields a usable value."""

import time
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from heritage_ai.domain.models import AttemptOutcome, ChainResolution, UpstreamAttempt

from ..timeout import TimeoutInvoker, is_empty_result
from .chain import FallbackChain

logger = structlog.get_logger()


class FallbackChainResolver:
    """Resolves a chain; always returns a value.

    Every non-terminal provider is attempted once through the timeout
    invoker. Failures are logged and recorded on the resolution, never
    raised. The terminal provider is infallible and is called directly.
    """

    def __init__(
        self,
        invoker: TimeoutInvoker | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.invoker = invoker or TimeoutInvoker(clock=clock)
        self._clock = clock

    async def resolve(
        self, chain: FallbackChain, context: Mapping[str, Any]
    ) -> ChainResolution:
        attempts: list[UpstreamAttempt] = []

        for provider in chain.providers[:-1]:
            logger.info(
                "Trying fallback provider",
                capability=chain.capability,
                provider=provider.name,
            )
            attempt = await self.invoker.attempt(
                lambda provider=provider: provider.fetch(context),
                chain.deadline,
                provider.name,
            )
            if attempt.succeeded and is_empty_result(attempt.value):
                attempt.outcome = AttemptOutcome.ERROR
                attempt.error = "empty result"
            attempts.append(attempt)

            if attempt.succeeded:
                logger.info(
                    "Fallback provider succeeded",
                    capability=chain.capability,
                    provider=provider.name,
                    duration=attempt.duration,
                )
                return ChainResolution(
                    value=attempt.value, provider=provider.name, attempts=attempts
                )

            logger.warning(
                "Fallback provider failed",
                capability=chain.capability,
                **attempt.to_log_dict(),
            )

        terminal = chain.terminal
        started_at = self._clock()
        value = await terminal.fetch(context)
        attempts.append(
            UpstreamAttempt(
                provider=terminal.name,
                started_at=started_at,
                deadline=chain.deadline,
                outcome=AttemptOutcome.SUCCESS,
                value=value,
                finished_at=self._clock(),
            )
        )
        logger.warning(
            "All fallback providers failed, using terminal provider",
            capability=chain.capability,
            provider=terminal.name,
            attempted=[a.provider for a in attempts[:-1]],
        )
        return ChainResolution(value=value, provider=terminal.name, attempts=attempts)
