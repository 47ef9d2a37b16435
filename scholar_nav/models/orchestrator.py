"""Fan one transcript out to every configured provider concurrently."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

import httpx
from langsmith import traceable

from scholar_nav.models.providers import ProviderClient, create_client
from scholar_nav.models.schemas import ConversationMessage, ProviderConfig, ProviderResult
from scholar_nav.utils.exceptions import UnsupportedProvider
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)


class InferenceOrchestrator:
    """Calls all providers in parallel and returns one result per provider.

    Clients are resolved once here. A provider whose name has no client
    variant is kept in the list so that it still yields a failed result in
    its slot on every call.
    """

    def __init__(
        self,
        providers: Sequence[ProviderConfig],
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        self._providers = list(providers)
        self._clients: list[ProviderClient | UnsupportedProvider] = []
        for config in self._providers:
            try:
                self._clients.append(create_client(config, http_client=http_client, timeout=timeout))
            except UnsupportedProvider as exc:
                logger.warning("provider_unsupported", provider=config.name)
                self._clients.append(exc)

    @property
    def providers(self) -> list[ProviderConfig]:
        return list(self._providers)

    @traceable(run_type="chain", name="orchestrator_call_all")
    async def call_all(self, messages: Sequence[ConversationMessage]) -> list[ProviderResult]:
        """Send ``messages`` to every provider; result[i] belongs to providers[i].

        Waits for every attempt to settle. Failures are returned, never raised,
        and never retried.
        """
        if not self._providers:
            return []

        transcript = list(messages)
        settled = await asyncio.gather(
            *(self._call_one(config, client, transcript) for config, client in zip(self._providers, self._clients)),
            return_exceptions=True,
        )

        results: list[ProviderResult] = []
        for config, outcome in zip(self._providers, settled):
            if isinstance(outcome, ProviderResult):
                results.append(outcome)
            else:
                # _call_one converts everything it can; this is only reached
                # for errors escaping the result construction itself.
                results.append(
                    ProviderResult(
                        provider=config.name,
                        success=False,
                        error=str(outcome) or type(outcome).__name__,
                    )
                )

        logger.info(
            "provider_fanout_settled",
            providers=[c.name for c in self._providers],
            succeeded=sum(1 for r in results if r.success),
        )
        return results

    async def _call_one(
        self,
        config: ProviderConfig,
        client: ProviderClient | UnsupportedProvider,
        messages: list[ConversationMessage],
    ) -> ProviderResult:
        start = time.monotonic()
        try:
            if isinstance(client, UnsupportedProvider):
                raise client
            content = await client.send(messages)
        except Exception as exc:
            latency_ms = (time.monotonic() - start) * 1000
            logger.error(
                "provider_call_failed",
                provider=config.name,
                error=str(exc),
                latency_ms=round(latency_ms, 1),
            )
            return ProviderResult(
                provider=config.name,
                latency_ms=latency_ms,
                success=False,
                error=str(exc) or type(exc).__name__,
            )

        latency_ms = (time.monotonic() - start) * 1000
        logger.debug(
            "provider_call_succeeded",
            provider=config.name,
            model=config.model,
            chars=len(content),
            latency_ms=round(latency_ms, 1),
        )
        return ProviderResult(
            provider=config.name,
            content=content,
            latency_ms=latency_ms,
            success=True,
        )


async def call_all(
    messages: Sequence[ConversationMessage],
    providers: Sequence[ProviderConfig],
    *,
    http_client: httpx.AsyncClient | None = None,
) -> list[ProviderResult]:
    """One-shot fan-out without keeping an orchestrator around."""
    return await InferenceOrchestrator(providers, http_client=http_client).call_all(messages)
