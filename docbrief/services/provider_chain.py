"""Ordered provider attempts for one generation task."""

from __future__ import annotations

from typing import Mapping, Sequence

from docbrief.core.errors import AllProvidersExhausted, ParseError, ProviderAttempt, ProviderError
from docbrief.core.logging import get_logger
from docbrief.models.generation import GenerationTask, NormalizedResult
from docbrief.services.normalizer import normalize
from docbrief.services.provider_client import ProviderClient
from docbrief.services.providers import ProviderSpec

logger = get_logger(__name__)


class ProviderChain:
    def __init__(
        self,
        client: ProviderClient,
        providers: Mapping[GenerationTask, Sequence[ProviderSpec]],
    ) -> None:
        self._client = client
        self._providers = providers

    def providers_for(self, task: GenerationTask) -> Sequence[ProviderSpec]:
        return self._providers.get(task, ())

    async def generate(self, task: GenerationTask, source_text: str) -> NormalizedResult:
        """Try each provider for ``task`` in order and return the first usable result.

        Raises:
            AllProvidersExhausted: If every provider failed or returned nothing usable
        """
        attempts: list[ProviderAttempt] = []
        for provider in self.providers_for(task):
            logger.info("Task %s: trying provider %s", task.value, provider.name)
            try:
                raw = await self._client.invoke(provider, provider.prepare(source_text))
                artifact = normalize(task, provider.kind, raw)
            except (ProviderError, ParseError) as exc:
                logger.warning("Task %s: provider %s failed - %s", task.value, provider.name, exc)
                attempts.append(ProviderAttempt(provider=provider.name, error=str(exc)))
                continue

            logger.info("Task %s: provider %s succeeded", task.value, provider.name)
            return NormalizedResult(task=task, provider=provider.name, artifact=artifact)

        raise AllProvidersExhausted(task, attempts)
