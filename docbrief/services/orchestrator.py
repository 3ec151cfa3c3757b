"""Provider chain with local fallback: every call yields an artifact."""

from __future__ import annotations

from docbrief.core.config import get_settings
from docbrief.core.errors import AllProvidersExhausted
from docbrief.core.logging import get_logger
from docbrief.models.generation import Artifact, GenerationTask
from docbrief.services.fallback import fallback
from docbrief.services.provider_chain import ProviderChain
from docbrief.services.provider_client import ProviderClient
from docbrief.services.providers import build_provider_table

logger = get_logger(__name__)

_orchestrator: "GenerationOrchestrator | None" = None


class GenerationOrchestrator:
    def __init__(self, chain: ProviderChain) -> None:
        self._chain = chain

    async def run(
        self,
        task: GenerationTask,
        source_text: str,
        *,
        summary: str | None = None,
    ) -> Artifact:
        """Generate the artifact for ``task``, falling back locally if all providers fail.

        Args:
            task: Artifact to generate
            source_text: Extracted document text
            summary: Stored document summary, if any (used by the flashcard fallback)

        Returns:
            A non-empty summary string, flashcard list or quiz list
        """
        try:
            result = await self._chain.generate(task, source_text)
        except AllProvidersExhausted as exc:
            logger.warning("%s Using local fallback.", exc)
            return fallback(task, source_text, summary)
        except Exception:
            logger.exception("Provider chain failed unexpectedly for %s. Using local fallback.", task.value)
            return fallback(task, source_text, summary)
        return result.artifact


def get_orchestrator() -> GenerationOrchestrator:
    """Lazy initialization of the process-wide orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        settings = get_settings()
        chain = ProviderChain(ProviderClient(settings), build_provider_table(settings))
        _orchestrator = GenerationOrchestrator(chain)
    return _orchestrator


def reset_orchestrator() -> None:
    """Reset the cached orchestrator. Call this after changing API keys."""
    global _orchestrator
    _orchestrator = None
