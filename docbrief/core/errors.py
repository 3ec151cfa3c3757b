"""Exception types shared by the generation pipeline and the API layer."""

from __future__ import annotations

from dataclasses import dataclass

from docbrief.models.generation import GenerationTask


class ProviderError(Exception):
    """A provider call failed after exhausting its retries."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ParseError(ValueError):
    """A provider response did not contain the expected structured output."""


@dataclass(frozen=True)
class ProviderAttempt:
    provider: str
    error: str


class AllProvidersExhausted(Exception):
    """Every provider configured for a task failed."""

    def __init__(self, task: GenerationTask, attempts: list[ProviderAttempt]) -> None:
        tried = ", ".join(a.provider for a in attempts) or "none configured"
        super().__init__(f"All providers failed for task '{task.value}' ({tried}).")
        self.task = task
        self.attempts = attempts


class UnsupportedFormat(ValueError):
    """Uploaded file is not a PDF or DOCX document."""


class ExtractionFailed(ValueError):
    """No text could be extracted from an uploaded document."""
