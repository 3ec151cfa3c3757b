"""Provider descriptors and the per-task provider order."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from docbrief.core.config import Settings
from docbrief.models.generation import GenerationTask

SUMMARY_INPUT_LIMIT = 1024
PROMPT_SOURCE_LIMIT = 500

SYSTEM_SUMMARY = (
    "You are a helpful assistant that creates concise summaries of documents. "
    "Provide a clear, well-structured summary that captures the main points."
)

SYSTEM_FLASHCARDS = (
    "You are a helpful assistant that creates educational flashcards. "
    "Generate 5-10 flashcards based on the document content. "
    "Return them as a JSON array with 'question' and 'answer' fields."
)

SYSTEM_QUIZ = (
    "You are a helpful assistant that creates multiple choice quizzes. "
    "Generate 5 multiple choice questions based on the document content. "
    "Return them as a JSON array with 'question', 'options' (array of 4 choices), "
    "and 'correctAnswer' (index 0-3) fields."
)


class ProviderKind(str, Enum):
    HUGGINGFACE = "huggingface"
    OPENAI = "openai"


@dataclass(frozen=True)
class ProviderSpec:
    """One external provider as used for one task."""

    name: str
    kind: ProviderKind
    model: str
    build_payload: Callable[[str], Any]
    input_limit: int | None = None

    def prepare(self, source_text: str) -> Any:
        text = source_text if self.input_limit is None else source_text[: self.input_limit]
        return self.build_payload(text)


def _chat_payload(system: str, user: str, max_tokens: int) -> dict[str, Any]:
    return {
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "max_tokens": max_tokens,
    }


def _hf_flashcard_prompt(text: str) -> str:
    return (
        "Create 5 educational flashcards from this text. "
        f"Format as Q: question A: answer pairs:\n\n{text}"
    )


def build_provider_table(
    settings: Settings,
) -> dict[GenerationTask, tuple[ProviderSpec, ...]]:
    """Build the ordered provider list for every task.

    Quiz generation only has the chat-completion tier.
    """
    return {
        GenerationTask.SUMMARIZE: (
            ProviderSpec(
                name="huggingface-summary",
                kind=ProviderKind.HUGGINGFACE,
                model=settings.hf_summary_model,
                build_payload=lambda text: text,
                input_limit=SUMMARY_INPUT_LIMIT,
            ),
            ProviderSpec(
                name="openai-chat",
                kind=ProviderKind.OPENAI,
                model=settings.openai_model,
                build_payload=lambda text: _chat_payload(
                    SYSTEM_SUMMARY, f"Please summarize the following document:\n\n{text}", 500
                ),
                input_limit=SUMMARY_INPUT_LIMIT,
            ),
        ),
        GenerationTask.FLASHCARDS: (
            ProviderSpec(
                name="huggingface-text",
                kind=ProviderKind.HUGGINGFACE,
                model=settings.hf_text_model,
                build_payload=_hf_flashcard_prompt,
                input_limit=PROMPT_SOURCE_LIMIT,
            ),
            ProviderSpec(
                name="openai-chat",
                kind=ProviderKind.OPENAI,
                model=settings.openai_model,
                build_payload=lambda text: _chat_payload(
                    SYSTEM_FLASHCARDS, f"Create flashcards based on this document:\n\n{text}", 800
                ),
                input_limit=PROMPT_SOURCE_LIMIT,
            ),
        ),
        GenerationTask.QUIZ: (
            ProviderSpec(
                name="openai-chat",
                kind=ProviderKind.OPENAI,
                model=settings.openai_model,
                build_payload=lambda text: _chat_payload(
                    SYSTEM_QUIZ, f"Create a quiz based on this document:\n\n{text}", 1000
                ),
                input_limit=PROMPT_SOURCE_LIMIT,
            ),
        ),
    }
