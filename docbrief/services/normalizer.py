"""Turn raw provider responses into task artifacts."""

from __future__ import annotations

import json
from typing import Any, Callable

from pydantic import TypeAdapter, ValidationError

from docbrief.core.errors import ParseError
from docbrief.models.generation import Artifact, Flashcard, GenerationTask, QuizQuestion
from docbrief.services.providers import ProviderKind

_FLASHCARDS = TypeAdapter(list[Flashcard])
_QUIZ = TypeAdapter(list[QuizQuestion])


def normalize(task: GenerationTask, kind: ProviderKind, raw: Any) -> Artifact:
    """Extract the artifact for ``task`` from a ``kind`` provider response.

    Raises:
        ParseError: If no usable artifact can be recovered
    """
    strategy = _STRATEGIES.get((task, kind))
    if strategy is None:
        raise ParseError(f"No parser for task '{task.value}' from '{kind.value}' providers.")
    return strategy(raw)


def parse_flashcard_lines(text: str) -> list[Flashcard]:
    """Collect flashcards from alternating ``Q:`` / ``A:`` lines.

    An ``A:`` line closes the open question; every other line is ignored.
    """
    cards: list[Flashcard] = []
    question = ""
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("Q:"):
            question = line[2:].strip()
        elif line.startswith("A:") and question:
            answer = line[2:].strip()
            if answer:
                cards.append(Flashcard(question=question, answer=answer))
            question = ""
    return cards


def _hf_field(raw: Any, field: str) -> str:
    """Read ``field`` from ``[{field: ...}]`` or ``{field: ...}``."""
    item = raw[0] if isinstance(raw, list) and raw else raw
    value = item.get(field) if isinstance(item, dict) else None
    return value.strip() if isinstance(value, str) else ""


def _chat_content(raw: Any) -> str:
    """Safely extract the assistant message content from a chat completion."""
    if not isinstance(raw, dict):
        return ""
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message") if isinstance(first, dict) else {}
    content = message.get("content") if isinstance(message, dict) else ""
    return content.strip() if isinstance(content, str) else ""


def _extract_json(text: str) -> Any:
    """Decode the first JSON value in ``text``, tolerating code fences and chatter."""
    t = text.strip()
    if t.startswith("```"):
        t = t.strip("`")
        if t.lower().startswith("json"):
            t = t[4:]
    starts = [i for i in (t.find("["), t.find("{")) if i != -1]
    if not starts:
        return None
    try:
        value, _ = json.JSONDecoder().raw_decode(t[min(starts):])
    except (json.JSONDecodeError, RecursionError):
        return None
    return value


def _unwrap_list(data: Any, *keys: str) -> Any:
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                return data[key]
    return data


def _require_text(text: str, what: str) -> str:
    if not text:
        raise ParseError(f"Response did not contain {what}.")
    return text


def _summary_from_hf(raw: Any) -> str:
    return _require_text(_hf_field(raw, "summary_text"), "a summary")


def _summary_from_chat(raw: Any) -> str:
    return _require_text(_chat_content(raw), "a summary")


def _validate_flashcards(data: Any) -> list[Flashcard]:
    if not isinstance(data, list):
        raise ParseError("Flashcards must be a list.")
    try:
        cards = _FLASHCARDS.validate_python(data)
    except ValidationError as exc:
        raise ParseError(f"Malformed flashcards: {exc.error_count()} invalid field(s).") from exc
    if not cards:
        raise ParseError("Response contained no flashcards.")
    return cards


def _flashcards_from_text(text: str) -> list[Flashcard]:
    cards = parse_flashcard_lines(text)
    if cards:
        return cards
    data = _unwrap_list(_extract_json(text), "flashcards")
    if isinstance(data, list):
        return _validate_flashcards(data)
    raise ParseError("No flashcards found in response.")


def _flashcards_from_hf(raw: Any) -> list[Flashcard]:
    if isinstance(raw, list) and raw and all(isinstance(i, dict) and "question" in i for i in raw):
        return _validate_flashcards(raw)
    return _flashcards_from_text(_require_text(_hf_field(raw, "generated_text"), "generated text"))


def _flashcards_from_chat(raw: Any) -> list[Flashcard]:
    return _flashcards_from_text(_require_text(_chat_content(raw), "flashcards"))


def _quiz_from_chat(raw: Any) -> list[QuizQuestion]:
    content = _require_text(_chat_content(raw), "a quiz")
    data = _unwrap_list(_extract_json(content), "quiz", "questions")
    if not isinstance(data, list) or not data:
        raise ParseError("Quiz must be a non-empty JSON list.")
    try:
        return _QUIZ.validate_python(data)
    except ValidationError as exc:
        raise ParseError(f"Malformed quiz: {exc.error_count()} invalid field(s).") from exc


_STRATEGIES: dict[tuple[GenerationTask, ProviderKind], Callable[[Any], Artifact]] = {
    (GenerationTask.SUMMARIZE, ProviderKind.HUGGINGFACE): _summary_from_hf,
    (GenerationTask.SUMMARIZE, ProviderKind.OPENAI): _summary_from_chat,
    (GenerationTask.FLASHCARDS, ProviderKind.HUGGINGFACE): _flashcards_from_hf,
    (GenerationTask.FLASHCARDS, ProviderKind.OPENAI): _flashcards_from_chat,
    (GenerationTask.QUIZ, ProviderKind.OPENAI): _quiz_from_chat,
}
