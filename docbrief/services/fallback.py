"""Provider-free artifact synthesis used when every provider fails.

All functions here are pure: the same text always yields the same artifact,
and the artifact is never empty.
"""

from __future__ import annotations

import re

from docbrief.models.generation import Artifact, Flashcard, GenerationTask, QuizQuestion

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")

MAX_ITEMS = 5
SUMMARY_SENTENCES = 3
MIN_SUMMARY_LENGTH = 50
EXCERPT_LENGTH = 200
OPTION_EXCERPT_LENGTH = 80

DEFAULT_FLASHCARD_ANSWER = "This document contains important information."

DISTRACTORS = (
    "This is not mentioned in the document",
    "The document discusses something else entirely",
    "This information is not available",
)


def split_sentences(text: str, min_length: int) -> list[str]:
    """Split on runs of ``.``, ``!`` and ``?``; keep stripped sentences longer than ``min_length``."""
    sentences = (part.strip() for part in _SENTENCE_BOUNDARY.split(text))
    return [s for s in sentences if len(s) > min_length]


def fallback_summary(text: str) -> str:
    sentences = split_sentences(text, 20)
    summary = ". ".join(sentences[:SUMMARY_SENTENCES]) + "."
    if len(summary) < MIN_SUMMARY_LENGTH:
        summary = (
            f"This document contains {len(text)} characters of text. "
            f"Key content includes: {text[:EXCERPT_LENGTH]}..."
        )
    return summary


def fallback_flashcards(text: str, summary: str | None = None) -> list[Flashcard]:
    sentences = split_sentences(text, 30)[:MAX_ITEMS]
    if not sentences:
        return [
            Flashcard(
                question="What is the main topic of this document?",
                answer=(summary or "").strip() or DEFAULT_FLASHCARD_ANSWER,
            )
        ]
    return [
        Flashcard(question=f"What does the document say about topic {i}?", answer=sentence)
        for i, sentence in enumerate(sentences, start=1)
    ]


def _key_word(sentence: str) -> str:
    words = sentence.split()
    return next((w for w in words if len(w) > 5), words[len(words) // 2])


def fallback_quiz(text: str) -> list[QuizQuestion]:
    sentences = split_sentences(text, 50)[:MAX_ITEMS]
    if not sentences:
        return [
            QuizQuestion(
                question="What type of document is this?",
                options=["Text document", "Image file", "Video file", "Audio file"],
                correct_answer=0,
            ),
            QuizQuestion(
                question="How many characters does this document contain approximately?",
                options=[
                    f"About {len(text)} characters",
                    "Less than 100 characters",
                    "More than 1 million characters",
                    "Exactly 500 characters",
                ],
                correct_answer=0,
            ),
        ]
    return [
        QuizQuestion(
            question=f'According to the document, what is mentioned about "{_key_word(sentence)}"?',
            options=[sentence[:OPTION_EXCERPT_LENGTH] + "...", *DISTRACTORS],
            correct_answer=0,
        )
        for sentence in sentences
    ]


def fallback(task: GenerationTask, text: str, summary: str | None = None) -> Artifact:
    """Build the local artifact for ``task``.

    Args:
        task: Which artifact to build
        text: Full document text
        summary: Stored summary, used as the answer when no flashcard sentences qualify
    """
    if task == GenerationTask.SUMMARIZE:
        return fallback_summary(text)
    if task == GenerationTask.FLASHCARDS:
        return fallback_flashcards(text, summary)
    return fallback_quiz(text)
