from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StringConstraints

OptionText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class GenerationTask(str, Enum):
    """Artifacts the pipeline can produce for a document."""

    SUMMARIZE = "summarize"
    FLASHCARDS = "flashcards"
    QUIZ = "quiz"


class Flashcard(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class QuizQuestion(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    question: str = Field(min_length=1)
    options: list[OptionText] = Field(min_length=4, max_length=4)
    correct_answer: StrictInt = Field(alias="correctAnswer", ge=0, le=3)


Artifact = Union[str, list[Flashcard], list[QuizQuestion]]


@dataclass(frozen=True)
class NormalizedResult:
    """Artifact recovered from a single provider response."""

    task: GenerationTask
    provider: str
    artifact: Artifact
