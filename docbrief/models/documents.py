from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from docbrief.models.generation import Flashcard, QuizQuestion


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRecord(BaseModel):
    id: str
    email: str
    name: str
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)


class DocumentRecord(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    summary: str | None = None
    flashcards: list[Flashcard] = Field(default_factory=list)
    quiz: list[QuizQuestion] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: str
    email: str
    name: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class DocumentSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    summary: str | None = None
    created_at: datetime = Field(alias="createdAt")


class DocumentDetail(DocumentSummary):
    content: str
    flashcards: list[Flashcard] = Field(default_factory=list)
    quiz: list[QuizQuestion] = Field(default_factory=list)


class UploadResponse(BaseModel):
    message: str
    document: DocumentSummary


class SummaryResponse(BaseModel):
    message: str
    summary: str


class FlashcardsResponse(BaseModel):
    flashcards: list[Flashcard]


class QuizResponse(BaseModel):
    quiz: list[QuizQuestion]
