"""In-memory per-user document storage."""

from __future__ import annotations

import threading
import uuid

from docbrief.models.documents import DocumentRecord
from docbrief.models.generation import Flashcard, QuizQuestion


class DocumentStore:
    def __init__(self) -> None:
        self._documents: dict[str, DocumentRecord] = {}
        self._lock = threading.Lock()

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()

    def create(self, *, user_id: str, title: str, content: str, summary: str | None) -> DocumentRecord:
        record = DocumentRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            content=content,
            summary=summary,
        )
        with self._lock:
            self._documents[record.id] = record
        return record

    def list_for_user(self, user_id: str) -> list[DocumentRecord]:
        """Return the user's documents, newest first."""
        with self._lock:
            owned = [d for d in self._documents.values() if d.user_id == user_id]
        return sorted(owned, key=lambda d: d.created_at, reverse=True)

    def get(self, document_id: str, user_id: str) -> DocumentRecord | None:
        """Fetch a document only if it belongs to ``user_id``."""
        with self._lock:
            record = self._documents.get(document_id)
        if record is None or record.user_id != user_id:
            return None
        return record

    def update_artifacts(
        self,
        document_id: str,
        *,
        summary: str | None = None,
        flashcards: list[Flashcard] | None = None,
        quiz: list[QuizQuestion] | None = None,
    ) -> DocumentRecord | None:
        with self._lock:
            record = self._documents.get(document_id)
            if record is None:
                return None
            if summary is not None:
                record.summary = summary
            if flashcards is not None:
                record.flashcards = flashcards
            if quiz is not None:
                record.quiz = quiz
            return record


DOCUMENT_STORE = DocumentStore()
