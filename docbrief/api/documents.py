import asyncio
import functools
import re

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from docbrief.api.auth import get_current_user_id
from docbrief.core.logging import get_logger
from docbrief.models.documents import (
    DocumentDetail,
    DocumentRecord,
    DocumentSummary,
    FlashcardsResponse,
    QuizResponse,
    SummaryResponse,
    UploadResponse,
)
from docbrief.models.generation import GenerationTask
from docbrief.services.document_store import DOCUMENT_STORE
from docbrief.services.orchestrator import get_orchestrator
from docbrief.services.text_extractor import extract_text

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])

_TITLE_SUFFIX = re.compile(r"\.(pdf|docx)$", re.IGNORECASE)


def _summary_of(record: DocumentRecord) -> DocumentSummary:
    return DocumentSummary(
        id=record.id,
        title=record.title,
        summary=record.summary,
        created_at=record.created_at,
    )


def _owned_document(document_id: str, user_id: str) -> DocumentRecord:
    record = DOCUMENT_STORE.get(document_id, user_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    return record


@router.get("/health")
def health() -> dict:
    return {"status": "OK", "message": "Document study API is running"}


@router.post("/upload-pdf", response_model=UploadResponse)
async def upload_document(
    document: UploadFile | None = File(None),
    user_id: str = Depends(get_current_user_id),
) -> UploadResponse:
    """Extract text from a PDF/DOCX upload, summarize it and store it for the user."""
    if document is None or not document.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No document file uploaded",
        )

    data = await document.read()
    loop = asyncio.get_running_loop()
    try:
        content = await loop.run_in_executor(
            None,
            functools.partial(extract_text, data, document.content_type, document.filename),
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    summary = await get_orchestrator().run(GenerationTask.SUMMARIZE, content)
    record = DOCUMENT_STORE.create(
        user_id=user_id,
        title=_TITLE_SUFFIX.sub("", document.filename),
        content=content,
        summary=summary,
    )
    logger.info("Stored document %s for user %s (%d chars)", record.id, user_id, len(content))
    return UploadResponse(message="Document processed successfully", document=_summary_of(record))


@router.get("/documents", response_model=list[DocumentSummary])
def list_documents(user_id: str = Depends(get_current_user_id)) -> list[DocumentSummary]:
    return [_summary_of(record) for record in DOCUMENT_STORE.list_for_user(user_id)]


@router.get("/documents/{document_id}", response_model=DocumentDetail)
def get_document(document_id: str, user_id: str = Depends(get_current_user_id)) -> DocumentDetail:
    record = _owned_document(document_id, user_id)
    return DocumentDetail(**record.model_dump(exclude={"user_id"}))


@router.post("/documents/{document_id}/flashcards", response_model=FlashcardsResponse)
async def generate_flashcards(
    document_id: str, user_id: str = Depends(get_current_user_id)
) -> FlashcardsResponse:
    record = _owned_document(document_id, user_id)
    flashcards = await get_orchestrator().run(
        GenerationTask.FLASHCARDS, record.content, summary=record.summary
    )
    DOCUMENT_STORE.update_artifacts(record.id, flashcards=flashcards)
    return FlashcardsResponse(flashcards=flashcards)


@router.get("/documents/{document_id}/flashcards", response_model=FlashcardsResponse)
def get_flashcards(document_id: str, user_id: str = Depends(get_current_user_id)) -> FlashcardsResponse:
    record = _owned_document(document_id, user_id)
    return FlashcardsResponse(flashcards=record.flashcards)


@router.post("/documents/{document_id}/quiz", response_model=QuizResponse)
async def generate_quiz(document_id: str, user_id: str = Depends(get_current_user_id)) -> QuizResponse:
    record = _owned_document(document_id, user_id)
    quiz = await get_orchestrator().run(GenerationTask.QUIZ, record.content)
    DOCUMENT_STORE.update_artifacts(record.id, quiz=quiz)
    return QuizResponse(quiz=quiz)


@router.get("/documents/{document_id}/quiz", response_model=QuizResponse)
def get_quiz(document_id: str, user_id: str = Depends(get_current_user_id)) -> QuizResponse:
    record = _owned_document(document_id, user_id)
    return QuizResponse(quiz=record.quiz)


@router.post("/documents/{document_id}/summarize", response_model=SummaryResponse)
async def regenerate_summary(
    document_id: str, user_id: str = Depends(get_current_user_id)
) -> SummaryResponse:
    record = _owned_document(document_id, user_id)
    summary = await get_orchestrator().run(GenerationTask.SUMMARIZE, record.content)
    DOCUMENT_STORE.update_artifacts(record.id, summary=summary)
    return SummaryResponse(message="Summary generated successfully", summary=summary)
