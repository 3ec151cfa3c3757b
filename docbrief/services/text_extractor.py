"""Document text extraction with Docling."""

import os
import tempfile

from docbrief.core.errors import ExtractionFailed, UnsupportedFormat
from docbrief.core.logging import get_logger

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def resolve_extension(content_type: str | None, filename: str | None) -> str:
    """Map an upload's declared type to the file extension Docling should see."""
    if content_type == PDF_CONTENT_TYPE:
        return ".pdf"
    if content_type == DOCX_CONTENT_TYPE or (filename or "").lower().endswith(".docx"):
        return ".docx"
    raise UnsupportedFormat("Unsupported file type. Please upload PDF or DOCX files only.")


def extract_text(data: bytes, content_type: str | None, filename: str | None = None) -> str:
    """Extract plain text from uploaded PDF or DOCX bytes.

    Args:
        data: Raw file contents
        content_type: Declared MIME type of the upload
        filename: Original filename, used to recognise DOCX uploads

    Returns:
        The extracted text

    Raises:
        UnsupportedFormat: If the file is neither PDF nor DOCX
        ExtractionFailed: If conversion fails or yields no text
    """
    ext = resolve_extension(content_type, filename)
    temp_path = _write_temp_bytes(data, ext)
    try:
        text = _convert_with_docling(temp_path)
    except ExtractionFailed:
        raise
    except Exception as exc:
        logger.error("Conversion of %s failed - %s", filename or temp_path, exc)
        raise ExtractionFailed("Could not extract text from the document") from exc
    finally:
        _safe_remove(temp_path)

    if not text or not text.strip():
        raise ExtractionFailed("Could not extract text from the document")
    logger.debug("Extracted %d characters from %s", len(text), filename or ext)
    return text


def _convert_with_docling(path: str) -> str:
    """Convert a document file to plain text using Docling's DocumentConverter."""
    try:
        from docling.document_converter import DocumentConverter
    except ImportError as exc:
        raise ExtractionFailed("Docling required. Install with: pip install docling") from exc

    logger.debug("Converting document: %s", path)
    result = DocumentConverter().convert(path)
    return result.document.export_to_text()


def _write_temp_bytes(data: bytes, suffix: str) -> str:
    """Write upload bytes to a temp file so Docling can detect the format by extension."""
    handle = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
    with handle:
        handle.write(data)
    return handle.name


def _safe_remove(path: str) -> None:
    """Best-effort removal of temp files."""
    try:
        os.remove(path)
    except OSError:
        pass
