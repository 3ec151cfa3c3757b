from fastapi import FastAPI

from docbrief.api.auth import router as auth_router
from docbrief.api.documents import router as documents_router
from docbrief.core.config import get_settings
from docbrief.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

app = FastAPI(title="Docbrief Service")

app.include_router(auth_router)
app.include_router(documents_router)


@app.on_event("startup")
def _startup() -> None:
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info("OPENAI_API_KEY: %s", "set" if settings.openai_api_key else "not set")
    logger.info("HUGGINGFACE_API_KEY: %s", "set" if settings.huggingface_api_key else "not set")
