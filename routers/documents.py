import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from core.config import Settings
from core.exceptions import NotFoundError, PayloadTooLargeError, ValidationError
from dependencies.services import get_ingestion_pipeline, get_session_registry, get_settings
from models.rag_model import StatusResponse, UploadResponse
from rag_services.ingestion import IngestionPipeline
from rag_services.state import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()

PDF_MAGIC = b"%PDF"


def save_upload(upload_dir: Path, pdf_bytes: bytes) -> Path:
    upload_dir.mkdir(parents=True, exist_ok=True)
    pdf_path = upload_dir / f"{uuid.uuid4().hex}.pdf"
    with open(pdf_path, "wb") as f:
        f.write(pdf_bytes)
    return pdf_path


@router.post("/upload", response_model=UploadResponse)
async def upload_pdf(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    sessions: SessionRegistry = Depends(get_session_registry),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
):
    """
    Accept a single PDF and start ingesting it in the background.

    Poll `statusUrl` until the status is `ready`, then ask questions at `chatUrl`.
    """
    if file is None:
        raise ValidationError("No file received")

    filename = (file.filename or "").lower()
    if not filename.endswith(tuple(settings.ALLOWED_EXTENSIONS)):
        raise ValidationError("Only PDF files are supported")

    pdf_bytes = await file.read()
    if len(pdf_bytes) > settings.max_upload_bytes:
        raise PayloadTooLargeError(f"File exceeds the {settings.MAX_FILE_SIZE_MB}MB limit")
    if not pdf_bytes.startswith(PDF_MAGIC):
        raise ValidationError("Only PDF files are supported")

    pdf_path = save_upload(Path(settings.UPLOAD_DIR), pdf_bytes)
    session_id = sessions.create(source_ref=str(pdf_path))
    pipeline.ingest(str(pdf_path), session_id)

    return UploadResponse(
        sessionId=session_id,
        statusUrl=f"/status/{session_id}",
        chatUrl="/chat",
    )


@router.get("/status/{session_id}", response_model=StatusResponse, response_model_exclude_none=True)
async def get_status(session_id: str, sessions: SessionRegistry = Depends(get_session_registry)):
    session = sessions.get(session_id)
    if session is None:
        raise NotFoundError("Session not found")
    return StatusResponse(status=session.status, error=session.error_detail)
