"""
Error taxonomy for the upload / ingestion / chat flow.

Every error that can reach an HTTP caller carries its status code and knows
how to render itself; main.py turns them into JSON responses.
"""
from typing import Any, Dict, Optional

from fastapi import status


class RAGError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(RAGError):
    """Bad or missing request fields, wrong file type."""
    status_code = status.HTTP_400_BAD_REQUEST


class PayloadTooLargeError(ValidationError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class NotFoundError(RAGError):
    status_code = status.HTTP_404_NOT_FOUND


class NotReadyError(RAGError):
    """The session's document is not indexed yet; the client should retry later."""
    status_code = status.HTTP_425_TOO_EARLY

    def __init__(self, message: str, status_url: Optional[str] = None):
        super().__init__(message)
        self.status_url = status_url

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.status_url:
            payload["statusUrl"] = self.status_url
        return payload


class ProcessingError(RAGError):
    """Ingestion failed. Recorded on the session, never raised to HTTP callers."""


class ServiceError(RAGError):
    """Embedding or generation failed while answering a live question."""

    def __init__(self, detail: str, message: str = "Question answering service is temporarily unavailable"):
        super().__init__(message)
        self.detail = detail

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "detail": self.detail}


class IndexNotFoundError(RAGError):
    """No persisted index exists for a key and nothing was supplied to build one."""

    def __init__(self, key: str):
        super().__init__(f"No vector index found for '{key}'")
        self.key = key
