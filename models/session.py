from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.PROCESSING


class Session(BaseModel):
    id: str
    status: SessionStatus = SessionStatus.PROCESSING
    source_ref: Optional[str] = None  # path of the uploaded document
    error_detail: Optional[str] = None  # only set when status is ERROR
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
