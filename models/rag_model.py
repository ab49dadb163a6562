"""
Pydantic models for API requests and responses
"""
from pydantic import BaseModel
from typing import List, Optional

from models.session import SessionStatus


class ChatRequest(BaseModel):
    # Both optional so a missing field is reported as 400, not 422
    sessionId: Optional[str] = None
    question: Optional[str] = None


class ChatResponse(BaseModel):
    answer: str
    sessionId: str


class UploadResponse(BaseModel):
    sessionId: str
    statusUrl: str
    chatUrl: str


class StatusResponse(BaseModel):
    status: SessionStatus
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    sessions: int
    inFlight: int
    cachedAnswers: int


class SourceChunk(BaseModel):
    text: str
    score: float


class AnswerPayload(BaseModel):
    answer: str
    sources: List[SourceChunk] = []
