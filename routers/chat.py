import logging

from fastapi import APIRouter, Depends

from core.exceptions import NotFoundError, NotReadyError, RAGError, ServiceError, ValidationError
from dependencies.services import get_qa_engine, get_session_registry
from models.rag_model import ChatRequest, ChatResponse
from models.session import SessionStatus
from rag_services.qa import QAEngine
from rag_services.state import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    sessions: SessionRegistry = Depends(get_session_registry),
    qa_engine: QAEngine = Depends(get_qa_engine),
):
    """
    Answer a question about the document uploaded in `sessionId`.

    Request body:
    ```json
    {
        "sessionId": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
        "question": "What is the summary?"
    }
    ```

    Returns 425 while the document is still being processed.
    """
    session_id = (payload.sessionId or "").strip()
    question = (payload.question or "").strip()
    if not session_id or not question:
        raise ValidationError("'sessionId' and 'question' are required")

    session = sessions.get(session_id)
    if session is None:
        raise NotFoundError("Session not found or expired")

    status_url = f"/status/{session_id}"
    if session.status is not SessionStatus.READY:
        raise NotReadyError("Document is still being processed, please retry later", status_url)

    try:
        answer = await qa_engine.answer(session.source_ref, question)
    except NotReadyError as e:
        e.status_url = status_url
        raise
    except RAGError:
        raise
    except Exception as e:
        logger.exception("Chat failed for session %s", session_id)
        raise ServiceError(str(e)) from e

    return ChatResponse(answer=answer.answer, sessionId=session_id)
