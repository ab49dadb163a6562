"""
In-memory registry of upload sessions.

Each upload gets a session that starts in ``processing`` and moves exactly
once to ``ready`` or ``error``. The registry is the only writer of session
records; everything else receives copies.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from models.session import Session, SessionStatus

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def create(self, source_ref: Optional[str] = None) -> str:
        session_id = str(uuid.uuid4())
        while session_id in self._sessions:
            session_id = str(uuid.uuid4())
        self._sessions[session_id] = Session(id=session_id, source_ref=source_ref)
        logger.info("Session %s created for %s", session_id, source_ref)
        return session_id

    def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session is not None else None

    def mark_ready(self, session_id: str) -> bool:
        return self._transition(session_id, SessionStatus.READY)

    def mark_error(self, session_id: str, detail: str) -> bool:
        return self._transition(session_id, SessionStatus.ERROR, detail)

    def _transition(self, session_id: str, target: SessionStatus, detail: Optional[str] = None) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning("Cannot mark unknown session %s as %s", session_id, target.value)
            return False
        if session.status.is_terminal:
            logger.warning(
                "Session %s is already %s, ignoring transition to %s",
                session_id, session.status.value, target.value,
            )
            return False

        session.status = target
        session.error_detail = detail
        session.updated_at = datetime.now(timezone.utc)
        logger.info("Session %s is now %s", session_id, target.value)
        return True

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
