from __future__ import annotations

from copy import deepcopy
from datetime import datetime
from typing import Dict, List, Optional

from .models import ParseResult, SessionRecord, SessionStatus


class SessionRepository:
    """
    Abstract boundary for session state. Only an in-memory implementation
    exists; sessions do not outlive the process.
    """

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        raise NotImplementedError

    def save_session(self, session: SessionRecord) -> None:
        raise NotImplementedError

    def list_sessions(self) -> List[SessionRecord]:
        raise NotImplementedError

    def update_session_status(
        self,
        session_id: str,
        status: SessionStatus,
        record_count: Optional[int] = None,
        error_message: Optional[str] = None,
    ) -> None:
        raise NotImplementedError

    def save_result(self, session_id: str, result: ParseResult) -> None:
        raise NotImplementedError

    def get_result(self, session_id: str) -> Optional[ParseResult]:
        raise NotImplementedError

    def delete_session(self, session_id: str) -> None:
        raise NotImplementedError


class InMemorySessionRepository(SessionRepository):
    """
    Dict-backed store for the API, the CLI and tests. Session records are
    copied in and out to avoid cross-mutation between calls. Parse results
    are immutable snapshots and are shared as-is; saving a result replaces
    the previous one for that session.
    """

    def __init__(self):
        self.sessions: Dict[str, SessionRecord] = {}
        self.results: Dict[str, ParseResult] = {}

    def _clone(self, obj):
        return deepcopy(obj)

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        session = self.sessions.get(session_id)
        return self._clone(session) if session else None

    def save_session(self, session: SessionRecord) -> None:
        self.sessions[session.id] = self._clone(session)

    def list_sessions(self) -> List[SessionRecord]:
        return [self._clone(s) for s in self.sessions.values()]

    def update_session_status(
        self,
        session_id: str,
        status: SessionStatus,
        record_count: Optional[int] = None,
        error_message: Optional[str] = None,
    ) -> None:
        session = self.sessions.get(session_id)
        if not session:
            return
        session.status = status
        if record_count is not None:
            session.record_count = record_count
        if error_message is not None:
            session.error_message = error_message
        session.updated_at = datetime.utcnow()
        self.sessions[session_id] = self._clone(session)

    def save_result(self, session_id: str, result: ParseResult) -> None:
        self.results[session_id] = result

    def get_result(self, session_id: str) -> Optional[ParseResult]:
        return self.results.get(session_id)

    def delete_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)
        self.results.pop(session_id, None)
