from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api.dependencies import get_indexer, get_repo

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/{session_id}")
def get_session(session_id: str):
    session = get_repo().get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {
        "id": session.id,
        "source_name": session.source_name,
        "status": session.status,
        "record_count": session.record_count,
        "error_message": session.error_message,
    }


@router.delete("/{session_id}")
def reset_session(session_id: str):
    repo = get_repo()
    session = repo.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    get_indexer().delete_session(session_id)
    repo.delete_session(session_id)
    return {"status": "reset", "session_id": session_id}
