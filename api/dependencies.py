from __future__ import annotations

import os
import uuid
from functools import lru_cache
from pathlib import Path

from fastapi import HTTPException

from clippings_assistant.parsing import (
    ClippingsWorker,
    ExportPaths,
    InMemorySessionRepository,
    LocalExportStorage,
    ParseResult,
    SessionRepository,
    WhooshIndexer,
    WorkerConfig,
)


@lru_cache(maxsize=1)
def get_repo() -> SessionRepository:
    return InMemorySessionRepository()


@lru_cache(maxsize=1)
def get_indexer() -> WhooshIndexer:
    whoosh_dir = os.getenv("WHOOSH_DIR")
    return WhooshIndexer(Path(whoosh_dir) if whoosh_dir else None)


@lru_cache(maxsize=1)
def get_export_storage() -> LocalExportStorage:
    root = Path(os.getenv("CLIPPINGS_EXPORT_ROOT", "./data"))
    return LocalExportStorage(ExportPaths(root))


def get_worker_config() -> WorkerConfig:
    return WorkerConfig(
        max_bytes=int(os.getenv("CLIPPINGS_MAX_UPLOAD_BYTES", str(20 * 1024 * 1024))),
        max_lines=int(os.getenv("CLIPPINGS_MAX_LINES", "1000000")),
    )


def build_worker() -> ClippingsWorker:
    return ClippingsWorker(repository=get_repo(), indexer=get_indexer(), config=get_worker_config())


def new_session_id() -> str:
    return uuid.uuid4().hex


def get_result_or_404(session_id: str) -> ParseResult:
    result = get_repo().get_result(session_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return result
