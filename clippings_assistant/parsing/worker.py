from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .dates import Clock
from .engine import ClippingsParser
from .indexing import Indexer
from .models import ParseResult, SessionRecord, SessionStatus
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class UnsupportedFileError(ValueError):
    pass


class InputTooLargeError(ValueError):
    pass


@dataclass
class WorkerConfig:
    max_bytes: int = 20 * 1024 * 1024
    max_lines: int = 1_000_000
    allowed_suffixes: tuple = (".txt",)


class ClippingsWorker:
    """
    Drives one ingestion through guard -> parse -> store -> index and keeps
    the session status in the repository current. A successful ingest
    replaces whatever the session held before.
    """

    def __init__(
        self,
        repository: SessionRepository,
        indexer: Indexer,
        config: Optional[WorkerConfig] = None,
        clock: Clock = datetime.now,
    ):
        self.repo = repository
        self.indexer = indexer
        self.config = config or WorkerConfig()
        self.parser = ClippingsParser(clock=clock)

    def check_source_name(self, source_name: str) -> None:
        if not source_name.lower().endswith(self.config.allowed_suffixes):
            raise UnsupportedFileError(f"Please select a .txt file (got {source_name!r})")

    def check_size(self, size_bytes: int) -> None:
        if size_bytes > self.config.max_bytes:
            raise InputTooLargeError(
                f"Input is {size_bytes} bytes; the limit is {self.config.max_bytes} bytes"
            )

    def ingest_file(self, session_id: str, path: Path) -> ParseResult:
        path = Path(path)
        self.check_source_name(path.name)
        if not path.exists():
            raise FileNotFoundError(f"Clippings file not found: {path}")
        self.check_size(path.stat().st_size)
        text = path.read_text(encoding="utf-8")
        return self.ingest_text(session_id, text, source_name=path.name)

    def ingest_text(self, session_id: str, text: str, source_name: str = "My Clippings.txt") -> ParseResult:
        session = self.repo.get_session(session_id)
        if not session:
            session = SessionRecord(id=session_id, source_name=source_name)
        else:
            session.source_name = source_name
            session.error_message = None
        self.repo.save_session(session)

        try:
            self.check_source_name(source_name)
            self.repo.update_session_status(session_id, SessionStatus.PARSING)
            self._check_limits(text)

            result = self.parser.parse(text)
            # The stored result is only replaced once indexing has succeeded.
            self.indexer.index_session(session_id, result.records)
            self.repo.save_result(session_id, result)

            status = SessionStatus.EMPTY if result.is_empty else SessionStatus.PARSED
            self.repo.update_session_status(session_id, status, record_count=len(result.records))
        except Exception as exc:  # noqa: BLE001
            self.repo.update_session_status(session_id, SessionStatus.FAILED, error_message=str(exc))
            logger.warning("Ingestion failed for session %s: %s", session_id, exc)
            raise

        logger.info(
            "Session %s: parsed %d clippings across %d titles from %s",
            session_id,
            len(result.records),
            len(result.groups),
            source_name,
        )
        return result

    def _check_limits(self, text: str) -> None:
        if not isinstance(text, str):
            raise TypeError(f"Clippings input must be str, got {type(text).__name__}")
        self.check_size(len(text.encode("utf-8")))
        line_count = text.count("\n") + 1
        if line_count > self.config.max_lines:
            raise InputTooLargeError(
                f"Input has {line_count} lines; the limit is {self.config.max_lines} lines"
            )
