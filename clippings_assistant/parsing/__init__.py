"""
Parsing subsystem exports.
"""

from .dates import normalize_date
from .engine import ClippingsParser, parse
from .export import (
    EmptyExportError,
    ExportFormat,
    ExportPaths,
    LocalExportStorage,
    record_to_dict,
    render_export,
)
from .indexing import Indexer, NoopIndexer, WhooshIndexer
from .models import (
    UNKNOWN_AUTHOR,
    BookSummary,
    ClippingRecord,
    ClippingStatistics,
    NoteKind,
    ParseResult,
    SessionRecord,
    SessionStatus,
)
from .queries import (
    ALL_KINDS,
    book_highlights_text,
    book_summaries,
    books_by_search,
    group_by_title,
    parse_kind_filter,
    search,
    sort_by_location,
    statistics,
)
from .repository import InMemorySessionRepository, SessionRepository
from .titles import clean_title
from .worker import ClippingsWorker, InputTooLargeError, UnsupportedFileError, WorkerConfig

__all__ = [
    "ALL_KINDS",
    "BookSummary",
    "ClippingRecord",
    "ClippingStatistics",
    "ClippingsParser",
    "ClippingsWorker",
    "EmptyExportError",
    "ExportFormat",
    "ExportPaths",
    "Indexer",
    "InMemorySessionRepository",
    "InputTooLargeError",
    "LocalExportStorage",
    "NoopIndexer",
    "NoteKind",
    "ParseResult",
    "SessionRecord",
    "SessionRepository",
    "SessionStatus",
    "UNKNOWN_AUTHOR",
    "UnsupportedFileError",
    "WhooshIndexer",
    "WorkerConfig",
    "book_highlights_text",
    "book_summaries",
    "books_by_search",
    "clean_title",
    "group_by_title",
    "normalize_date",
    "parse",
    "parse_kind_filter",
    "record_to_dict",
    "render_export",
    "search",
    "sort_by_location",
    "statistics",
]
