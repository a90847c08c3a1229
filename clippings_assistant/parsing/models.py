from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

UNKNOWN_AUTHOR = "Unknown"

_FIRST_NUMBER = re.compile(r"(\d+)")


class NoteKind(str, Enum):
    HIGHLIGHT = "Highlight"
    BOOKMARK = "Bookmark"
    NOTE = "Note"
    UNKNOWN = "Unknown"


class SessionStatus(str, Enum):
    UPLOADED = "uploaded"
    PARSING = "parsing"
    PARSED = "parsed"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class ClippingRecord:
    source_title: str
    author: str
    kind: NoteKind
    location: str
    page: Optional[str]
    created_at: datetime
    content: str

    @property
    def location_number(self) -> int:
        """First run of digits in the location, 0 when there is none."""
        if not self.location:
            return 0
        match = _FIRST_NUMBER.search(self.location)
        return int(match.group(1)) if match else 0

    def summary(self) -> str:
        return f"{self.source_title} - {self.kind.value} at {self.location}: {self.content[:50]}..."


@dataclass(frozen=True)
class ParseResult:
    """
    Immutable snapshot of one parse pass. `groups` is keyed by the exact
    source title and keeps first-seen order for titles and records.
    """

    records: Tuple[ClippingRecord, ...] = ()
    groups: Mapping[str, Tuple[ClippingRecord, ...]] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True)
class ClippingStatistics:
    total: int
    total_groups: int
    counts_by_kind: Dict[NoteKind, int]


@dataclass(frozen=True)
class BookSummary:
    source_title: str
    display_title: str
    author: str
    total: int
    counts_by_kind: Dict[NoteKind, int]


@dataclass
class SessionRecord:
    id: str
    source_name: str
    status: SessionStatus = SessionStatus.UPLOADED
    record_count: int = 0
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
