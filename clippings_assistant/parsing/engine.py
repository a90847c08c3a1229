from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from .dates import Clock, normalize_date
from .models import UNKNOWN_AUTHOR, ClippingRecord, NoteKind, ParseResult
from .queries import group_by_title
from .rules import (
    BYTE_ORDER_MARK,
    DATE_PATTERN,
    ENTRY_DELIMITER,
    KIND_KEYWORDS,
    LOCATION_PATTERN,
    PAGE_PATTERN,
    TITLE_AUTHOR_PATTERN,
)

logger = logging.getLogger(__name__)


class ClippingsParser:
    """
    Parser for e-reader clipping exports. Stateless: each `parse` call
    returns a fresh `ParseResult` and keeps nothing between calls. The clock
    supplies "now" for entries without a usable date.
    """

    def __init__(self, clock: Clock = datetime.now):
        self.clock = clock

    def parse(self, text: str) -> ParseResult:
        if not isinstance(text, str):
            raise TypeError(f"Clippings input must be str, got {type(text).__name__}")

        records: List[ClippingRecord] = []
        skipped = 0
        for entry in self.split_entries(text):
            record = self.parse_entry(entry)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        logger.debug("Parsed %d clippings (%d entries skipped)", len(records), skipped)
        return ParseResult(records=tuple(records), groups=group_by_title(records))

    def split_entries(self, text: str) -> List[str]:
        entries = []
        for chunk in text.split(ENTRY_DELIMITER):
            chunk = chunk.strip()
            if chunk:
                entries.append(chunk)
        return entries

    def parse_entry(self, entry: str) -> Optional[ClippingRecord]:
        lines = [line.strip() for line in entry.split("\n")]
        lines = [line for line in lines if line]
        if len(lines) < 2:
            logger.debug("Skipping entry with fewer than two lines: %r", entry[:80])
            return None

        source_title, author = self.parse_title_author(lines[0])
        kind, location, page, created_at = self.parse_metadata(lines[1])
        content = "\n".join(lines[2:])

        return ClippingRecord(
            source_title=source_title,
            author=author,
            kind=kind,
            location=location,
            page=page,
            created_at=created_at,
            content=content,
        )

    def parse_title_author(self, title_line: str) -> Tuple[str, str]:
        if title_line.startswith(BYTE_ORDER_MARK):
            title_line = title_line[len(BYTE_ORDER_MARK):]

        match = TITLE_AUTHOR_PATTERN.match(title_line)
        if match:
            return match.group(1).strip(), match.group(2).strip()
        return title_line, UNKNOWN_AUTHOR

    def parse_metadata(self, metadata_line: str) -> Tuple[NoteKind, str, Optional[str], datetime]:
        kind = NoteKind.UNKNOWN
        for keyword, candidate in KIND_KEYWORDS:
            if keyword in metadata_line:
                kind = candidate
                break

        location_match = LOCATION_PATTERN.search(metadata_line)
        location = location_match.group(1) if location_match else ""

        page_match = PAGE_PATTERN.search(metadata_line)
        page = page_match.group(1) if page_match else None

        date_match = DATE_PATTERN.search(metadata_line)
        if date_match:
            created_at = normalize_date(date_match.group(1), clock=self.clock)
        else:
            created_at = self.clock()

        return kind, location, page, created_at


def parse(text: str, clock: Clock = datetime.now) -> ParseResult:
    """Parse a full clippings export into an immutable snapshot."""
    return ClippingsParser(clock=clock).parse(text)
