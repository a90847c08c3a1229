from __future__ import annotations

import csv
import io
import json
import logging
import textwrap
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from .models import ClippingRecord, ParseResult
from .queries import highlights_with_content, sort_by_location
from .titles import clean_title

logger = logging.getLogger(__name__)

HIGHLIGHT_SEPARATOR = "\n\n---\n\n"
CSV_HEADER = ["title", "author", "kind", "location", "page", "created_at", "content"]


class ExportFormat(str, Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    CSV = "csv"
    JSON = "json"
    PDF = "pdf"


DEFAULT_FILENAMES: Dict[ExportFormat, str] = {
    ExportFormat.TEXT: "all_kindle_highlights.txt",
    ExportFormat.MARKDOWN: "kindle_notes.md",
    ExportFormat.CSV: "kindle_notes.csv",
    ExportFormat.JSON: "kindle_notes.json",
    ExportFormat.PDF: "kindle_notes.pdf",
}

MEDIA_TYPES: Dict[ExportFormat, str] = {
    ExportFormat.TEXT: "text/plain; charset=utf-8",
    ExportFormat.MARKDOWN: "text/markdown; charset=utf-8",
    ExportFormat.CSV: "text/csv; charset=utf-8",
    ExportFormat.JSON: "application/json",
    ExportFormat.PDF: "application/pdf",
}


class EmptyExportError(ValueError):
    pass


def format_display_date(value: datetime) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def record_to_dict(record: ClippingRecord) -> dict:
    return {
        "title": record.source_title,
        "author": record.author,
        "kind": record.kind.value,
        "location": record.location,
        "page": record.page,
        "created_at": record.created_at.isoformat(),
        "content": record.content,
    }


def render_highlights_text(records: Iterable[ClippingRecord]) -> str:
    """All highlights with content, each preceded by its display title."""
    highlights = highlights_with_content(records)
    if not highlights:
        raise EmptyExportError("No highlights found to export.")
    return HIGHLIGHT_SEPARATOR.join(
        f"{clean_title(r.source_title, r.author)}\n{r.content.strip()}" for r in highlights
    )


def render_markdown(result: ParseResult) -> str:
    lines: List[str] = ["# Kindle Notes", ""]
    for title, records in result.groups.items():
        author = records[0].author
        lines.append(f"## {clean_title(title, author)}")
        lines.append(f"*by {author}*")
        lines.append("")
        for record in sort_by_location(records):
            meta = [record.kind.value]
            if record.location:
                meta.append(f"Location {record.location}")
            if record.page:
                meta.append(f"page {record.page}")
            meta.append(format_display_date(record.created_at))
            lines.append(f"### {' · '.join(meta)}")
            content = record.content.strip()
            if content:
                lines.extend(f"> {line}" for line in content.split("\n"))
            else:
                lines.append("_[No content]_")
            lines.append("")
    return "\n".join(lines)


def render_csv(records: Iterable[ClippingRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for record in records:
        row = record_to_dict(record)
        writer.writerow([row[column] if row[column] is not None else "" for column in CSV_HEADER])
    return buffer.getvalue()


def render_json(records: Iterable[ClippingRecord]) -> str:
    return json.dumps([record_to_dict(r) for r in records], ensure_ascii=False, indent=2)


# A4 in points.
_PAGE_WIDTH = 595
_PAGE_HEIGHT = 842
_MARGIN = 56


def _pdf_lines(result: ParseResult) -> List[Tuple[str, float, str]]:
    """Flatten the result into (text, fontsize, fontname) lines, already wrapped."""
    lines: List[Tuple[str, float, str]] = []
    for title, records in result.groups.items():
        author = records[0].author
        for chunk in textwrap.wrap(clean_title(title, author), width=50) or [title]:
            lines.append((chunk, 16, "hebo"))
        lines.append((f"by {author}", 11, "helv"))
        lines.append(("", 8, "helv"))
        for record in sort_by_location(records):
            meta = f"{record.kind.value}  Location {record.location or '-'}  {format_display_date(record.created_at)}"
            lines.append((meta, 9, "hebo"))
            content = record.content.strip() or "[No content]"
            for paragraph in content.split("\n"):
                for chunk in textwrap.wrap(paragraph, width=95) or [""]:
                    lines.append((chunk, 10, "helv"))
            lines.append(("", 6, "helv"))
        lines.append(("", 12, "helv"))
    return lines


def render_pdf(result: ParseResult) -> bytes:
    try:
        import fitz  # PyMuPDF
    except ImportError as exc:  # pragma: no cover - dependency guard
        raise RuntimeError("PyMuPDF is required for PDF export. Please install 'pymupdf'.") from exc

    doc = fitz.open()
    try:
        page = doc.new_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
        y = _MARGIN
        for text, fontsize, fontname in _pdf_lines(result):
            line_height = fontsize * 1.4
            if y + line_height > _PAGE_HEIGHT - _MARGIN:
                page = doc.new_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
                y = _MARGIN
            y += line_height
            if text:
                page.insert_text((_MARGIN, y), text, fontsize=fontsize, fontname=fontname)
        data = doc.tobytes()
    finally:
        doc.close()
    logger.info("Rendered PDF export with %d groups", len(result.groups))
    return data


def render_export(result: ParseResult, fmt: ExportFormat) -> bytes:
    fmt = ExportFormat(fmt)
    if fmt == ExportFormat.TEXT:
        return render_highlights_text(result.records).encode("utf-8")
    if fmt == ExportFormat.MARKDOWN:
        return render_markdown(result).encode("utf-8")
    if fmt == ExportFormat.CSV:
        return render_csv(result.records).encode("utf-8")
    if fmt == ExportFormat.JSON:
        return render_json(result.records).encode("utf-8")
    return render_pdf(result)


@dataclass
class ExportPaths:
    root: Path

    def session_dir(self, session_id: str) -> Path:
        return self.root / "sessions" / str(session_id)

    def export_path(self, session_id: str, fmt: ExportFormat) -> Path:
        return self.session_dir(session_id) / DEFAULT_FILENAMES[fmt]


class LocalExportStorage:
    """
    Writes rendered exports to the local filesystem, one directory per session.
    """

    def __init__(self, export_paths: ExportPaths):
        self.paths = export_paths

    def write_export(self, session_id: str, result: ParseResult, fmt: ExportFormat) -> Path:
        fmt = ExportFormat(fmt)
        data = render_export(result, fmt)
        target = self.paths.export_path(session_id, fmt)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Wrote %s export for session %s to %s", fmt.value, session_id, target)
        return target
