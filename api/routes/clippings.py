from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import PlainTextResponse, Response

from clippings_assistant.parsing import (
    BookSummary,
    ClippingStatistics,
    EmptyExportError,
    ExportFormat,
    InputTooLargeError,
    UnsupportedFileError,
    book_highlights_text,
    book_summaries,
    books_by_search,
    clean_title,
    parse_kind_filter,
    record_to_dict,
    render_export,
    search,
    sort_by_location,
    statistics,
)
from clippings_assistant.parsing.export import DEFAULT_FILENAMES, MEDIA_TYPES

from api.dependencies import build_worker, get_indexer, get_result_or_404, new_session_id

router = APIRouter(prefix="/clippings", tags=["clippings"])


def _kind_or_400(kind: str):
    try:
        return parse_kind_filter(kind)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _statistics_payload(stats: ClippingStatistics) -> dict:
    return {
        "total": stats.total,
        "total_groups": stats.total_groups,
        "counts_by_kind": {kind.value: count for kind, count in stats.counts_by_kind.items()},
    }


def _summary_payload(summary: BookSummary) -> dict:
    return {
        "title": summary.source_title,
        "display_title": summary.display_title,
        "author": summary.author,
        "total": summary.total,
        "counts_by_kind": {kind.value: count for kind, count in summary.counts_by_kind.items()},
    }


def _group_or_404(session_id: str, title: str):
    result = get_result_or_404(session_id)
    records = result.groups.get(title)
    if not records:
        raise HTTPException(status_code=404, detail=f"Book not found: {title}")
    return records


@router.post("/upload")
async def upload_clippings(
    file: UploadFile = File(...),
    session_id: Optional[str] = Form(None),
):
    worker = build_worker()
    source_name = file.filename or ""
    try:
        worker.check_source_name(source_name)
    except UnsupportedFileError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    payload = await file.read()
    if not payload:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    try:
        worker.check_size(len(payload))
    except InputTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc))
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Uploaded file is not valid UTF-8 text")

    session_id = session_id or new_session_id()
    try:
        result = worker.ingest_text(session_id, text, source_name=source_name)
    except InputTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc))
    except UnsupportedFileError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if result.is_empty:
        raise HTTPException(status_code=422, detail=f"No notes found in {source_name}")

    return {
        "session_id": session_id,
        "source_name": source_name,
        "status": worker.repo.get_session(session_id).status,
        "statistics": _statistics_payload(statistics(result.records)),
    }


@router.get("/{session_id}/statistics")
def get_statistics(session_id: str):
    result = get_result_or_404(session_id)
    return _statistics_payload(statistics(result.records))


@router.get("/{session_id}/books")
def list_books(session_id: str, query: str = "", kind: str = "all"):
    result = get_result_or_404(session_id)
    groups = books_by_search(result.records, query, _kind_or_400(kind))
    return [_summary_payload(summary) for summary in book_summaries(groups)]


@router.get("/{session_id}/books/notes")
def get_book_notes(session_id: str, title: str):
    records = _group_or_404(session_id, title)
    author = records[0].author
    return {
        "title": title,
        "display_title": clean_title(title, author),
        "author": author,
        "total": len(records),
        "notes": [record_to_dict(r) for r in sort_by_location(records)],
    }


@router.get("/{session_id}/books/highlights", response_class=PlainTextResponse)
def get_book_highlights(session_id: str, title: str):
    records = _group_or_404(session_id, title)
    text = book_highlights_text(records)
    if not text:
        raise HTTPException(status_code=404, detail="No highlights found in this book.")
    return text


@router.get("/{session_id}/search")
def search_clippings(session_id: str, query: str = "", kind: str = "all"):
    result = get_result_or_404(session_id)
    matches = search(result.records, query, _kind_or_400(kind))
    return {"total": len(matches), "results": [record_to_dict(r) for r in matches]}


@router.get("/{session_id}/search/ranked")
def ranked_search(session_id: str, query: str, limit: int = Query(20, ge=1, le=100)):
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    get_result_or_404(session_id)
    hits = get_indexer().search(query, session_id=session_id, limit=limit)
    return {"hits": hits}


@router.get("/{session_id}/export")
def export_clippings(session_id: str, format: ExportFormat = ExportFormat.TEXT):
    result = get_result_or_404(session_id)
    try:
        data = render_export(result, format)
    except EmptyExportError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except RuntimeError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    filename = DEFAULT_FILENAMES[format]
    return Response(
        content=data,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
