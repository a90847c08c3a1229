from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from whoosh import index
from whoosh.fields import ID, NUMERIC, TEXT, Schema
from whoosh.filedb.filestore import RamStorage
from whoosh.qparser import MultifieldParser, OrGroup
from whoosh.query import Term

from .models import ClippingRecord


class Indexer(Protocol):
    def index_session(self, session_id: str, records: Iterable[ClippingRecord]) -> None:
        ...

    def delete_session(self, session_id: str) -> None:
        ...


class NoopIndexer:
    """
    Default indexer stub. Keeps the pipeline wired without pulling in Whoosh.
    """

    def index_session(self, session_id: str, records: Iterable[ClippingRecord]) -> None:
        return None

    def delete_session(self, session_id: str) -> None:
        return None

    def search(self, query_str: str, session_id: Optional[str] = None, limit: int = 10) -> List[Dict]:
        return []


class WhooshIndexer:
    """
    Ranked full-text search over clippings. Uses an in-memory index unless an
    index directory is given. Re-indexing a session first deletes its
    existing documents, so each session holds only its latest parse.
    """

    SEARCH_FIELDS = ["content", "source_title", "author"]

    def __init__(self, index_dir: Optional[Path] = None):
        self.index_dir = index_dir
        self.schema = Schema(
            session_id=ID(stored=True),
            record_key=ID(stored=True, unique=True),
            position=NUMERIC(stored=True, sortable=True),
            source_title=TEXT(stored=True),
            author=TEXT(stored=True),
            kind=ID(stored=True),
            location=ID(stored=True),
            content=TEXT(stored=True),
        )
        if index_dir is None:
            self.ix = RamStorage().create_index(self.schema)
        else:
            self.index_dir.mkdir(parents=True, exist_ok=True)
            if index.exists_in(self.index_dir):
                self.ix = index.open_dir(self.index_dir)
            else:
                self.ix = index.create_in(self.index_dir, self.schema)

    def index_session(self, session_id: str, records: Iterable[ClippingRecord]) -> None:
        writer = self.ix.writer()
        writer.delete_by_term("session_id", session_id)
        for position, record in enumerate(records):
            fields = dict(
                session_id=session_id,
                record_key=f"{session_id}-r{position}",
                position=position,
                source_title=record.source_title,
                author=record.author,
                kind=record.kind.value,
                content=record.content or "",
            )
            if record.location:
                fields["location"] = record.location
            writer.add_document(**fields)
        writer.commit()

    def delete_session(self, session_id: str) -> None:
        writer = self.ix.writer()
        writer.delete_by_term("session_id", session_id)
        writer.commit()

    def search(self, query_str: str, session_id: Optional[str] = None, limit: int = 10) -> List[Dict]:
        """
        Return a list of plain dicts so callers are safe after the searcher closes.
        `position` is the record's index in the session's ParseResult.records.
        """
        qp = MultifieldParser(self.SEARCH_FIELDS, schema=self.schema, group=OrGroup)
        q = qp.parse(query_str)
        session_filter = Term("session_id", session_id) if session_id else None
        with self.ix.searcher() as searcher:
            results = searcher.search(q, limit=limit, filter=session_filter)
            hits = []
            for hit in results:
                fields = hit.fields()
                hits.append(
                    {
                        "session_id": fields.get("session_id"),
                        "position": fields.get("position"),
                        "source_title": fields.get("source_title"),
                        "author": fields.get("author"),
                        "kind": fields.get("kind"),
                        "location": fields.get("location"),
                        "content": fields.get("content"),
                        "score": hit.score,
                    }
                )
            return hits
