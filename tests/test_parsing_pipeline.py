from datetime import datetime

import pytest

from clippings_assistant.parsing import (
    ClippingsWorker,
    InMemorySessionRepository,
    InputTooLargeError,
    NoopIndexer,
    SessionStatus,
    UnsupportedFileError,
    WhooshIndexer,
    WorkerConfig,
)

SAMPLE = """Deep Work (Cal Newport)
- Your Highlight on Location 150-152 | Added on Monday, January 1, 2024 12:00:00 PM

Focus is the new IQ.
==========
Deep Work (Cal Newport)
- Your Bookmark on Location 300 | Added on Monday, January 1, 2024 1:00:00 PM
==========
"""

OTHER = """Meditations (Marcus Aurelius)
- Your Highlight on Location 20 | Added on Friday, March 8, 2024 9:15:00 AM

Waste no more time arguing about what a good man should be.
==========
"""


def fixed_clock():
    return datetime(2030, 1, 1)


def make_worker(indexer=None, config=None):
    repo = InMemorySessionRepository()
    worker = ClippingsWorker(
        repository=repo,
        indexer=indexer or NoopIndexer(),
        config=config,
        clock=fixed_clock,
    )
    return repo, worker


def test_worker_stores_result_and_marks_session_parsed():
    repo, worker = make_worker()
    result = worker.ingest_text("s1", SAMPLE)

    session = repo.get_session("s1")
    assert session and session.status == SessionStatus.PARSED
    assert session.record_count == 2
    assert repo.get_result("s1") is result


def test_reingest_replaces_previous_result():
    repo, worker = make_worker()
    worker.ingest_text("s1", SAMPLE)
    worker.ingest_text("s1", OTHER)

    stored = repo.get_result("s1")
    assert list(stored.groups) == ["Meditations"]
    assert repo.get_session("s1").record_count == 1


def test_empty_parse_marks_session_empty():
    repo, worker = make_worker()
    result = worker.ingest_text("s1", "nothing useful here")
    assert result.is_empty
    assert repo.get_session("s1").status == SessionStatus.EMPTY


def test_unsupported_suffix_fails_session():
    repo, worker = make_worker()
    with pytest.raises(UnsupportedFileError):
        worker.ingest_text("s1", SAMPLE, source_name="clippings.pdf")
    session = repo.get_session("s1")
    assert session.status == SessionStatus.FAILED
    assert "txt" in session.error_message
    assert repo.get_result("s1") is None


class BrokenIndexer(NoopIndexer):
    def index_session(self, session_id, records):
        raise RuntimeError("index unavailable")


def test_indexing_failure_keeps_previous_result():
    repo, worker = make_worker()
    previous = worker.ingest_text("s1", SAMPLE)

    worker.indexer = BrokenIndexer()
    with pytest.raises(RuntimeError):
        worker.ingest_text("s1", OTHER)

    session = repo.get_session("s1")
    assert session.status == SessionStatus.FAILED
    assert session.error_message == "index unavailable"
    assert repo.get_result("s1") is previous
    assert list(repo.get_result("s1").groups) == ["Deep Work"]


def test_size_and_line_limits():
    _, worker = make_worker(config=WorkerConfig(max_bytes=50))
    with pytest.raises(InputTooLargeError):
        worker.ingest_text("s1", SAMPLE)

    _, worker = make_worker(config=WorkerConfig(max_lines=3))
    with pytest.raises(InputTooLargeError):
        worker.ingest_text("s1", SAMPLE)


def test_ingest_file(tmp_path):
    repo, worker = make_worker()
    source = tmp_path / "My Clippings.txt"
    source.write_text(SAMPLE, encoding="utf-8")

    result = worker.ingest_file("s1", source)
    assert len(result.records) == 2
    assert repo.get_session("s1").source_name == "My Clippings.txt"

    with pytest.raises(FileNotFoundError):
        worker.ingest_file("s1", tmp_path / "missing.txt")


def test_whoosh_indexer_searches_within_session():
    indexer = WhooshIndexer()
    repo, worker = make_worker(indexer=indexer)
    worker.ingest_text("s1", SAMPLE)
    worker.ingest_text("s2", OTHER)

    hits = indexer.search("focus", session_id="s1")
    assert len(hits) == 1
    assert hits[0]["position"] == 0
    assert hits[0]["source_title"] == "Deep Work"

    assert indexer.search("focus", session_id="s2") == []
    assert len(indexer.search("arguing")) == 1


def test_whoosh_reindex_drops_old_documents(tmp_path):
    indexer = WhooshIndexer(tmp_path / "whoosh")
    _, worker = make_worker(indexer=indexer)
    worker.ingest_text("s1", SAMPLE)
    worker.ingest_text("s1", OTHER)

    assert indexer.search("focus", session_id="s1") == []
    assert len(indexer.search("meditations", session_id="s1")) == 1

    indexer.delete_session("s1")
    assert indexer.search("meditations", session_id="s1") == []
