from datetime import datetime

import pytest

from clippings_assistant.parsing import (
    ClippingRecord,
    NoteKind,
    book_highlights_text,
    book_summaries,
    books_by_search,
    group_by_title,
    parse_kind_filter,
    search,
    sort_by_location,
    statistics,
)


def make_record(**overrides):
    fields = dict(
        source_title="Deep Work",
        author="Cal Newport",
        kind=NoteKind.HIGHLIGHT,
        location="1",
        page=None,
        created_at=datetime(2024, 1, 1, 12, 0, 0),
        content="",
    )
    fields.update(overrides)
    return ClippingRecord(**fields)


def test_sort_by_location_is_numeric_and_stable():
    records = [make_record(location="10"), make_record(location="2"), make_record(location="10-20")]
    ordered = sort_by_location(records)
    assert [r.location for r in ordered] == ["2", "10", "10-20"]
    assert records[0].location == "10"


def test_sort_by_location_treats_missing_digits_as_zero():
    records = [make_record(location="5"), make_record(location=""), make_record(location="n/a")]
    assert [r.location for r in sort_by_location(records)] == ["", "n/a", "5"]


def test_search_matches_content_title_and_author_case_insensitively():
    records = [
        make_record(content="Focus is the new IQ."),
        make_record(source_title="Meditations", author="Marcus Aurelius", content="Waste no time."),
        make_record(source_title="Dune", author="Frank Herbert", kind=NoteKind.NOTE, content="Fear is the mind-killer."),
    ]
    assert search(records, "focus") == [records[0]]
    assert search(records, "MEDITATIONS") == [records[1]]
    assert search(records, "herbert") == [records[2]]
    assert search(records, "") == records
    assert search(records, "", NoteKind.NOTE) == [records[2]]
    assert search(records, "is the", "Highlight") == [records[0]]
    assert search(records, "missing") == []


def test_group_by_title_preserves_first_seen_order():
    records = [
        make_record(source_title="B", location="1"),
        make_record(source_title="A", location="2"),
        make_record(source_title="B", location="3"),
    ]
    groups = group_by_title(records)
    assert list(groups) == ["B", "A"]
    assert [r.location for r in groups["B"]] == ["1", "3"]


def test_group_by_title_is_read_only():
    groups = group_by_title([make_record()])
    with pytest.raises(TypeError):
        groups["other"] = ()


def test_statistics_counts_every_kind():
    records = [
        make_record(kind=NoteKind.HIGHLIGHT),
        make_record(kind=NoteKind.NOTE, source_title="Other"),
        make_record(kind=NoteKind.UNKNOWN),
    ]
    stats = statistics(records)
    assert stats.total == 3
    assert stats.total_groups == 2
    assert stats.counts_by_kind[NoteKind.BOOKMARK] == 0
    assert stats.counts_by_kind[NoteKind.UNKNOWN] == 1


def test_statistics_of_nothing():
    stats = statistics([])
    assert stats.total == 0
    assert stats.total_groups == 0
    assert set(stats.counts_by_kind.values()) == {0}


def test_books_by_search_groups_filtered_records():
    records = [
        make_record(content="alpha"),
        make_record(source_title="Other", content="beta"),
        make_record(content="beta gamma"),
    ]
    groups = books_by_search(records, "beta")
    assert list(groups) == ["Other", "Deep Work"]
    assert groups["Deep Work"] == (records[2],)


def test_book_summaries_sorted_by_count_with_clean_titles():
    records = [
        make_record(source_title="dokumen.pub_small-book", author="A Writer"),
        make_record(source_title="Big Book", author="Someone"),
        make_record(source_title="Big Book", author="Someone", kind=NoteKind.BOOKMARK),
        make_record(source_title="tie-book", author="Other"),
    ]
    summaries = book_summaries(group_by_title(records))
    assert [s.source_title for s in summaries] == ["Big Book", "dokumen.pub_small-book", "tie-book"]
    assert summaries[0].total == 2
    assert summaries[0].counts_by_kind[NoteKind.BOOKMARK] == 1
    assert summaries[1].display_title == "Small Book"
    assert summaries[1].author == "A Writer"


def test_book_highlights_text_skips_empty_and_non_highlights():
    records = [
        make_record(content="  first  "),
        make_record(content=""),
        make_record(kind=NoteKind.NOTE, content="a note"),
        make_record(content="second"),
    ]
    assert book_highlights_text(records) == "first\n\nsecond"
    assert book_highlights_text([make_record(kind=NoteKind.BOOKMARK)]) == ""


def test_parse_kind_filter():
    assert parse_kind_filter("all") == "all"
    assert parse_kind_filter("Note") is NoteKind.NOTE
    assert parse_kind_filter(NoteKind.BOOKMARK) is NoteKind.BOOKMARK
    with pytest.raises(ValueError):
        parse_kind_filter("notes")
