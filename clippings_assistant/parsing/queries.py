from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from .models import BookSummary, ClippingRecord, ClippingStatistics, NoteKind
from .titles import clean_title

ALL_KINDS = "all"

KindFilter = Union[str, NoteKind]


def parse_kind_filter(value: KindFilter) -> KindFilter:
    """Return "all" or a NoteKind; raise ValueError for anything else."""
    if isinstance(value, NoteKind):
        return value
    if value is None or value == ALL_KINDS:
        return ALL_KINDS
    try:
        return NoteKind(value)
    except ValueError:
        choices = ", ".join([ALL_KINDS] + [kind.value for kind in NoteKind])
        raise ValueError(f"Unknown kind filter {value!r}; expected one of: {choices}") from None


def _empty_kind_counts() -> Dict[NoteKind, int]:
    return {kind: 0 for kind in NoteKind}


def sort_by_location(records: Iterable[ClippingRecord]) -> List[ClippingRecord]:
    # sorted() is stable, so equal keys keep their input order.
    return sorted(records, key=lambda record: record.location_number)


def search(
    records: Iterable[ClippingRecord],
    query: str = "",
    kind_filter: KindFilter = ALL_KINDS,
) -> List[ClippingRecord]:
    query = query or ""
    lower_query = query.lower()
    matches = []
    for record in records:
        matches_query = (
            not query
            or lower_query in record.content.lower()
            or lower_query in record.source_title.lower()
            or lower_query in record.author.lower()
        )
        matches_kind = kind_filter == ALL_KINDS or record.kind == kind_filter
        if matches_query and matches_kind:
            matches.append(record)
    return matches


def group_by_title(records: Iterable[ClippingRecord]) -> Mapping[str, Tuple[ClippingRecord, ...]]:
    groups: Dict[str, List[ClippingRecord]] = {}
    for record in records:
        groups.setdefault(record.source_title, []).append(record)
    return MappingProxyType({title: tuple(items) for title, items in groups.items()})


def statistics(records: Sequence[ClippingRecord]) -> ClippingStatistics:
    counts = _empty_kind_counts()
    titles = set()
    for record in records:
        counts[record.kind] += 1
        titles.add(record.source_title)
    return ClippingStatistics(total=len(records), total_groups=len(titles), counts_by_kind=counts)


def books_by_search(
    records: Iterable[ClippingRecord],
    query: str = "",
    kind_filter: KindFilter = ALL_KINDS,
) -> Mapping[str, Tuple[ClippingRecord, ...]]:
    return group_by_title(search(records, query, kind_filter))


def book_summaries(groups: Mapping[str, Sequence[ClippingRecord]]) -> List[BookSummary]:
    """One summary per book, most annotated first."""
    summaries = []
    for title, records in groups.items():
        if not records:
            continue
        counts = _empty_kind_counts()
        for record in records:
            counts[record.kind] += 1
        author = records[0].author
        summaries.append(
            BookSummary(
                source_title=title,
                display_title=clean_title(title, author),
                author=author,
                total=len(records),
                counts_by_kind=counts,
            )
        )
    summaries.sort(key=lambda summary: summary.total, reverse=True)
    return summaries


def highlights_with_content(records: Iterable[ClippingRecord]) -> List[ClippingRecord]:
    return [r for r in records if r.kind == NoteKind.HIGHLIGHT and r.content.strip()]


def book_highlights_text(records: Iterable[ClippingRecord]) -> str:
    return "\n\n".join(r.content.strip() for r in highlights_with_content(records))
