"""
Example: parse a clippings export, print a summary, and write an export file.

Usage:
    python3 clippings_demo.py --input "My Clippings.txt" --format markdown --out ./data
"""

import argparse
import logging
from pathlib import Path

from clippings_assistant.parsing import (
    ClippingsWorker,
    EmptyExportError,
    ExportFormat,
    ExportPaths,
    InMemorySessionRepository,
    LocalExportStorage,
    NoopIndexer,
    book_summaries,
    books_by_search,
    parse_kind_filter,
    statistics,
)

logger = logging.getLogger("clippings_demo")


def setup_logging(log_dir: Path, level: int = logging.INFO):
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),                     # Console
            logging.FileHandler(log_dir / "app.log", encoding="utf-8"),  # File
        ],
        force=True,
    )


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", required=True, type=Path, help="Path to the clippings .txt export")
    parser.add_argument(
        "--format",
        default=ExportFormat.TEXT.value,
        choices=[fmt.value for fmt in ExportFormat],
        help="Export format to write",
    )
    parser.add_argument("--out", default=Path("./data"), type=Path, help="Export root directory")
    parser.add_argument("--session-id", default="cli", help="Session id (used for the export path)")
    parser.add_argument("--query", default="", help="Only list books with notes matching this text")
    parser.add_argument("--kind", default="all", help="Only list books with notes of this kind")
    parser.add_argument("--log-dir", default=Path("./logs"), type=Path, help="Directory for app.log")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(args.log_dir, logging.DEBUG if args.verbose else logging.INFO)

    repo = InMemorySessionRepository()
    worker = ClippingsWorker(repository=repo, indexer=NoopIndexer())
    result = worker.ingest_file(args.session_id, args.input)
    if result.is_empty:
        print(f"No notes found in {args.input}")
        return

    stats = statistics(result.records)
    print(f"Total notes: {stats.total}   Books: {stats.total_groups}")
    for kind, count in stats.counts_by_kind.items():
        print(f"  {kind.value}: {count}")

    groups = books_by_search(result.records, args.query, parse_kind_filter(args.kind))
    for summary in book_summaries(groups):
        print(f"- {summary.display_title} by {summary.author} ({summary.total} notes)")

    storage = LocalExportStorage(ExportPaths(args.out))
    try:
        target = storage.write_export(args.session_id, result, ExportFormat(args.format))
    except EmptyExportError as exc:
        logger.warning("%s", exc)
        return
    print(f"Export written to {target}")


if __name__ == "__main__":
    main()
