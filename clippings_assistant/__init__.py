"""
Clippings assistant core package.

This package focuses on the parsing subsystem for e-reader clipping
exports. It exposes immutable records and parse snapshots, the ordered
extraction and title cleaning rules, query helpers over parsed records,
export renderers, an in-memory session repository, and a worker that
drives an ingestion through guard, parse, store, and indexing steps.
"""
