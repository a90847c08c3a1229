"""
Ordered extraction rules for clipping entries and display titles.

Every heuristic the engine applies lives here as data: the entry delimiter,
the title/author pattern, the metadata keyword and regex rules, and the
title cleaning passes. Order in each list is significant.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .models import NoteKind

ENTRY_DELIMITER = "=========="
BYTE_ORDER_MARK = "\ufeff"

TITLE_AUTHOR_PATTERN = re.compile(r"^(.+?)\s*\(([^)]+)\)$")

# First match wins.
KIND_KEYWORDS: Tuple[Tuple[str, NoteKind], ...] = (
    ("Highlight", NoteKind.HIGHLIGHT),
    ("Bookmark", NoteKind.BOOKMARK),
    ("Note", NoteKind.NOTE),
)

LOCATION_PATTERN = re.compile(r"Location (\d+(?:-\d+)?)")
PAGE_PATTERN = re.compile(r"page (\d+)")
DATE_PATTERN = re.compile(r"Added on (.+?)$")

TITLE_STOP_WORDS = frozenset(
    ["the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"]
)


@dataclass(frozen=True)
class RegexPass:
    """A single substitution step. `count=1` replaces only the first match."""

    name: str
    pattern: re.Pattern
    replacement: str = ""
    count: int = 0
    strip: bool = False

    def apply(self, text: str) -> str:
        result = self.pattern.sub(self.replacement, text, count=self.count)
        return result.strip() if self.strip else result


def _compile(pattern: str, ignore_case: bool = False) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE if ignore_case else 0)


# Passes applied before any author-specific trimming.
TITLE_PREFIX_PASSES: List[RegexPass] = [
    RegexPass("strip_vdoc_prefix", _compile(r"^vdoc\.?pub_?", ignore_case=True), count=1),
    RegexPass("strip_dokumen_prefix", _compile(r"^dokumen\.?pub_?", ignore_case=True), count=1),
    RegexPass("drop_catalog_ids", _compile(r"\b\d{6,}\b")),
    RegexPass("dashes_to_spaces", _compile(r"[-_]+"), replacement=" "),
    RegexPass("collapse_whitespace", _compile(r"\s+"), replacement=" ", strip=True),
]

# Passes applied after author trimming.
TITLE_SUFFIX_PASSES: List[RegexPass] = [
    RegexPass(
        "drop_edition_suffix",
        _compile(r"\s*(second edition|first edition|revised|updated)\s*$", ignore_case=True),
        count=1,
    ),
    RegexPass("drop_trailing_punctuation", _compile(r"[-_.]+$"), count=1, strip=True),
]

TRAILING_PARENTHETICAL = RegexPass(
    "drop_trailing_parenthetical", _compile(r"\s*\([^)]*\)\s*$"), count=1, strip=True
)


def _trailing_word_pass(name: str, phrase: str) -> RegexPass:
    pattern = _compile(r"\b" + re.escape(phrase) + r"\b\s*$", ignore_case=True)
    return RegexPass(name, pattern, count=1, strip=True)


def author_passes(author: Optional[str]) -> List[RegexPass]:
    """
    Build the author trimming passes for one title: the full name, then each
    author word longer than two characters (tried once each, in order), then
    a trailing parenthesised group. Blank authors produce no passes.
    """
    if not author or not author.strip():
        return []
    name = author.strip()
    passes = [_trailing_word_pass("drop_author_name", name)]
    for word in name.split():
        if len(word) > 2:
            passes.append(_trailing_word_pass(f"drop_author_word:{word}", word))
    passes.append(TRAILING_PARENTHETICAL)
    return passes


def title_case(text: str) -> str:
    words = text.split()
    cased = []
    for index, word in enumerate(words):
        lower = word.lower()
        if index == 0 or lower not in TITLE_STOP_WORDS:
            cased.append(word[:1].upper() + word[1:].lower())
        else:
            cased.append(lower)
    return " ".join(cased)
