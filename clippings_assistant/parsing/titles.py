from __future__ import annotations

from typing import Optional

from .rules import TITLE_PREFIX_PASSES, TITLE_SUFFIX_PASSES, author_passes, title_case


def clean_title(raw_title: str, author: Optional[str] = None) -> str:
    """
    Display title for a raw source title. Presentation only: grouping always
    uses the raw title. Falls back to `raw_title` when nothing survives.
    """
    title = raw_title
    for step in TITLE_PREFIX_PASSES:
        title = step.apply(title)
    for step in author_passes(author):
        title = step.apply(title)
    for step in TITLE_SUFFIX_PASSES:
        title = step.apply(title)
    if title:
        title = title_case(title)
    return title or raw_title
