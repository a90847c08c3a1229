from __future__ import annotations

import logging
import re
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# e.g. "Tuesday, April 1, 2025 4:47:55 PM", "Monday, 1 January 2024 12:00:00",
# older firmware's "Tuesday, December 25, 2012, 04:48 PM" or "Jan 1, 2024"
DEVICE_DATE_FORMATS = (
    "%A, %B %d, %Y %I:%M:%S %p",
    "%A, %B %d, %Y %I:%M %p",
    "%A, %B %d, %Y, %I:%M:%S %p",
    "%A, %B %d, %Y, %I:%M %p",
    "%A, %B %d, %Y %H:%M:%S",
    "%A, %B %d, %Y %H:%M",
    "%A, %d %B %Y %H:%M:%S",
    "%A, %d %B %Y %H:%M",
    "%A, %d %B %Y %I:%M:%S %p",
    "%A, %d %B %Y %I:%M %p",
    "%A, %b %d, %Y %I:%M:%S %p",
    "%A, %b %d, %Y %I:%M %p",
    "%B %d, %Y %I:%M:%S %p",
    "%B %d, %Y %I:%M %p",
    "%B %d, %Y %H:%M:%S",
    "%B %d, %Y %H:%M",
    "%b %d, %Y %I:%M:%S %p",
    "%b %d, %Y %I:%M %p",
    "%d %B %Y %H:%M:%S",
    "%d %B %Y %H:%M",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
)

_WEEKDAY_PREFIX = re.compile(r"^[A-Za-z]+,\s*")
# RFC 2822 parsing ignores a 12-hour clock marker, so those go to the device formats.
_MERIDIEM = re.compile(r"\b[AP]M\b", re.IGNORECASE)


def _parse_general(text: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    if _MERIDIEM.search(text):
        return None
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def _parse_device(text: str) -> Optional[datetime]:
    candidates = [text]
    without_weekday = _WEEKDAY_PREFIX.sub("", text, count=1)
    if without_weekday != text:
        candidates.append(without_weekday)
    for candidate in candidates:
        for fmt in DEVICE_DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt)
            except (ValueError, OverflowError):
                continue
    return None


def normalize_date(text: str, clock: Clock = datetime.now) -> datetime:
    """
    Best-effort timestamp parse: general formats first, then the device
    formats. Anything unparseable becomes `clock()`; nothing is raised.
    """
    value = (text or "").strip()
    if value:
        parsed = _parse_general(value) or _parse_device(value)
        if parsed is not None:
            return parsed
    logger.debug("Unparseable date %r, falling back to current time", text)
    return clock()
