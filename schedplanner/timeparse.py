"""
Time parsing (raw cell -> TimeOfDay).

Accepted notations:
- 24-hour: "13:45", "1345", "9:05"
- 12-hour: "1:30 pm", "11am", "12:15 AM"
- words:   "noon", "midnight"
- native datetime / time objects (spreadsheet cells)

Failure is signalled by returning None, never by raising.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, time
from typing import Any, Optional

from schedplanner.model import TimeOfDay

log = logging.getLogger(__name__)

_MILITARY_RE = re.compile(r"^(\d{1,2}):?(\d{2})$")
_TWELVE_HOUR_RE = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*([ap]m)", re.IGNORECASE)
_WORDS_RE = re.compile(r"(noon|midnight)", re.IGNORECASE)


def _checked(hours: int, minutes: int) -> Optional[TimeOfDay]:
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return TimeOfDay(hours=hours, minutes=minutes)


def parse_time(value: Any) -> Optional[TimeOfDay]:
    """
    Parse a raw time value into a TimeOfDay, or return None.
    """
    if value is None or value == "":
        return None

    if isinstance(value, (datetime, time)):
        return TimeOfDay(hours=value.hour, minutes=value.minute)

    cleaned = str(value).strip().lower()
    if not cleaned:
        return None

    m = _MILITARY_RE.match(cleaned)
    if m:
        return _checked(int(m.group(1)), int(m.group(2)))

    m = _TWELVE_HOUR_RE.search(cleaned)
    if m:
        hours = int(m.group(1))
        minutes = int(m.group(2)) if m.group(2) else 0
        period = m.group(3).lower()
        if period == "pm" and hours != 12:
            hours += 12
        elif period == "am" and hours == 12:
            hours = 0
        return _checked(hours, minutes)

    m = _WORDS_RE.search(cleaned)
    if m:
        return TimeOfDay(hours=12, minutes=0) if m.group(1).lower() == "noon" else TimeOfDay(hours=0, minutes=0)

    log.debug("Unrecognized time format: %r", value)
    return None
