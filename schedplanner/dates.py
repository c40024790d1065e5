"""
Date parsing and date + time combination.

Pipeline for one cell pair:
    fix_legacy_date -> parse_date (Excel serial or strict notations)
                    -> parse_time -> naive datetime

All timestamps are local wall-clock values; no timezone handling.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from schedplanner.config import (
    EXCEL_LEAP_BUG_SERIAL,
    EXCEL_SERIAL_THRESHOLD,
    EXCEL_UNIX_EPOCH_SERIAL,
    LEGACY_DATE_PREFIX,
    LEGACY_DATE_REPLACEMENT,
)
from schedplanner.timeparse import parse_time

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Accepted notations (order matters: first strict match wins)
# ---------------------------------------------------------------------------

# (shape regex, strptime format). The regex enforces exact digit widths,
# which strptime alone does not.
DATE_FORMATS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^\d{8}$"), "%Y%m%d"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{2}/\d{2}/\d{4}$"), "%m/%d/%Y"),
    (re.compile(r"^\d{2}-\d{2}-\d{4}$"), "%d-%m-%Y"),
    (re.compile(r"^[a-z]{3} \d{2}, \d{4}$", re.IGNORECASE), "%b %d, %Y"),
    (re.compile(r"^\d{2} [a-z]{3} \d{4}$", re.IGNORECASE), "%d %b %Y"),
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "%Y/%m/%d"),
)

_NUMERIC_RE = re.compile(r"^\d+(?:\.\d+)?$")
_COMPACT_RE, _COMPACT_FMT = DATE_FORMATS[0]


# ---------------------------------------------------------------------------
# Legacy correction
# ---------------------------------------------------------------------------


def fix_legacy_date(value: Any) -> str:
    """
    Return the date cell as a string with the known export bug patched.

    Native dates become YYYYMMDD. The upstream export sometimes writes the
    year as "+057342"; that prefix is replaced by "2023".
    TODO: drop the prefix patch once the upstream export writes real years.
    """
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y%m%d")
    text = str(value).strip()
    if text.startswith(LEGACY_DATE_PREFIX):
        return LEGACY_DATE_REPLACEMENT + text[len(LEGACY_DATE_PREFIX):]
    return text


# ---------------------------------------------------------------------------
# Date parsing
# ---------------------------------------------------------------------------


def excel_serial_to_date(serial: int) -> date:
    """
    Convert an Excel 1900-epoch serial day number to a calendar date.

    Serial 25569 is 1970-01-01; serials after 59 lose one more day to
    compensate for Excel's fictitious 1900-02-29.
    """
    d = date(1970, 1, 1) + timedelta(days=serial - EXCEL_UNIX_EPOCH_SERIAL)
    if serial > EXCEL_LEAP_BUG_SERIAL:
        d -= timedelta(days=1)
    return d


def is_compact_date(text: str) -> bool:
    """
    True if text is a valid YYYYMMDD date.
    """
    return _strict_parse(text, _COMPACT_RE, _COMPACT_FMT) is not None


def _strict_parse(text: str, shape: re.Pattern[str], fmt: str) -> Optional[date]:
    if not shape.match(text):
        return None
    try:
        return datetime.strptime(text, fmt).date()
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a raw date cell into a date, or return None.
    """
    if value is None or value == "":
        return None

    text = fix_legacy_date(value)
    if not text:
        return None

    if _NUMERIC_RE.match(text):
        serial = int(float(text))
        if serial < EXCEL_SERIAL_THRESHOLD:
            return excel_serial_to_date(serial)

    for shape, fmt in DATE_FORMATS:
        parsed = _strict_parse(text, shape, fmt)
        if parsed is not None:
            return parsed

    log.debug("Invalid date format: %r", text)
    return None


def combine_date_time(date_value: Any, time_value: Any) -> Optional[datetime]:
    """
    Merge a raw date cell and a raw time cell into one naive datetime.

    Returns None if either part is missing or unparseable.
    """
    if not date_value or not time_value:
        log.debug("Missing date/time values: date=%r time=%r", date_value, time_value)
        return None

    day = parse_date(date_value)
    if day is None:
        return None

    tod = parse_time(time_value)
    if tod is None:
        return None

    return datetime(day.year, day.month, day.day, tod.hours, tod.minutes)
