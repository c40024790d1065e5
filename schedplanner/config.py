"""
Project-wide constants and environment overrides.

Everything that might need tweaking for a different schedule export lives
here, so the parsing modules stay free of magic values.
"""

from __future__ import annotations

import logging
import os


# ---------------------------------------------------------------------------
# Upload format
# ---------------------------------------------------------------------------

# Header names are compared in lower case
REQUIRED_HEADERS = ("section date", "start time", "end time")

CSV_SUFFIXES = (".csv",)
EXCEL_SUFFIXES = (".xlsx", ".xlsm")

# Excel stores dates as day counts; anything below this is treated as a serial
EXCEL_SERIAL_THRESHOLD = 100000
EXCEL_UNIX_EPOCH_SERIAL = 25569
EXCEL_LEAP_BUG_SERIAL = 59

# Known broken prefix produced by the upstream export (year written as +057342)
LEGACY_DATE_PREFIX = "+057342"
LEGACY_DATE_REPLACEMENT = "2023"


# ---------------------------------------------------------------------------
# Events & groups
# ---------------------------------------------------------------------------

UNTITLED_SESSION = "Untitled Session"
UNKNOWN_LOCATION = "Unknown Location"
UNGROUPED = "Ungrouped"
ALL_GROUPS = "All Groups"


# ---------------------------------------------------------------------------
# External services / runtime
# ---------------------------------------------------------------------------

DEFAULT_PDF_ENDPOINT = "http://localhost:3000/api/parse-pdf"


def pdf_endpoint() -> str:
    """
    Return the PDF extraction endpoint (env override: SCHEDPLANNER_PDF_ENDPOINT).
    """
    return os.environ.get("SCHEDPLANNER_PDF_ENDPOINT", "").strip() or DEFAULT_PDF_ENDPOINT


def log_level_name(default: str = "WARNING") -> str:
    """
    Return the configured log level name (env override: SCHEDPLANNER_LOG_LEVEL).

    Unknown names fall back to the default instead of failing at startup.
    """
    name = (os.environ.get("SCHEDPLANNER_LOG_LEVEL", "").strip() or default).upper()
    if not isinstance(logging.getLevelName(name), int):
        return default.upper()
    return name
