"""
Normalization (schedule file -> calendar events).

- Reads a CSV export or the first sheet of an .xlsx workbook
- Normalizes EACH data row into at most ONE EventRecord
- Collects skipped rows (with 1-based row number and reason) as diagnostics

Important rules:
- 1 row = 0 or 1 event, never more
- A bad row is skipped and logged, the rest of the file keeps loading
- A bad file (empty, missing columns, unreadable) aborts with ScheduleFileError
"""

from __future__ import annotations

import csv
import io
import logging
import re
import zipfile
import zlib
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from schedplanner.config import (
    CSV_SUFFIXES,
    EXCEL_SUFFIXES,
    REQUIRED_HEADERS,
    UNKNOWN_LOCATION,
    UNTITLED_SESSION,
)
from schedplanner.dates import combine_date_time, fix_legacy_date, is_compact_date
from schedplanner.errors import ScheduleFileError
from schedplanner.groups import derive_learner_group
from schedplanner.model import EventRecord

log = logging.getLogger(__name__)

FieldGetter = Callable[[str], Any]

_LETTER_RE = re.compile(r"[a-zA-Z]")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RowResult:
    """
    Outcome of one row: either an event or the reason it was skipped.
    """

    row_number: int
    event: Optional[EventRecord] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.event is not None


@dataclass
class LoadResult:
    """
    Outcome of one file: accepted events plus skipped-row diagnostics.
    """

    source: str
    events: List[EventRecord] = field(default_factory=list)
    skipped: List[RowResult] = field(default_factory=list)

    @property
    def status(self) -> str:
        return f"Loaded {len(self.events)} valid events from {self.source}"


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------


def _clean(value: Any) -> Any:
    # Native cell values (datetime, numbers) pass through untouched
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def csv_field_getter(row: dict) -> FieldGetter:
    """
    Case-insensitive accessor for a CSV row keyed by its header.
    """
    by_key = {str(k).strip().lower(): v for k, v in row.items() if k is not None}

    def get(name: str) -> Any:
        return _clean(by_key.get(name.lower(), ""))

    return get


def sheet_field_getter(header: Sequence[str], row: Sequence[Any]) -> FieldGetter:
    """
    Case-insensitive accessor for a spreadsheet row (header already lower-cased).
    """

    def get(name: str) -> Any:
        key = name.lower()
        if key not in header:
            return ""
        idx = header.index(key)
        return _clean(row[idx]) if idx < len(row) else ""

    return get


def _is_blank(values: Iterable[Any]) -> bool:
    return all(_clean(v) == "" for v in values)


# ---------------------------------------------------------------------------
# Row normalization (CORE LOGIC)
# ---------------------------------------------------------------------------


def _section_date(raw: Any) -> str:
    if isinstance(raw, (datetime, date)):
        return fix_legacy_date(raw)
    return str(raw).strip()


def _skip(row_number: int, reason: str) -> RowResult:
    log.warning("Skipping row %d: %s", row_number, reason)
    return RowResult(row_number=row_number, reason=reason)


def _build_row(get_field: FieldGetter, row_number: int) -> RowResult:
    raw_date = get_field("Section Date")
    section_date = _section_date(raw_date) if raw_date != "" else ""
    if not section_date:
        return _skip(row_number, "Missing section date")

    # Stray text in the date column (e.g. "TBD") is rejected early
    if _LETTER_RE.search(section_date) and not is_compact_date(section_date):
        return _skip(row_number, f'Invalid date format "{section_date}"')

    start = combine_date_time(section_date, get_field("Start Time"))
    end = combine_date_time(section_date, get_field("End Time"))
    if start is None or end is None:
        return _skip(row_number, "Invalid date/time")

    # Sessions crossing midnight: the end belongs to the next day.
    # Zero-length rows (start == end) stay rejected.
    if start >= end:
        adjusted_end = end + timedelta(days=1)
        if start != end and start < adjusted_end:
            end = adjusted_end
        else:
            return _skip(row_number, "End time is not after start time even after adjustment")

    session_name = get_field("Session Name")
    section_name = get_field("Section Name") or get_field("Section")
    learner_group = derive_learner_group(get_field("Learner Group"), session_name, section_name)

    parts = [get_field("Course Name"), get_field("Session Type"), section_name]
    description = " - ".join(str(p) for p in parts if p)

    event = EventRecord(
        title=str(session_name) if session_name else UNTITLED_SESSION,
        start=start,
        end=end,
        description=description,
        location=str(get_field("Location") or UNKNOWN_LOCATION),
        learner_group=learner_group,
    )

    if not (isinstance(event.start, datetime) and isinstance(event.end, datetime)):
        return _skip(row_number, "Unresolved start/end")

    return RowResult(row_number=row_number, event=event)


def normalize_row(get_field: FieldGetter, row_number: int) -> RowResult:
    """
    Normalize exactly one row into exactly one RowResult. Never raises.
    """
    try:
        return _build_row(get_field, row_number)
    except Exception as exc:  # noqa: BLE001
        log.debug("Row %d raised", row_number, exc_info=True)
        return _skip(row_number, f"Unexpected error: {exc}")


def normalize_rows(source: str, rows: Iterable[Tuple[int, FieldGetter]]) -> LoadResult:
    """
    Normalize all (row_number, accessor) pairs of one file, in source order.
    """
    result = LoadResult(source=source)
    for row_number, get_field in rows:
        outcome = normalize_row(get_field, row_number)
        if outcome.event is not None:
            result.events.append(outcome.event)
        else:
            result.skipped.append(outcome)

    log.info("%s (%d rows skipped)", result.status, len(result.skipped))
    return result


# ---------------------------------------------------------------------------
# File readers
# ---------------------------------------------------------------------------


def _check_headers(header: Iterable[str], kind: str) -> None:
    present = {h.strip().lower() for h in header}
    missing = [h for h in REQUIRED_HEADERS if h not in present]
    if missing:
        raise ScheduleFileError(f"Missing required columns in {kind} file: {', '.join(missing)}")


def normalize_csv_text(text: str) -> LoadResult:
    """
    Normalize CSV content (header row required).

    Row numbers count every record after the header, blank lines included,
    so a diagnostic points at the same data row the source file shows.
    """
    reader = csv.reader(io.StringIO(text))
    header = next((r for r in reader if r), None)
    if not header or _is_blank(header):
        raise ScheduleFileError("Empty CSV file")
    _check_headers(header, "CSV")

    def rows() -> Iterator[Tuple[int, FieldGetter]]:
        for row_number, values in enumerate(reader, start=1):
            if _is_blank(values):
                continue
            yield row_number, csv_field_getter(dict(zip(header, values)))

    return normalize_rows("CSV", rows())


def normalize_csv(path: str | Path) -> LoadResult:
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ScheduleFileError(f"Error processing CSV file: {exc}") from exc
    try:
        return normalize_csv_text(text)
    except csv.Error as exc:
        raise ScheduleFileError(f"Error processing CSV file: {exc}") from exc


def _read_sheet(path: Path) -> Tuple[List[str], List[Tuple[Any, ...]]]:
    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, SyntaxError, OSError, KeyError, ValueError) as exc:
        raise ScheduleFileError("Invalid Excel file structure") from exc

    # Read-only workbooks parse the sheet XML only while iterating
    try:
        sheet = wb.worksheets[0] if wb.worksheets else None
        rows = list(sheet.iter_rows(values_only=True)) if sheet is not None else []
    except (SyntaxError, zipfile.BadZipFile, zlib.error, EOFError, KeyError, ValueError) as exc:
        raise ScheduleFileError("Invalid Excel file structure") from exc
    finally:
        wb.close()

    if not rows:
        raise ScheduleFileError("Empty Excel file")

    header = [str(h).strip().lower() if h is not None else "" for h in rows[0]]
    return header, rows[1:]


def normalize_workbook(path: str | Path) -> LoadResult:
    """
    Normalize the first sheet of an .xlsx workbook (header row required).
    """
    header, rows = _read_sheet(Path(path))
    _check_headers(header, "Excel")

    pairs = (
        (row_number, sheet_field_getter(header, row))
        for row_number, row in enumerate(rows, start=1)
        if not _is_blank(row)
    )
    return normalize_rows("Excel", pairs)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_schedule(path: str | Path) -> LoadResult:
    """
    Load a schedule file, choosing the reader by file extension.
    """
    p = Path(path)
    suffix = p.suffix.lower()

    if suffix in CSV_SUFFIXES:
        return normalize_csv(p)
    if suffix in EXCEL_SUFFIXES:
        return normalize_workbook(p)

    raise ScheduleFileError(f"Unsupported file type: {p.name}")
