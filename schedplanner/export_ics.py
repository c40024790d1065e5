"""
iCalendar (.ics) export.

We convert loaded events into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar
"""

from __future__ import annotations

import hashlib
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from schedplanner.config import UNGROUPED
from schedplanner.model import EventRecord


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _dt_local(dt: datetime) -> str:
    """
    Format a naive wall-clock datetime as ICS floating time 'YYYYMMDDTHHMMSS'.
    """
    return dt.strftime("%Y%m%dT%H%M%S")


def _uid_key(ev: EventRecord) -> str:
    return "|".join([ev.title, ev.start.isoformat(), ev.end.isoformat(), ev.location, ev.learner_group])


def _uid(key: str, occurrence: int = 0) -> str:
    # Same record -> same UID, so re-imports update instead of duplicating.
    # Records sharing a key in one file are told apart by their occurrence number.
    if occurrence:
        key += f"|{occurrence}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest() + "@schedplanner"


def export_events_to_ics(events: Iterable[EventRecord], out_path: str | Path) -> int:
    """
    Export events to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//SchedPlanner//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

    count = 0
    seen: Counter[str] = Counter()
    for ev in events:
        if ev.end <= ev.start:
            continue
        key = _uid_key(ev)
        occurrence = seen[key]
        seen[key] += 1

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_uid(key, occurrence)}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART:{_dt_local(ev.start)}")
        lines.append(f"DTEND:{_dt_local(ev.end)}")
        lines.append(f"SUMMARY:{_ics_escape(ev.title)}")
        if ev.location:
            lines.append(f"LOCATION:{_ics_escape(ev.location)}")
        if ev.description:
            lines.append(f"DESCRIPTION:{_ics_escape(ev.description)}")
        if ev.learner_group and ev.learner_group != UNGROUPED:
            lines.append(f"CATEGORIES:{_ics_escape(ev.learner_group)}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return count
