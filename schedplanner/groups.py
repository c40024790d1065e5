"""
Learner group detection and the derived group listing.

A learner group is a code like "A1" .. "H2". Rows that carry no usable code
fall into the "Ungrouped" bucket.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Sequence

from schedplanner.config import ALL_GROUPS, UNGROUPED
from schedplanner.model import EventRecord

_EXPLICIT_RE = re.compile(r"^[A-H][1-2]$", re.IGNORECASE)
_EMBEDDED_RE = re.compile(r"([A-H])\s*([1-2])", re.IGNORECASE)
_SORT_RE = re.compile(r"([A-Za-z])\s*([1-2])")

DEFAULT_COLOR = "#3b82f6"

# Display color per group code (used by the interactive renderer)
GROUP_COLORS: dict[str, str] = {
    "A1": "#f87171",
    "A2": "#fb923c",
    "B1": "#facc15",
    "B2": "#a3e635",
    "C1": "#34d399",
    "C2": "#2dd4bf",
    "D1": "#60a5fa",
    "D2": "#818cf8",
    "E1": "#a78bfa",
    "E2": "#f472b6",
    "F1": "#ec4899",
    "F2": "#f472b6",
    "G1": "#d97706",
    "G2": "#f59e0b",
    "H1": "#10b981",
    "H2": "#06b6d4",
}


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def derive_learner_group(group_field: Any, session_name: Any, section_name: Any) -> str:
    """
    Derive the canonical learner group for one row.

    Order: explicit group column, then a code embedded in the section name,
    then one embedded in the session name, else "Ungrouped".
    """
    explicit = _text(group_field)
    if explicit and _EXPLICIT_RE.match(explicit):
        return explicit.upper()

    for field in (section_name, session_name):
        m = _EMBEDDED_RE.search(_text(field))
        if m:
            return (m.group(1) + m.group(2)).upper()

    return UNGROUPED


def group_color(group: str) -> str:
    return GROUP_COLORS.get(group, DEFAULT_COLOR)


def _group_sort_key(group: str) -> tuple[int, str, int, str]:
    m = _SORT_RE.search(group)
    if m:
        return (0, m.group(1).upper(), int(m.group(2)), group)
    return (1, "", 0, group)


def list_groups(events: Iterable[EventRecord]) -> list[str]:
    """
    Build the group selector entries for a set of events.

    Result: "All Groups", then codes ordered by letter and digit, then
    "Ungrouped" (if present).
    """
    groups = {ev.learner_group for ev in events if ev.learner_group}
    has_ungrouped = UNGROUPED in groups
    groups.discard(UNGROUPED)

    ordered = sorted(groups, key=_group_sort_key)
    if has_ungrouped:
        ordered.append(UNGROUPED)
    return [ALL_GROUPS] + ordered


def filter_by_group(events: Sequence[EventRecord], group: str) -> list[EventRecord]:
    if not group or group == ALL_GROUPS:
        return list(events)
    return [ev for ev in events if ev.learner_group == group]
