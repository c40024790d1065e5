"""
In-memory event store.

The application state is an explicit, immutable AppState value. Every edit
(upload, add, update, delete, group selection) returns a NEW state instead of
mutating the old one, so a failed edit can never leave half-applied changes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta
from typing import Tuple

from schedplanner.config import ALL_GROUPS
from schedplanner.errors import InvalidEventError
from schedplanner.groups import filter_by_group, list_groups
from schedplanner.model import EventRecord
from schedplanner.normalize import LoadResult


@dataclass(frozen=True)
class AppState:
    events: Tuple[EventRecord, ...] = ()
    selected_group: str = ALL_GROUPS
    status: str = ""


def _validate(record: EventRecord) -> None:
    if record.end <= record.start:
        raise InvalidEventError("End time must be after start time!")


def replace_events(state: AppState, result: LoadResult) -> AppState:
    """
    Swap in the events of a completed upload (the previous set is discarded).

    The group selection is reset if the new events do not contain it.
    """
    events = tuple(result.events)
    group = state.selected_group if state.selected_group in list_groups(events) else ALL_GROUPS
    return AppState(events=events, selected_group=group, status=result.status)


def add_event(state: AppState, record: EventRecord) -> AppState:
    _validate(record)
    return replace(state, events=state.events + (record,))


def update_event(state: AppState, old: EventRecord, new: EventRecord) -> AppState:
    """
    Replace the record `old` (matched by identity) with `new`.
    """
    _validate(new)
    return replace(state, events=tuple(new if ev is old else ev for ev in state.events))


def delete_event(state: AppState, record: EventRecord) -> AppState:
    return replace(state, events=tuple(ev for ev in state.events if ev is not record))


def select_group(state: AppState, group: str) -> AppState:
    if group not in list_groups(state.events):
        raise ValueError(f"Unknown group: {group!r}")
    return replace(state, selected_group=group)


def visible_events(state: AppState) -> list[EventRecord]:
    """
    Events of the selected group, ordered by start time.
    """
    return sorted(filter_by_group(state.events, state.selected_group), key=lambda ev: (ev.start, ev.end))


def default_slot(moment: datetime) -> Tuple[datetime, datetime]:
    """
    Suggested (start, end) for a new event at `moment`.

    Starts at the full hour and lasts one hour, but never runs into the next
    day (a slot at 23:xx ends at 23:59:59.999999).
    """
    start = moment.replace(minute=0, second=0, microsecond=0)
    end = start + timedelta(hours=1)
    if end.date() != start.date():
        end = datetime.combine(start.date(), time.max)
    return start, end


def spans_multiple_days(record: EventRecord) -> bool:
    return record.start.date() != record.end.date()
