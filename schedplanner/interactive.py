"""
Interactive menu (the terminal counterpart of the calendar view).

The whole session state lives in one AppState value; every menu flow takes
the current state and returns the next one.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import requests
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schedplanner.config import ALL_GROUPS
from schedplanner.errors import InvalidEventError, PdfExtractionError, ScheduleFileError
from schedplanner.export_ics import export_events_to_ics
from schedplanner.groups import derive_learner_group, group_color, list_groups
from schedplanner.model import EventRecord
from schedplanner.normalize import load_schedule
from schedplanner.pdf_client import extract_pdf_text
from schedplanner.store import (
    AppState,
    add_event,
    default_slot,
    delete_event,
    replace_events,
    select_group,
    spans_multiple_days,
    update_event,
    visible_events,
)

console = Console()

INPUT_FORMAT = "%Y-%m-%d %H:%M"


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg, markup=False)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def event_table(events: Iterable[EventRecord], title: str = "Agenda") -> Table:
    """
    Build a rich table with one line per event, colored by learner group.
    """
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Title")
    table.add_column("Group")
    table.add_column("Location")

    for i, ev in enumerate(events, start=1):
        end_fmt = "%H:%M" if not spans_multiple_days(ev) else "%Y-%m-%d %H:%M"
        table.add_row(
            str(i),
            f"{ev.start:%Y-%m-%d} ({ev.start:%a})",
            f"{ev.start:%H:%M}-{ev.end.strftime(end_fmt)}",
            escape(ev.title),
            f"[bold {group_color(ev.learner_group)}]{escape(ev.learner_group)}[/]",
            escape(ev.location),
        )
    return table


def _print_header(state: AppState) -> None:
    _println("\n=== SchedPlanner (interactive) ===")
    if state.status:
        _println(f"{state.status} (Total events: {len(state.events)})")
    else:
        _println("No schedule loaded yet – use [1] to upload a CSV/Excel file.")
    _println(f"Group filter: {state.selected_group} | Visible events: {len(visible_events(state))}")


def _ask_datetime(label: str, default: datetime) -> Optional[datetime]:
    raw = _prompt(f"{label} [{default.strftime(INPUT_FORMAT)}]: ").strip()
    if not raw:
        return default
    try:
        return datetime.strptime(raw, INPUT_FORMAT)
    except ValueError:
        _println(f"Invalid date/time, expected YYYY-MM-DD HH:MM: {escape(raw)}")
        return None


def _pick_event(state: AppState, action: str) -> Optional[EventRecord]:
    events = visible_events(state)
    if not events:
        _println("No events.")
        return None

    console.print(event_table(events, title=f"{action} event"))
    pick = _prompt("Enter number (blank = cancel): ").strip()
    if not pick:
        return None
    if not pick.isdigit() or not (1 <= int(pick) <= len(events)):
        _println("Out of range.")
        return None
    return events[int(pick) - 1]


def _event_form(base: Optional[EventRecord], slot: tuple[datetime, datetime]) -> Optional[EventRecord]:
    """
    Ask for title/start/end; returns None if the user aborts.
    """
    default_title = base.title if base else ""
    title = _prompt(f"Title [{default_title}]: ").strip() or default_title
    if not title:
        _println("A title is required.")
        return None

    start = _ask_datetime("Start", slot[0])
    if start is None:
        return None
    end = _ask_datetime("End", slot[1])
    if end is None:
        return None

    if start.date() != end.date():
        if _prompt("This event spans multiple days. Continue? (y/N): ").strip().lower() != "y":
            return None

    return EventRecord(
        title=title,
        start=start,
        end=end,
        description=base.description if base else "",
        location=base.location if base else "",
        learner_group=base.learner_group if base else derive_learner_group("", title, ""),
    )


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------


def _flow_load(state: AppState, path: Optional[str] = None) -> AppState:
    path = path or _prompt("Schedule file (.csv/.xlsx) [blank = back]: ").strip()
    if not path:
        return state

    _println("Processing file...")
    try:
        result = load_schedule(path)
    except ScheduleFileError as exc:
        _println(f"[red]Error:[/] {escape(str(exc))}")
        return state

    if result.skipped:
        _println(f"Skipped {len(result.skipped)} rows:")
        for r in result.skipped[:10]:
            _println(f"  row {r.row_number}: {escape(r.reason or '')}")
        if len(result.skipped) > 10:
            _println(f"  ... and {len(result.skipped) - 10} more")

    new_state = replace_events(state, result)
    _println(escape(new_state.status))
    return new_state


def _flow_filter(state: AppState) -> AppState:
    groups = list_groups(state.events)
    for i, g in enumerate(groups, start=1):
        marker = "*" if g == state.selected_group else " "
        label = escape(g) if g == ALL_GROUPS else f"[{group_color(g)}]{escape(g)}[/]"
        _println(f"{marker} {i}) {label}")

    pick = _prompt("Choose group number (blank = keep): ").strip()
    if not pick:
        return state
    if not pick.isdigit() or not (1 <= int(pick) <= len(groups)):
        _println("Out of range.")
        return state
    return select_group(state, groups[int(pick) - 1])


def _flow_agenda(state: AppState) -> None:
    events = visible_events(state)
    if not events:
        _println("No events.")
        return

    by_date: dict[str, list[EventRecord]] = defaultdict(list)
    for ev in events:
        by_date[ev.start.strftime("%Y-%m-%d (%a)")].append(ev)

    for day, day_events in by_date.items():
        console.print(event_table(day_events, title=day))


def _flow_add(state: AppState) -> AppState:
    slot = default_slot(datetime.now())
    record = _event_form(None, slot)
    if record is None:
        return state
    try:
        new_state = add_event(state, record)
    except InvalidEventError as exc:
        _println(f"[red]{escape(str(exc))}[/]")
        return state
    _println(f"Added: {escape(record.title)}")
    return new_state


def _flow_edit(state: AppState) -> AppState:
    target = _pick_event(state, "Edit")
    if target is None:
        return state
    record = _event_form(target, (target.start, target.end))
    if record is None:
        return state
    try:
        new_state = update_event(state, target, record)
    except InvalidEventError as exc:
        _println(f"[red]{escape(str(exc))}[/]")
        return state
    _println(f"Updated: {escape(record.title)}")
    return new_state


def _flow_delete(state: AppState) -> AppState:
    target = _pick_event(state, "Delete")
    if target is None:
        return state
    _println(f"Deleted: {escape(target.title)}")
    return delete_event(state, target)


def _flow_export(state: AppState) -> None:
    events = visible_events(state)
    if not events:
        _println("No events to export.")
        return

    default_name = "schedule.ics"
    out_in = _prompt(f"Output file [{default_name}]: ").strip()
    out_path = Path(out_in or default_name)
    if out_path.suffix.lower() != ".ics":
        out_path = out_path.with_suffix(".ics")

    n = export_events_to_ics(events, out_path)
    _println(f"Exported {n} events to: {escape(str(out_path.resolve()))}")


def _flow_pdf() -> None:
    path = _prompt("PDF file [blank = back]: ").strip()
    if not path:
        return
    try:
        text = extract_pdf_text(Path(path))
    except (OSError, requests.RequestException, PdfExtractionError) as exc:
        _println(f"[red]PDF extraction failed:[/] {escape(str(exc))}")
        return
    console.print(text, markup=False)


def run_interactive(state: Optional[AppState] = None, initial_file: Optional[str] = None) -> AppState:
    """
    Interactive menu loop. Returns the final state on exit.
    """
    state = state or AppState()
    if initial_file:
        state = _flow_load(state, initial_file)

    while True:
        _print_header(state)

        choice = _prompt(
            "\n[1] Upload schedule (CSV/Excel)\n"
            "[2] Filter by group\n"
            "[3] Agenda\n"
            "[4] Add event\n"
            "[5] Edit event\n"
            "[6] Delete event\n"
            "[7] Export .ics\n"
            "[8] Extract PDF text\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return state

        if choice == "1":
            state = _flow_load(state)
        elif choice == "2":
            state = _flow_filter(state)
        elif choice == "3":
            _flow_agenda(state)
        elif choice == "4":
            state = _flow_add(state)
        elif choice == "5":
            state = _flow_edit(state)
        elif choice == "6":
            state = _flow_delete(state)
        elif choice == "7":
            _flow_export(state)
        elif choice == "8":
            _flow_pdf()
        else:
            _println("Invalid choice.")
