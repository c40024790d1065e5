"""
CLI (Command Line Interface).

This module provides quick terminal commands, e.g.:

    schedplanner load <schedule.csv|.xlsx> [--group B1]
    schedplanner groups <schedule.csv|.xlsx>
    schedplanner export <schedule.csv|.xlsx> <file.ics> [--group B1]
    schedplanner pdf <file.pdf> [--endpoint URL]
    schedplanner interactive [schedule.csv|.xlsx]

Note:
- The interactive UI lives in schedplanner/interactive.py
- Skipped rows are reported through logging (use --verbose for details)
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import requests
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from schedplanner.config import ALL_GROUPS, log_level_name
from schedplanner.errors import PdfExtractionError, ScheduleFileError
from schedplanner.export_ics import export_events_to_ics
from schedplanner.groups import filter_by_group, list_groups
from schedplanner.interactive import event_table, run_interactive
from schedplanner.normalize import LoadResult, load_schedule
from schedplanner.pdf_client import extract_pdf_text

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """
    Route all package logging through rich (stderr).
    """
    level = "DEBUG" if verbose else log_level_name()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load(path: str) -> LoadResult | None:
    """
    Load a schedule file; print the failure and return None on file-level errors.
    """
    try:
        return load_schedule(path)
    except ScheduleFileError as exc:
        console.print(f"Error: {escape(str(exc))}")
        return None


def _cmd_load(args: argparse.Namespace) -> int:
    result = _load(args.file)
    if result is None:
        return 1

    events = sorted(filter_by_group(result.events, args.group), key=lambda ev: (ev.start, ev.end))
    console.print(f"{result.status} (skipped rows: {len(result.skipped)})")
    if events:
        title = "Agenda" if args.group == ALL_GROUPS else f"Agenda – {escape(args.group)}"
        console.print(event_table(events, title=title))
    return 0


def _cmd_groups(args: argparse.Namespace) -> int:
    result = _load(args.file)
    if result is None:
        return 1

    for group in list_groups(result.events):
        console.print(group)
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    """
    Export (optionally group-filtered) events into an iCalendar (.ics) file.
    """
    result = _load(args.file)
    if result is None:
        return 1

    events = filter_by_group(result.events, args.group)
    if not events:
        console.print("No events to export.")
        return 0

    out_path = (args.out or "").strip()
    if not out_path:
        console.print("Please provide output .ics path.")
        return 1

    n = export_events_to_ics(events, out_path)
    console.print(f"Exported {n} events to: {escape(out_path)}")
    return 0


def _cmd_pdf(args: argparse.Namespace) -> int:
    try:
        text = extract_pdf_text(Path(args.file), endpoint=args.endpoint)
    except (OSError, requests.RequestException, PdfExtractionError) as exc:
        console.print(f"PDF extraction failed: {escape(str(exc))}")
        return 1

    console.print(text, markup=False, highlight=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="schedplanner", description="SchedPlanner CLI")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output (every skipped row)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_load = sub.add_parser("load", help="Load a schedule file and show the agenda")
    p_load.add_argument("file", type=str, help="Schedule file (.csv, .xlsx)")
    p_load.add_argument("--group", type=str, default=ALL_GROUPS, help="Only show this learner group (e.g. B1)")

    p_groups = sub.add_parser("groups", help="List learner groups found in a schedule file")
    p_groups.add_argument("file", type=str, help="Schedule file (.csv, .xlsx)")

    p_export = sub.add_parser("export", help="Export schedule events to .ics")
    p_export.add_argument("file", type=str, help="Schedule file (.csv, .xlsx)")
    p_export.add_argument("out", type=str, help="Output file path (e.g. out.ics)")
    p_export.add_argument("--group", type=str, default=ALL_GROUPS, help="Only export this learner group")

    p_pdf = sub.add_parser("pdf", help="Extract text from a PDF via the extraction service")
    p_pdf.add_argument("file", type=str, help="PDF file")
    p_pdf.add_argument("--endpoint", type=str, default=None, help="Extraction endpoint URL")

    p_inter = sub.add_parser("interactive", help="Interactive menu mode")
    p_inter.add_argument("file", type=str, nargs="?", default=None, help="Schedule file to load first")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "load":
        raise SystemExit(_cmd_load(args))
    if args.command == "groups":
        raise SystemExit(_cmd_groups(args))
    if args.command == "export":
        raise SystemExit(_cmd_export(args))
    if args.command == "pdf":
        raise SystemExit(_cmd_pdf(args))

    if args.command == "interactive":
        run_interactive(initial_file=args.file)
        raise SystemExit(0)

    raise SystemExit(2)
