"""
Tests for CLI entry points.

These tests focus on:
- exit codes (0 = ok, 1 = file-level failure)
- the status line printed after loading
- export writing an .ics file for the loaded (and filtered) events
"""

import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from schedplanner.cli import main
from schedplanner.config import log_level_name

CSV = (
    "Section Date,Start Time,End Time,Session Name,Learner Group\n"
    "20240115,09:00,10:00,Intro,A1\n"
    "20240115,11:00,12:00,Lab,B2\n"
    "TBD,09:00,10:00,Broken,A1\n"
)


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.dir = Path(self._tmp.name)
        self.csv_path = self.dir / "schedule.csv"
        self.csv_path.write_text(CSV, encoding="utf-8")

    def test_load_ok(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["load", str(self.csv_path)])
        self.assertEqual(ctx.exception.code, 0)

    def test_load_missing_columns_fails(self) -> None:
        bad = self.dir / "bad.csv"
        bad.write_text("Section Date,End Time\n20240115,10:00\n", encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            main(["load", str(bad)])
        self.assertEqual(ctx.exception.code, 1)

    def test_load_prints_status_line(self) -> None:
        out = io.StringIO()
        with mock.patch("schedplanner.cli.console", Console(file=out, width=200)):
            with self.assertRaises(SystemExit) as ctx:
                main(["load", str(self.csv_path)])
        self.assertEqual(ctx.exception.code, 0)

        text = out.getvalue()
        self.assertIn("Loaded 2 valid events from CSV (skipped rows: 1)", text)
        self.assertIn("Intro", text)
        self.assertIn("Lab", text)

    def test_load_damaged_workbook_reports_error(self) -> None:
        bad = self.dir / "bad.xlsx"
        bad.write_bytes(b"PK\x03\x04 truncated")
        out = io.StringIO()
        with mock.patch("schedplanner.cli.console", Console(file=out, width=200)):
            with self.assertRaises(SystemExit) as ctx:
                main(["load", str(bad)])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Error: Invalid Excel file structure", out.getvalue())

    def test_unknown_log_level_falls_back(self) -> None:
        with mock.patch.dict(os.environ, {"SCHEDPLANNER_LOG_LEVEL": "verbose"}):
            self.assertEqual(log_level_name(), "WARNING")
            with self.assertRaises(SystemExit) as ctx:
                main(["load", str(self.csv_path)])
        self.assertEqual(ctx.exception.code, 0)

    def test_known_log_level_is_used(self) -> None:
        with mock.patch.dict(os.environ, {"SCHEDPLANNER_LOG_LEVEL": "debug"}):
            self.assertEqual(log_level_name(), "DEBUG")

    def test_groups(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["groups", str(self.csv_path)])
        self.assertEqual(ctx.exception.code, 0)

    def test_export_filtered_group(self) -> None:
        out = self.dir / "out.ics"
        with self.assertRaises(SystemExit) as ctx:
            main(["export", str(self.csv_path), str(out), "--group", "B2"])
        self.assertEqual(ctx.exception.code, 0)

        text = out.read_text(encoding="utf-8")
        self.assertEqual(text.count("BEGIN:VEVENT"), 1)
        self.assertIn("SUMMARY:Lab", text)

    def test_unknown_command_exits_nonzero(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["frobnicate"])
        self.assertNotEqual(ctx.exception.code, 0)


if __name__ == "__main__":
    unittest.main()
