import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from schedplanner.export_ics import export_events_to_ics
from schedplanner.model import EventRecord


class TestExportICS(unittest.TestCase):
    def test_export_creates_file_and_contains_calendar(self) -> None:
        events = [
            EventRecord(
                title="Public Economics",
                start=datetime(2026, 2, 19, 10, 15),
                end=datetime(2026, 2, 19, 12, 0),
                description="Economics - Lecture",
                location="HS 8",
                learner_group="B1",
            )
        ]

        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "out.ics"
            n = export_events_to_ics(events, out)
            self.assertEqual(n, 1)
            text = out.read_text(encoding="utf-8")
            self.assertIn("BEGIN:VCALENDAR", text)
            self.assertIn("BEGIN:VEVENT", text)
            self.assertIn("SUMMARY:Public Economics", text)
            self.assertIn("DTSTART:20260219T101500", text)
            self.assertIn("DTEND:20260219T120000", text)
            self.assertIn("DESCRIPTION:Economics - Lecture", text)
            self.assertIn("CATEGORIES:B1", text)

    def test_escaping_and_stable_uid(self) -> None:
        ev = EventRecord(
            title="Lab; part 1, intro",
            start=datetime(2026, 2, 19, 8, 0),
            end=datetime(2026, 2, 19, 9, 0),
            description="",
            location="Unknown Location",
            learner_group="Ungrouped",
        )

        with tempfile.TemporaryDirectory() as d:
            first = Path(d) / "a.ics"
            second = Path(d) / "b.ics"
            export_events_to_ics([ev], first)
            export_events_to_ics([ev], second)
            a = first.read_text(encoding="utf-8")
            b = second.read_text(encoding="utf-8")

        self.assertIn(r"SUMMARY:Lab\; part 1\, intro", a)
        self.assertNotIn("CATEGORIES", a)
        uid_a = [line for line in a.splitlines() if line.startswith("UID:")]
        uid_b = [line for line in b.splitlines() if line.startswith("UID:")]
        self.assertEqual(uid_a, uid_b)

    def test_identical_events_get_distinct_uids(self) -> None:
        ev = EventRecord(
            title="Intro",
            start=datetime(2026, 2, 19, 9, 0),
            end=datetime(2026, 2, 19, 10, 0),
            description="",
            location="Unknown Location",
            learner_group="A1",
        )
        twin = EventRecord(
            title="Intro",
            start=datetime(2026, 2, 19, 9, 0),
            end=datetime(2026, 2, 19, 10, 0),
            description="Other section",
            location="Unknown Location",
            learner_group="A1",
        )

        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "out.ics"
            n = export_events_to_ics([ev, ev, twin], out)
            text = out.read_text(encoding="utf-8")

        self.assertEqual(n, 3)
        uids = [line for line in text.splitlines() if line.startswith("UID:")]
        self.assertEqual(len(uids), 3)
        self.assertEqual(len(set(uids)), 3)


if __name__ == "__main__":
    unittest.main()
