"""
Unit tests for the in-memory event store.

Store contract:
- every operation returns a new AppState, the old one is untouched
- add/update reject events whose end is not after their start
- update/delete target one record by identity
"""

import unittest
from datetime import datetime

from schedplanner.errors import InvalidEventError
from schedplanner.model import EventRecord
from schedplanner.normalize import LoadResult
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


def _event(title: str, start_h: int, end_h: int, group: str = "Ungrouped", day: int = 15) -> EventRecord:
    return EventRecord(
        title=title,
        start=datetime(2024, 1, day, start_h, 0),
        end=datetime(2024, 1, day, end_h, 0),
        description="",
        location="Room 1",
        learner_group=group,
    )


class TestStoreEdits(unittest.TestCase):
    def test_add_valid_event(self) -> None:
        state = AppState()
        new_state = add_event(state, _event("A", 9, 10))
        self.assertEqual(len(new_state.events), 1)
        self.assertEqual(len(state.events), 0)

    def test_add_rejects_end_not_after_start(self) -> None:
        state = AppState()
        with self.assertRaises(InvalidEventError):
            add_event(state, _event("A", 10, 10))
        with self.assertRaises(InvalidEventError):
            add_event(state, _event("A", 11, 10))

    def test_update_replaces_only_the_target(self) -> None:
        a = _event("Same", 9, 10)
        b = _event("Same", 9, 10)
        state = AppState(events=(a, b))
        edited = _event("Edited", 12, 13)

        new_state = update_event(state, b, edited)

        self.assertIs(new_state.events[0], a)
        self.assertIs(new_state.events[1], edited)

    def test_update_rejects_invalid_replacement(self) -> None:
        a = _event("A", 9, 10)
        state = AppState(events=(a,))
        with self.assertRaises(InvalidEventError):
            update_event(state, a, _event("A", 10, 9))

    def test_delete(self) -> None:
        a = _event("A", 9, 10)
        b = _event("B", 11, 12)
        state = delete_event(AppState(events=(a, b)), a)
        self.assertEqual(state.events, (b,))


class TestStoreUploadAndGroups(unittest.TestCase):
    def test_replace_events_swaps_whole_set(self) -> None:
        old = AppState(events=(_event("Old", 9, 10, "A1"),), selected_group="A1")
        result = LoadResult(source="CSV", events=[_event("New", 9, 10, "B1")])

        state = replace_events(old, result)

        self.assertEqual([ev.title for ev in state.events], ["New"])
        self.assertEqual(state.selected_group, "All Groups")
        self.assertEqual(state.status, "Loaded 1 valid events from CSV")

    def test_visible_events_filtered_and_sorted(self) -> None:
        state = AppState(
            events=(
                _event("late", 14, 15, "A1"),
                _event("other", 9, 10, "B1"),
                _event("early", 8, 9, "A1"),
            )
        )
        state = select_group(state, "A1")
        self.assertEqual([ev.title for ev in visible_events(state)], ["early", "late"])

    def test_select_unknown_group(self) -> None:
        with self.assertRaises(ValueError):
            select_group(AppState(), "Z9")


class TestSlots(unittest.TestCase):
    def test_default_slot_is_one_hour(self) -> None:
        start, end = default_slot(datetime(2024, 1, 15, 9, 40))
        self.assertEqual(start, datetime(2024, 1, 15, 9, 0))
        self.assertEqual(end, datetime(2024, 1, 15, 10, 0))

    def test_default_slot_stays_on_same_day(self) -> None:
        start, end = default_slot(datetime(2024, 1, 15, 23, 30))
        self.assertEqual(start, datetime(2024, 1, 15, 23, 0))
        self.assertEqual(end.date(), start.date())
        self.assertGreater(end, start)

    def test_spans_multiple_days(self) -> None:
        ev = EventRecord("x", datetime(2024, 1, 15, 23), datetime(2024, 1, 16, 1), "", "", "Ungrouped")
        self.assertTrue(spans_multiple_days(ev))
        self.assertFalse(spans_multiple_days(_event("y", 9, 10)))


if __name__ == "__main__":
    unittest.main()
