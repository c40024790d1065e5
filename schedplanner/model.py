"""
Central data model definitions used across the project.

This module defines the canonical structure of TimeOfDay and EventRecord
objects so that:
- the parser, the store and the renderers share the same field names
- records stay immutable (edits replace a whole record, never patch one)
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeOfDay:
    """
    Wall-clock time produced by the time parser (hours 0..23, minutes 0..59).
    """

    hours: int
    minutes: int


@dataclass(frozen=True)
class EventRecord:
    """
    Represents one calendar event built from one schedule row.

    start/end are naive local datetimes; end is always after start once the
    record leaves the normalizer.
    """

    title: str
    start: datetime
    end: datetime
    description: str
    location: str
    learner_group: str
