# slotwise/services/overlap.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class BusyInterval:
    """
    Half-open [start, end) range during which a host cannot take a meeting.

    `source` is "booking" for confirmed bookings and "external" for
    free/busy data from a connected calendar.
    """

    start: datetime
    end: datetime
    source: str = "booking"


def intervals_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """
    Exclusive overlap test for half-open intervals.

    Intervals that merely touch (end_a == start_b or end_b == start_a)
    do NOT overlap.
    """
    return start_a < end_b and start_b < end_a


def overlaps_any(
    start: datetime,
    end: datetime,
    busy: list[BusyInterval],
) -> bool:
    return any(intervals_overlap(start, end, b.start, b.end) for b in busy)
