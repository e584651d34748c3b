# slotwise/services/slot_generator.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type, datetime, time, timedelta, timezone

from slotwise.core.timeutils import get_zone


@dataclass(frozen=True)
class OpenInterval:
    """
    Wall-clock opening hours for one day, anchored in `timezone`.
    """

    start: time
    end: time
    timezone: str = "UTC"


@dataclass(frozen=True)
class CandidateSlot:
    """
    A fixed-length [start, end) window, as aware UTC instants.
    """

    start: datetime
    end: datetime


def weekday_index(day: date_type) -> int:
    """
    Map a date to the rule weekday convention: 0=Sunday .. 6=Saturday.
    """
    return (day.weekday() + 1) % 7


def generate_slots(
    day: date_type,
    duration_minutes: int,
    open_interval: OpenInterval | None,
) -> list[CandidateSlot]:
    """
    Tile `open_interval` on `day` with back-to-back slots of
    `duration_minutes`.

    Rules
    -----
    - Tiling starts exactly at the interval start.
    - A trailing partial slot that would run past the interval end is
      dropped (never clipped), so every slot is exactly `duration_minutes`.
    - No interval, a non-positive duration, or start >= end yields [].

    Pure function: no I/O and no clock access.
    """
    if open_interval is None or duration_minutes <= 0:
        return []
    if open_interval.start >= open_interval.end:
        return []

    zone = get_zone(open_interval.timezone)
    window_start = datetime.combine(day, open_interval.start, tzinfo=zone).astimezone(timezone.utc)
    window_end = datetime.combine(day, open_interval.end, tzinfo=zone).astimezone(timezone.utc)
    step = timedelta(minutes=duration_minutes)

    slots: list[CandidateSlot] = []
    current = window_start
    while current + step <= window_end:
        slots.append(CandidateSlot(start=current, end=current + step))
        current += step

    return slots
