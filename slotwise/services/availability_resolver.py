# slotwise/services/availability_resolver.py
from __future__ import annotations

from datetime import date as date_type, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.timeutils import as_utc, get_zone
from slotwise.models.availability_rule import AvailabilityRule
from slotwise.models.date_override import DateOverride
from slotwise.models.user import User
from slotwise.schemas.slot import TimeSlot
from slotwise.services.busy_aggregator import collect_busy
from slotwise.services.calendar_client import CalendarClientFactory, build_calendar_client
from slotwise.services.event_types import get_bookable_event_type
from slotwise.services.overlap import overlaps_any
from slotwise.services.slot_generator import (
    CandidateSlot,
    OpenInterval,
    generate_slots,
    weekday_index,
)


async def get_override_for_date(
    db: AsyncSession,
    user_id: int,
    day: date_type,
) -> DateOverride | None:
    result = await db.execute(
        select(DateOverride).where(
            DateOverride.user_id == user_id,
            DateOverride.date == day,
        )
    )
    return result.scalar_one_or_none()


async def get_rules_for_weekday(
    db: AsyncSession,
    user_id: int,
    day_of_week: int,
) -> list[AvailabilityRule]:
    result = await db.execute(
        select(AvailabilityRule)
        .where(
            AvailabilityRule.user_id == user_id,
            AvailabilityRule.day_of_week == day_of_week,
        )
        .order_by(AvailabilityRule.start_time.asc())
    )
    return list(result.scalars().all())


def _override_interval(override: DateOverride, host: User) -> OpenInterval | None:
    if override.start_time is None or override.end_time is None:
        return None
    return OpenInterval(
        start=override.start_time,
        end=override.end_time,
        timezone=host.timezone,
    )


async def open_intervals_for_day(
    db: AsyncSession,
    host: User,
    day: date_type,
) -> list[OpenInterval]:
    """
    Decide which opening hours apply to `day` for `host`.

    Rules
    -----
    1) Blocking override (is_available = False)  => no hours at all.
    2) Override with custom hours                => those hours only, in the
       host's timezone.
    3) Otherwise                                 => every weekly rule for the
       weekday, each in its own declared timezone.
    4) Nothing applies                           => closed.
    """
    override = await get_override_for_date(db, host.id, day)
    if override is not None:
        if not override.is_available:
            return []
        custom = _override_interval(override, host)
        if custom is not None:
            return [custom]

    rules = await get_rules_for_weekday(db, host.id, weekday_index(day))
    return [
        OpenInterval(start=rule.start_time, end=rule.end_time, timezone=rule.timezone)
        for rule in rules
    ]


def _merge_candidates(groups: list[list[CandidateSlot]]) -> list[CandidateSlot]:
    by_start: dict[datetime, CandidateSlot] = {}
    for group in groups:
        for slot in group:
            by_start.setdefault(slot.start, slot)
    return [by_start[start] for start in sorted(by_start)]


async def resolve_slots(
    db: AsyncSession,
    event_type_id: int,
    day: date_type,
    viewer_timezone: str,
    now: datetime,
    calendar_client_factory: CalendarClientFactory | None = build_calendar_client,
) -> list[TimeSlot]:
    """
    Compute the bookable slots of an event type on `day`.

    Steps
    -----
    1) Load the event type; missing or inactive => NotFoundError.
    2) A blocking date override short-circuits to [].
    3) Pick override hours or weekly rules; none => [].
    4) Tile the hours with slots of the event type's duration.
    5) Mark each slot unavailable if it overlaps (exclusively) any busy
       interval from bookings or the connected calendar.
    6) Drop every slot whose start is not strictly after `now`.
    7) Return the rest in chronological order.

    `viewer_timezone` only affects how the caller renders the result; it is
    validated here so a bad zone fails before any lookup. Opening hours are
    always evaluated in the host-side timezone.
    """
    get_zone(viewer_timezone)
    now_utc = as_utc(now)

    event_type = await get_bookable_event_type(db, event_type_id)
    host = await db.get(User, event_type.user_id)

    intervals = await open_intervals_for_day(db, host, day)
    if not intervals:
        return []

    candidates = _merge_candidates(
        [generate_slots(day, event_type.duration_minutes, interval) for interval in intervals]
    )
    if not candidates:
        return []

    window_start = candidates[0].start
    window_end = max(slot.end for slot in candidates)
    busy = await collect_busy(
        db,
        host.id,
        window_start,
        window_end,
        calendar_client_factory=calendar_client_factory,
    )

    return [
        TimeSlot(
            start=slot.start,
            end=slot.end,
            available=not overlaps_any(slot.start, slot.end, busy),
        )
        for slot in candidates
        if slot.start > now_utc
    ]
