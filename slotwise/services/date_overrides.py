# slotwise/services/date_overrides.py
from __future__ import annotations

import logging
from datetime import date as date_type, datetime, time, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.exceptions import NotFoundError, SchedulingValidationError
from slotwise.core.timeutils import get_zone
from slotwise.models.booking import Booking
from slotwise.models.date_override import DateOverride
from slotwise.models.user import User
from slotwise.schemas.date_override import DateOverrideCreate, DateOverrideUpdate
from slotwise.services.busy_aggregator import confirmed_bookings_between

logger = logging.getLogger(__name__)


def expand_date_range(start_date: date_type, end_date: date_type) -> list[date_type]:
    """
    Every calendar day from start_date to end_date, both inclusive.
    """
    if end_date < start_date:
        raise SchedulingValidationError("End date must be on or after start date.")
    return [start_date + timedelta(days=offset) for offset in range((end_date - start_date).days + 1)]


def _host_day_bounds(host: User, first: date_type, last: date_type) -> tuple[datetime, datetime]:
    zone = get_zone(host.timezone)
    start = datetime.combine(first, time.min, tzinfo=zone)
    end = datetime.combine(last + timedelta(days=1), time.min, tzinfo=zone)
    return start, end


async def list_overrides(
    db: AsyncSession,
    user_id: int,
    start_date: date_type | None = None,
    end_date: date_type | None = None,
) -> list[DateOverride]:
    stmt = select(DateOverride).where(DateOverride.user_id == user_id)
    if start_date is not None:
        stmt = stmt.where(DateOverride.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(DateOverride.date <= end_date)

    result = await db.execute(stmt.order_by(DateOverride.date.asc()))
    return list(result.scalars().all())


async def create_overrides(
    db: AsyncSession,
    host: User,
    payload: DateOverrideCreate,
    today: date_type,
) -> tuple[list[DateOverride], list[Booking]]:
    """
    Create or replace overrides for a single date or an inclusive range.

    Behavior
    --------
    - Single date: upsert by (user, date); custom hours are optional.
    - Range: one override per day; existing overrides on those days are
      replaced in the same transaction.
    - Dates before `today` (host timezone) are rejected.

    Returns the stored overrides plus the confirmed bookings that fall on
    the affected dates, so the caller can warn the host. Those bookings are
    left untouched.
    """
    if payload.is_range:
        dates = expand_date_range(payload.start_date, payload.end_date)
        if dates[-1] < today:
            raise SchedulingValidationError("Cannot set date overrides in the past.")
        dates = [d for d in dates if d >= today]
    else:
        if payload.date < today:
            raise SchedulingValidationError("Cannot set date override in the past.")
        dates = [payload.date]

    await db.execute(
        delete(DateOverride).where(
            DateOverride.user_id == host.id,
            DateOverride.date.in_(dates),
        )
    )
    overrides = [
        DateOverride(
            user_id=host.id,
            date=day,
            is_available=payload.is_available,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
        for day in dates
    ]
    db.add_all(overrides)

    window_start, window_end = _host_day_bounds(host, dates[0], dates[-1])
    affected = await confirmed_bookings_between(db, host.id, window_start, window_end)

    await db.commit()

    logger.info(
        "Stored %d date override(s) for user_id=%s (%s..%s, available=%s)",
        len(overrides),
        host.id,
        dates[0],
        dates[-1],
        payload.is_available,
    )
    return overrides, affected


async def get_owned_override(db: AsyncSession, user_id: int, override_id: int) -> DateOverride:
    override = await db.get(DateOverride, override_id)
    if override is None or override.user_id != user_id:
        raise NotFoundError("Date override not found.")
    return override


async def update_override(
    db: AsyncSession,
    user_id: int,
    override_id: int,
    payload: DateOverrideUpdate,
) -> DateOverride:
    override = await get_owned_override(db, user_id, override_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("is_available", True) is None:
        del changes["is_available"]

    start = changes.get("start_time", override.start_time)
    end = changes.get("end_time", override.end_time)
    if (start is None) != (end is None):
        raise SchedulingValidationError("start_time and end_time must be provided together.")
    if start is not None and start >= end:
        raise SchedulingValidationError("start_time must be before end_time.")

    for field, value in changes.items():
        setattr(override, field, value)

    await db.commit()
    await db.refresh(override)
    return override


async def delete_override(db: AsyncSession, user_id: int, override_id: int) -> None:
    override = await get_owned_override(db, user_id, override_id)
    await db.delete(override)
    await db.commit()
