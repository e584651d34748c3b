# slotwise/services/busy_aggregator.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.timeutils import as_utc, to_db
from slotwise.models.booking import Booking
from slotwise.models.calendar_connection import CalendarConnection
from slotwise.services.calendar_client import CalendarClientFactory, build_calendar_client
from slotwise.services.overlap import BusyInterval

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"


async def confirmed_bookings_between(
    db: AsyncSession,
    user_id: int,
    window_start: datetime,
    window_end: datetime,
    exclude_booking_id: int | None = None,
) -> list[Booking]:
    """
    Return the host's confirmed bookings whose [start, end) intersects
    [window_start, window_end) under the exclusive overlap test.
    """
    stmt = select(Booking).where(
        Booking.user_id == user_id,
        Booking.status == CONFIRMED,
        Booking.start_time < to_db(window_end),
        Booking.end_time > to_db(window_start),
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(Booking.id != exclude_booking_id)

    result = await db.execute(stmt.order_by(Booking.start_time.asc()))
    return list(result.scalars().all())


async def get_active_connection(db: AsyncSession, user_id: int) -> CalendarConnection | None:
    result = await db.execute(
        select(CalendarConnection).where(
            CalendarConnection.user_id == user_id,
            CalendarConnection.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def collect_busy(
    db: AsyncSession,
    user_id: int,
    day_start: datetime,
    day_end: datetime,
    calendar_client_factory: CalendarClientFactory | None = build_calendar_client,
) -> list[BusyInterval]:
    """
    Gather everything that makes the host busy within [day_start, day_end).

    Sources
    -------
    1) Confirmed bookings in the system of record (always).
    2) Free/busy intervals from the host's connected calendar, if any.

    The external source is best-effort: any failure (misconfiguration,
    token refresh, timeout, bad payload) is logged and contributes no
    intervals. It never aborts slot computation.
    """
    bookings = await confirmed_bookings_between(db, user_id, day_start, day_end)
    busy = [
        BusyInterval(start=as_utc(b.start_time), end=as_utc(b.end_time), source="booking")
        for b in bookings
    ]

    if calendar_client_factory is None:
        return busy

    connection = await get_active_connection(db, user_id)
    if connection is None:
        return busy

    try:
        client = calendar_client_factory(connection)
        external = await client.get_busy_intervals(day_start, day_end)
    except Exception as exc:
        logger.warning(
            "External calendar busy lookup failed for user_id=%s; "
            "continuing with internal bookings only: %s",
            user_id,
            exc,
        )
        return busy

    busy.extend(external)
    return busy
