# slotwise/services/booking_transaction.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.exceptions import ConflictError, NotFoundError, SchedulingValidationError
from slotwise.core.timeutils import as_utc, get_zone, to_db
from slotwise.models.booking import Booking
from slotwise.models.user import User
from slotwise.schemas.booking import BookingCreate, BookingStatus
from slotwise.services.booking_side_effects import (
    after_booking_cancelled,
    after_booking_created,
    after_booking_rescheduled,
)
from slotwise.services.busy_aggregator import confirmed_bookings_between
from slotwise.services.calendar_client import CalendarClientFactory, build_calendar_client
from slotwise.services.event_types import get_bookable_event_type

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Time slot is no longer available."


async def _lock_host(db: AsyncSession, user_id: int) -> None:
    """
    Take the per-host write lock for the rest of the current transaction.

    Every booking write bumps `users.booking_sequence`; the row lock this
    UPDATE acquires makes concurrent writers for the same host queue up, so
    the overlap check below always sees the latest committed bookings.
    """
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(booking_sequence=User.booking_sequence + 1)
        .execution_options(synchronize_session=False)
    )


async def _ensure_slot_free(
    db: AsyncSession,
    user_id: int,
    start: datetime,
    end: datetime,
    exclude_booking_id: int | None = None,
) -> None:
    clashes = await confirmed_bookings_between(
        db, user_id, start, end, exclude_booking_id=exclude_booking_id
    )
    if clashes:
        raise ConflictError(SLOT_TAKEN_MESSAGE)


async def _reload(db: AsyncSession, booking: Booking) -> None:
    """
    Pick up what the post-commit work wrote (external_event_id). The booking
    is already committed, so a failed reload is logged and not raised.
    """
    try:
        await db.refresh(booking)
    except Exception:
        booking_id = inspect(booking).identity[0]
        logger.warning("Could not reload booking_id=%s", booking_id, exc_info=True)


def _require_future(start: datetime, now: datetime) -> None:
    if as_utc(start) <= as_utc(now):
        raise SchedulingValidationError("Booking start time must be in the future.")


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found.")
    return booking


async def list_host_bookings(
    db: AsyncSession,
    user_id: int,
    status: BookingStatus = BookingStatus.CONFIRMED,
    upcoming: bool = False,
    now: datetime | None = None,
) -> list[Booking]:
    stmt = select(Booking).where(
        Booking.user_id == user_id,
        Booking.status == status.value,
    )
    if upcoming and now is not None:
        stmt = stmt.where(Booking.start_time >= to_db(now))

    result = await db.execute(stmt.order_by(Booking.start_time.asc()))
    return list(result.scalars().all())


async def create_booking(
    db: AsyncSession,
    payload: BookingCreate,
    now: datetime,
    calendar_client_factory: CalendarClientFactory | None = build_calendar_client,
) -> Booking:
    """
    Book one slot of an event type.

    Steps
    -----
    1) Event type must exist and be active (NotFoundError otherwise).
    2) Start must be strictly after `now` (SchedulingValidationError).
    3) In one transaction: lock the host, re-check the slot against the
       host's confirmed bookings with the exclusive overlap test, then
       insert the booking as `confirmed` and commit. A clash raises
       ConflictError and nothing is written.
    4) After the commit: calendar event and emails, best effort.

    The re-check inside the lock is what prevents double booking; whatever
    the caller saw in an earlier slot query is not trusted.
    """
    get_zone(payload.timezone)

    try:
        event_type = await get_bookable_event_type(db, payload.event_type_id)
        start = as_utc(payload.start_time)
        _require_future(start, now)
        end = start + timedelta(minutes=event_type.duration_minutes)

        await _lock_host(db, event_type.user_id)
        await _ensure_slot_free(db, event_type.user_id, start, end)

        booking = Booking(
            event_type_id=event_type.id,
            user_id=event_type.user_id,
            attendee_name=payload.attendee_name,
            attendee_email=payload.attendee_email,
            attendee_notes=payload.attendee_notes,
            start_time=to_db(start),
            end_time=to_db(end),
            timezone=payload.timezone,
            status=BookingStatus.CONFIRMED.value,
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Booking created booking_id=%s user_id=%s event_type_id=%s start=%s",
        booking.id,
        booking.user_id,
        booking.event_type_id,
        start.isoformat(),
    )

    await after_booking_created(db, booking.id, calendar_client_factory)
    await _reload(db, booking)
    return booking


async def cancel_booking(
    db: AsyncSession,
    booking_id: int,
    reason: str | None = None,
    calendar_client_factory: CalendarClientFactory | None = build_calendar_client,
) -> Booking:
    """
    Move a booking from `confirmed` to `cancelled`, recording the reason.

    The transition is a conditional UPDATE, so two concurrent cancels
    cannot both succeed: the loser sees zero affected rows and gets a
    ConflictError. An unknown id is a NotFoundError.
    """
    try:
        result = await db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
            .values(
                status=BookingStatus.CANCELLED.value,
                cancellation_reason=reason,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            exists = await db.execute(select(Booking.id).where(Booking.id == booking_id))
            if exists.first() is None:
                raise NotFoundError("Booking not found.")
            raise ConflictError("Booking already cancelled.")
        booking = await get_booking(db, booking_id)
        await db.refresh(booking)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Booking cancelled booking_id=%s", booking_id)

    await after_booking_cancelled(db, booking_id, reason, calendar_client_factory)
    await _reload(db, booking)
    return booking


async def reschedule_booking(
    db: AsyncSession,
    booking_id: int,
    new_start: datetime,
    now: datetime,
    timezone_name: str | None = None,
    reason: str | None = None,
    calendar_client_factory: CalendarClientFactory | None = build_calendar_client,
) -> Booking:
    """
    Move a confirmed booking to a new start time atomically.

    The old booking is cancelled and its replacement inserted in the same
    transaction, under the same host lock as `create_booking`. Either both
    changes land or neither does, so the attendee never ends up with zero
    (or two) confirmed meetings. The old booking does not count as busy
    for its own replacement.
    """
    if timezone_name is not None:
        get_zone(timezone_name)

    try:
        old = await get_booking(db, booking_id)
        if old.status != BookingStatus.CONFIRMED.value:
            raise ConflictError("Booking already cancelled.")

        event_type = await get_bookable_event_type(db, old.event_type_id)
        start = as_utc(new_start)
        _require_future(start, now)
        end = start + timedelta(minutes=event_type.duration_minutes)

        await _lock_host(db, old.user_id)
        await _ensure_slot_free(db, old.user_id, start, end, exclude_booking_id=old.id)

        # Re-read under the lock; a concurrent cancel may have won.
        await db.refresh(old)
        if old.status != BookingStatus.CONFIRMED.value:
            raise ConflictError("Booking already cancelled.")

        old.status = BookingStatus.CANCELLED.value
        old.cancellation_reason = reason or "Rescheduled"

        replacement = Booking(
            event_type_id=old.event_type_id,
            user_id=old.user_id,
            attendee_name=old.attendee_name,
            attendee_email=old.attendee_email,
            attendee_notes=old.attendee_notes,
            start_time=to_db(start),
            end_time=to_db(end),
            timezone=timezone_name or old.timezone,
            status=BookingStatus.CONFIRMED.value,
            rescheduled_from_id=old.id,
        )
        db.add(replacement)
        await db.flush()
        await db.refresh(replacement)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Booking rescheduled booking_id=%s -> booking_id=%s start=%s",
        booking_id,
        replacement.id,
        start.isoformat(),
    )

    await after_booking_rescheduled(db, booking_id, replacement.id, calendar_client_factory)
    await _reload(db, replacement)
    return replacement
