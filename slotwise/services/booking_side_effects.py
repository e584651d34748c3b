# slotwise/services/booking_side_effects.py
from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.models.booking import Booking
from slotwise.models.event_type import EventType
from slotwise.models.user import User
from slotwise.services import email_notifier
from slotwise.services.busy_aggregator import get_active_connection
from slotwise.services.calendar_client import CalendarClientFactory
from slotwise.services.email_notifier import BookingEmailContext

logger = logging.getLogger(__name__)


async def _load_booking(
    db: AsyncSession,
    booking_id: int,
) -> tuple[Booking, EventType, User] | None:
    result = await db.execute(
        select(Booking, EventType, User)
        .join(EventType, Booking.event_type_id == EventType.id)
        .join(User, Booking.user_id == User.id)
        .where(Booking.id == booking_id)
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1], row[2]


def _email_context(booking: Booking, event_type: EventType, host: User) -> BookingEmailContext:
    return BookingEmailContext(
        booking_id=booking.id,
        event_name=event_type.name,
        duration_minutes=event_type.duration_minutes,
        start_time=booking.start_time,
        timezone=booking.timezone,
        attendee_name=booking.attendee_name,
        attendee_email=booking.attendee_email,
        host_name=host.name,
        host_email=host.email,
        attendee_notes=booking.attendee_notes,
        location=event_type.location,
        meeting_link=event_type.meeting_link,
    )


def _event_description(booking: Booking) -> str:
    description = f"Meeting with {booking.attendee_name} ({booking.attendee_email})"
    if booking.attendee_notes:
        description += f"\n\nNotes: {booking.attendee_notes}"
    return description + f"\n\nBooking ID: {booking.id}"


async def create_calendar_event(
    db: AsyncSession,
    booking: Booking,
    event_type: EventType,
    calendar_client_factory: CalendarClientFactory | None,
) -> None:
    """
    Mirror the booking into the host's connected calendar and remember the
    external event id. Failures are logged and otherwise ignored.
    """
    if calendar_client_factory is None:
        return

    booking_id = booking.id
    try:
        connection = await get_active_connection(db, booking.user_id)
        if connection is None:
            return

        client = calendar_client_factory(connection)
        event_id = await client.create_event(
            summary=f"{event_type.name} with {booking.attendee_name}",
            description=_event_description(booking),
            start=booking.start_time,
            end=booking.end_time,
            attendee_email=booking.attendee_email,
            timezone_name=booking.timezone,
        )
        if event_id:
            booking.external_event_id = event_id
            await db.commit()
    except Exception:
        await db.rollback()
        logger.warning(
            "Failed to create calendar event for booking_id=%s", booking_id, exc_info=True
        )


async def delete_calendar_event(
    db: AsyncSession,
    booking: Booking,
    calendar_client_factory: CalendarClientFactory | None,
) -> None:
    if calendar_client_factory is None or not booking.external_event_id:
        return

    try:
        connection = await get_active_connection(db, booking.user_id)
        if connection is None:
            return
        client = calendar_client_factory(connection)
        await client.delete_event(booking.external_event_id)
    except Exception:
        logger.warning(
            "Failed to delete calendar event %s for booking_id=%s",
            booking.external_event_id,
            booking.id,
            exc_info=True,
        )


async def _send_quietly(description: str, func, *args) -> None:
    try:
        await run_in_threadpool(func, *args)
    except Exception:
        logger.exception("Unexpected error while sending %s", description)


async def _abandon(db: AsyncSession, booking_id: int, step: str) -> None:
    logger.exception("Post-commit %s failed for booking_id=%s", step, booking_id)
    try:
        await db.rollback()
    except Exception:
        logger.warning("Rollback after failed %s also failed", step, exc_info=True)


async def after_booking_created(
    db: AsyncSession,
    booking_id: int,
    calendar_client_factory: CalendarClientFactory | None,
) -> None:
    """
    Post-commit work for a new booking:
    1) create the host's calendar event (stores external_event_id);
    2) confirmation email to the attendee;
    3) notification email to the host.

    Nothing here can fail the booking: it is already committed.
    """
    try:
        loaded = await _load_booking(db, booking_id)
        if loaded is None:
            return
        booking, event_type, host = loaded
        ctx = _email_context(booking, event_type, host)

        await create_calendar_event(db, booking, event_type, calendar_client_factory)
    except Exception:
        await _abandon(db, booking_id, "booking setup")
        return

    await _send_quietly("booking confirmation", email_notifier.send_booking_confirmation, ctx)
    await _send_quietly("host notification", email_notifier.send_host_notification, ctx)


async def after_booking_cancelled(
    db: AsyncSession,
    booking_id: int,
    reason: str | None,
    calendar_client_factory: CalendarClientFactory | None,
) -> None:
    try:
        loaded = await _load_booking(db, booking_id)
        if loaded is None:
            return
        booking, event_type, host = loaded
        ctx = _email_context(booking, event_type, host)

        await delete_calendar_event(db, booking, calendar_client_factory)
    except Exception:
        await _abandon(db, booking_id, "cancellation cleanup")
        return

    await _send_quietly(
        "cancellation email", email_notifier.send_cancellation_email, ctx, reason
    )


async def after_booking_rescheduled(
    db: AsyncSession,
    old_booking_id: int,
    new_booking_id: int,
    calendar_client_factory: CalendarClientFactory | None,
) -> None:
    """
    The old calendar event is removed and the new booking goes through the
    regular creation side effects. The attendee gets one confirmation for
    the new time rather than a cancellation plus a confirmation.
    """
    try:
        loaded = await _load_booking(db, old_booking_id)
        if loaded is not None:
            await delete_calendar_event(db, loaded[0], calendar_client_factory)
    except Exception:
        await _abandon(db, old_booking_id, "calendar cleanup")

    await after_booking_created(db, new_booking_id, calendar_client_factory)
