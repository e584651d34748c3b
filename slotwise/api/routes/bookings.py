# slotwise/api/routes/bookings.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.api.dependencies.host_auth import get_current_host
from slotwise.api.dependencies.providers import (
    Clock,
    get_calendar_client_factory,
    get_clock,
)
from slotwise.db.session import get_db
from slotwise.models.user import User
from slotwise.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingRead,
    BookingReschedule,
    BookingStatus,
)
from slotwise.services import booking_transaction
from slotwise.services.calendar_client import CalendarClientFactory

router = APIRouter(prefix="/bookings", tags=["Bookings"])

_BOOKING_EXAMPLE = {
    "id": 42,
    "event_type_id": 7,
    "user_id": 1,
    "attendee_name": "Grace Hopper",
    "attendee_email": "grace@example.com",
    "attendee_notes": None,
    "start_time": "2025-06-02T10:00:00Z",
    "end_time": "2025-06-02T10:30:00Z",
    "timezone": "Europe/Berlin",
    "status": "confirmed",
    "cancellation_reason": None,
    "external_event_id": None,
    "rescheduled_from_id": None,
}


@router.post(
    "",
    response_model=BookingRead,
    status_code=HTTPStatus.CREATED,
    summary="Book a slot",
    description=(
        "Public endpoint used by visitors to book one slot of an event type.\n\n"
        "The slot is re-checked against the host's confirmed bookings inside the "
        "booking transaction; if another booking took it in the meantime the "
        "request fails with 409 and nothing is stored.\n\n"
        "Calendar sync and confirmation emails run after the booking is stored "
        "and never fail the request."
    ),
    responses={
        201: {
            "description": "Booking confirmed.",
            "content": {"application/json": {"example": _BOOKING_EXAMPLE}},
        },
        400: {"description": "Start time not in the future or unknown timezone."},
        404: {
            "description": "Event type missing or inactive.",
            "content": {
                "application/json": {"example": {"detail": "Event type not found or inactive."}}
            },
        },
        409: {
            "description": "The slot overlaps a confirmed booking.",
            "content": {
                "application/json": {"example": {"detail": "Time slot is no longer available."}}
            },
        },
    },
)
async def create_booking(
    payload: BookingCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    calendar_client_factory: CalendarClientFactory | None = Depends(get_calendar_client_factory),
) -> BookingRead:
    booking = await booking_transaction.create_booking(
        db,
        payload,
        now=clock(),
        calendar_client_factory=calendar_client_factory,
    )
    return BookingRead.model_validate(booking)


@router.get(
    "",
    response_model=list[BookingRead],
    summary="List the host's bookings",
    description=(
        "Bookings of the authenticated host ordered by start time. Filter by "
        "`status` (default `confirmed`) and, with `upcoming=true`, only those "
        "starting from now on."
    ),
)
async def list_bookings(
    status: BookingStatus = Query(default=BookingStatus.CONFIRMED),
    upcoming: bool = Query(default=False),
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[BookingRead]:
    bookings = await booking_transaction.list_host_bookings(
        db, host.id, status=status, upcoming=upcoming, now=clock()
    )
    return [BookingRead.model_validate(b) for b in bookings]


@router.get(
    "/{booking_id}",
    response_model=BookingRead,
    summary="Get a booking",
    description="Public view of a booking, used by the confirmation and cancel pages.",
    responses={
        404: {
            "description": "No booking with this id.",
            "content": {"application/json": {"example": {"detail": "Booking not found."}}},
        },
    },
)
async def get_booking(
    booking_id: int = Path(..., ge=1, examples=[42]),
    db: AsyncSession = Depends(get_db),
) -> BookingRead:
    booking = await booking_transaction.get_booking(db, booking_id)
    return BookingRead.model_validate(booking)


@router.put(
    "/{booking_id}/cancel",
    response_model=BookingRead,
    summary="Cancel a booking",
    description=(
        "Cancel a confirmed booking, optionally with a reason. The booking is "
        "kept with status `cancelled`. Cancelling twice is a conflict."
    ),
    responses={
        404: {"description": "No booking with this id."},
        409: {
            "description": "Booking already cancelled.",
            "content": {"application/json": {"example": {"detail": "Booking already cancelled."}}},
        },
    },
)
async def cancel_booking(
    payload: BookingCancel | None = None,
    booking_id: int = Path(..., ge=1, examples=[42]),
    db: AsyncSession = Depends(get_db),
    calendar_client_factory: CalendarClientFactory | None = Depends(get_calendar_client_factory),
) -> BookingRead:
    reason = payload.reason if payload is not None else None
    booking = await booking_transaction.cancel_booking(
        db,
        booking_id,
        reason=reason,
        calendar_client_factory=calendar_client_factory,
    )
    return BookingRead.model_validate(booking)


@router.post(
    "/{booking_id}/reschedule",
    response_model=BookingRead,
    status_code=HTTPStatus.CREATED,
    summary="Reschedule a booking",
    description=(
        "Move a confirmed booking to a new start time. The old booking is "
        "cancelled and the new one created in one transaction; the new booking "
        "references the old one via `rescheduled_from_id`."
    ),
    responses={
        201: {"description": "New booking created, old one cancelled."},
        400: {"description": "New start not in the future or unknown timezone."},
        404: {"description": "Booking or its event type not found."},
        409: {"description": "Booking already cancelled or new slot taken."},
    },
)
async def reschedule_booking(
    payload: BookingReschedule,
    booking_id: int = Path(..., ge=1, examples=[42]),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    calendar_client_factory: CalendarClientFactory | None = Depends(get_calendar_client_factory),
) -> BookingRead:
    booking = await booking_transaction.reschedule_booking(
        db,
        booking_id,
        new_start=payload.start_time,
        now=clock(),
        timezone_name=payload.timezone,
        reason=payload.reason,
        calendar_client_factory=calendar_client_factory,
    )
    return BookingRead.model_validate(booking)
