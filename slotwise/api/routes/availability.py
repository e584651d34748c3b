# slotwise/api/routes/availability.py
from datetime import date as date_type

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.api.dependencies.host_auth import get_current_host
from slotwise.api.dependencies.providers import (
    Clock,
    get_calendar_client_factory,
    get_clock,
)
from slotwise.core.config import get_settings
from slotwise.core.timeutils import get_zone
from slotwise.db.session import get_db
from slotwise.models.user import User
from slotwise.schemas.availability import AvailabilityReplace, AvailabilityRuleRead
from slotwise.schemas.slot import SlotListResponse, TimeSlot
from slotwise.services import availability_rules
from slotwise.services.availability_resolver import resolve_slots
from slotwise.services.calendar_client import CalendarClientFactory

router = APIRouter(prefix="/availability", tags=["Availability"])


@router.get(
    "",
    response_model=list[AvailabilityRuleRead],
    summary="List the host's weekly availability",
    description="Recurring rules ordered by weekday (0 = Sunday) and start time.",
)
async def list_availability(
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> list[AvailabilityRuleRead]:
    rules = await availability_rules.list_rules(db, host.id)
    return [AvailabilityRuleRead.model_validate(r) for r in rules]


@router.put(
    "",
    response_model=list[AvailabilityRuleRead],
    summary="Replace the host's weekly availability",
    description=(
        "Replace the complete weekly schedule with the submitted rules. The old "
        "rules are deleted and the new ones inserted in a single transaction.\n\n"
        "Several rules may share a weekday (e.g. a morning and an afternoon "
        "block). An empty list closes every weekday."
    ),
    responses={
        200: {
            "description": "Schedule replaced; the stored rules are returned.",
            "content": {
                "application/json": {
                    "example": [
                        {
                            "id": 1,
                            "day_of_week": 1,
                            "start_time": "09:00:00",
                            "end_time": "17:00:00",
                            "timezone": "UTC",
                        }
                    ]
                }
            },
        },
        400: {"description": "A rule names an unknown timezone."},
    },
)
async def replace_availability(
    payload: AvailabilityReplace,
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> list[AvailabilityRuleRead]:
    rules = await availability_rules.replace_rules(db, host.id, payload.availability)
    return [AvailabilityRuleRead.model_validate(r) for r in rules]


@router.get(
    "/slots",
    response_model=SlotListResponse,
    summary="Bookable slots of an event type on a date",
    description=(
        "Compute the slots of `event_type_id` on `date`.\n\n"
        "Opening hours come from a date override when one exists (a blocking "
        "override yields no slots), otherwise from the host's weekly rules. "
        "Slots are tiled back to back with the event duration; a slot that "
        "overlaps a confirmed booking or a busy block of the host's connected "
        "calendar is returned with `available = false`. Slots that start at or "
        "before the current time are omitted.\n\n"
        "Instants are rendered in `timezone` (defaults to the service default)."
    ),
    responses={
        200: {
            "description": "Slots computed.",
            "content": {
                "application/json": {
                    "example": {
                        "date": "2025-06-02",
                        "timezone": "UTC",
                        "event_type_id": 7,
                        "slots": [
                            {
                                "start": "2025-06-02T09:00:00Z",
                                "end": "2025-06-02T09:30:00Z",
                                "available": True,
                            },
                            {
                                "start": "2025-06-02T10:00:00Z",
                                "end": "2025-06-02T10:30:00Z",
                                "available": False,
                            },
                        ],
                    }
                }
            },
        },
        400: {"description": "Unknown timezone."},
        404: {
            "description": "Event type missing or inactive.",
            "content": {
                "application/json": {"example": {"detail": "Event type not found or inactive."}}
            },
        },
    },
)
async def get_slots(
    date: date_type = Query(..., description="Calendar date to list slots for.", examples=["2025-06-02"]),
    event_type_id: int = Query(..., ge=1, examples=[7]),
    timezone: str | None = Query(
        default=None,
        description="IANA timezone used to render the slot instants.",
        examples=["Europe/Berlin"],
    ),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    calendar_client_factory: CalendarClientFactory | None = Depends(get_calendar_client_factory),
) -> SlotListResponse:
    viewer_timezone = timezone or get_settings().DEFAULT_TIMEZONE
    zone = get_zone(viewer_timezone)

    slots = await resolve_slots(
        db,
        event_type_id=event_type_id,
        day=date,
        viewer_timezone=viewer_timezone,
        now=clock(),
        calendar_client_factory=calendar_client_factory,
    )

    return SlotListResponse(
        date=date,
        timezone=viewer_timezone,
        event_type_id=event_type_id,
        slots=[
            TimeSlot(
                start=slot.start.astimezone(zone),
                end=slot.end.astimezone(zone),
                available=slot.available,
            )
            for slot in slots
        ],
    )
