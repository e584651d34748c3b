# slotwise/api/routes/event_types.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.api.dependencies.host_auth import get_current_host
from slotwise.db.session import get_db
from slotwise.models.user import User
from slotwise.schemas.event_type import EventTypeCreate, EventTypeRead, EventTypeUpdate
from slotwise.services import event_types as event_type_service

router = APIRouter(prefix="/event-types", tags=["Event types"])


@router.get(
    "",
    response_model=list[EventTypeRead],
    summary="List the host's event types",
    description="Return every event type of the authenticated host, newest first.",
)
async def list_event_types(
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> list[EventTypeRead]:
    event_types = await event_type_service.list_event_types(db, host.id)
    return [EventTypeRead.model_validate(et) for et in event_types]


@router.post(
    "",
    response_model=EventTypeRead,
    status_code=HTTPStatus.CREATED,
    summary="Create an event type",
    description=(
        "Create a bookable meeting template. `slug` must match `^[a-z0-9-]+$` "
        "and be unique for the host; `duration_minutes` is between 15 and 240."
    ),
    responses={
        201: {
            "description": "Event type created.",
            "content": {
                "application/json": {
                    "example": {
                        "id": 7,
                        "user_id": 1,
                        "name": "30 Minute Meeting",
                        "slug": "30min",
                        "description": None,
                        "duration_minutes": 30,
                        "is_active": True,
                        "location": "google_meet",
                        "meeting_link": None,
                    }
                }
            },
        },
        409: {
            "description": "The host already has an event type with this slug.",
            "content": {
                "application/json": {
                    "example": {"detail": "Event type with slug '30min' already exists."}
                }
            },
        },
    },
)
async def create_event_type(
    payload: EventTypeCreate,
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> EventTypeRead:
    event_type = await event_type_service.create_event_type(db, host.id, payload)
    return EventTypeRead.model_validate(event_type)


@router.get(
    "/{event_type_id}",
    response_model=EventTypeRead,
    summary="Get one of the host's event types",
    responses={404: {"description": "No such event type for this host."}},
)
async def get_event_type(
    event_type_id: int = Path(..., ge=1, examples=[7]),
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> EventTypeRead:
    event_type = await event_type_service.get_owned_event_type(db, host.id, event_type_id)
    return EventTypeRead.model_validate(event_type)


@router.patch(
    "/{event_type_id}",
    response_model=EventTypeRead,
    summary="Update an event type",
    description=(
        "Partially update an event type. Only provided fields are changed. "
        "Deactivating an event type hides it from booking pages and rejects "
        "new bookings; existing bookings are kept."
    ),
    responses={
        404: {"description": "No such event type for this host."},
        409: {"description": "New slug already used by another event type of the host."},
    },
)
async def update_event_type(
    payload: EventTypeUpdate,
    event_type_id: int = Path(..., ge=1, examples=[7]),
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> EventTypeRead:
    event_type = await event_type_service.update_event_type(db, host.id, event_type_id, payload)
    return EventTypeRead.model_validate(event_type)


@router.delete(
    "/{event_type_id}",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Delete an event type",
    responses={
        204: {"description": "Event type deleted."},
        404: {"description": "No such event type for this host."},
        409: {"description": "Event type has bookings; deactivate it instead."},
    },
)
async def delete_event_type(
    event_type_id: int = Path(..., ge=1, examples=[7]),
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await event_type_service.delete_event_type(db, host.id, event_type_id)
    return Response(status_code=HTTPStatus.NO_CONTENT)
