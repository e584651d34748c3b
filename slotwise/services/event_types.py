# slotwise/services/event_types.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.exceptions import ConflictError, NotFoundError
from slotwise.models.booking import Booking
from slotwise.models.event_type import EventType
from slotwise.models.user import User
from slotwise.schemas.event_type import EventTypeCreate, EventTypeUpdate


async def get_bookable_event_type(db: AsyncSession, event_type_id: int) -> EventType:
    """
    Return the event type if it exists and is active.

    Inactive event types are reported exactly like missing ones.
    """
    event_type = await db.get(EventType, event_type_id)
    if event_type is None or not event_type.is_active:
        raise NotFoundError("Event type not found or inactive.")
    return event_type


async def _slug_taken(
    db: AsyncSession,
    user_id: int,
    slug: str,
    exclude_id: int | None = None,
) -> bool:
    stmt = select(EventType.id).where(EventType.user_id == user_id, EventType.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(EventType.id != exclude_id)
    result = await db.execute(stmt)
    return result.first() is not None


async def create_event_type(
    db: AsyncSession,
    user_id: int,
    payload: EventTypeCreate,
) -> EventType:
    if await _slug_taken(db, user_id, payload.slug):
        raise ConflictError(f"Event type with slug '{payload.slug}' already exists.")

    event_type = EventType(user_id=user_id, **payload.model_dump())
    db.add(event_type)
    await db.commit()
    await db.refresh(event_type)
    return event_type


async def list_event_types(db: AsyncSession, user_id: int) -> list[EventType]:
    result = await db.execute(
        select(EventType)
        .where(EventType.user_id == user_id)
        .order_by(EventType.created_at.desc(), EventType.id.desc())
    )
    return list(result.scalars().all())


async def get_owned_event_type(
    db: AsyncSession,
    user_id: int,
    event_type_id: int,
) -> EventType:
    event_type = await db.get(EventType, event_type_id)
    if event_type is None or event_type.user_id != user_id:
        raise NotFoundError(f"Event type with id {event_type_id} not found.")
    return event_type


async def update_event_type(
    db: AsyncSession,
    user_id: int,
    event_type_id: int,
    payload: EventTypeUpdate,
) -> EventType:
    """
    Apply a partial update. Changing the slug re-checks per-host uniqueness.
    """
    event_type = await get_owned_event_type(db, user_id, event_type_id)
    update_data = payload.model_dump(exclude_unset=True)

    new_slug = update_data.get("slug")
    if new_slug and new_slug != event_type.slug:
        if await _slug_taken(db, user_id, new_slug, exclude_id=event_type.id):
            raise ConflictError(f"Event type with slug '{new_slug}' already exists.")

    for field, value in update_data.items():
        if field in ("name", "slug", "duration_minutes", "is_active") and value is None:
            continue
        setattr(event_type, field, value)

    await db.commit()
    await db.refresh(event_type)
    return event_type


async def delete_event_type(db: AsyncSession, user_id: int, event_type_id: int) -> None:
    """
    Delete an event type that was never booked.

    Bookings are kept as history, so a booked event type can only be
    deactivated.
    """
    event_type = await get_owned_event_type(db, user_id, event_type_id)

    booked = await db.execute(
        select(Booking.id).where(Booking.event_type_id == event_type.id).limit(1)
    )
    if booked.first() is not None:
        raise ConflictError(
            "Event type has bookings and cannot be deleted; deactivate it instead."
        )

    await db.delete(event_type)
    await db.commit()


async def get_public_event_type(
    db: AsyncSession,
    username: str,
    slug: str,
) -> tuple[EventType, User]:
    result = await db.execute(
        select(EventType, User)
        .join(User, EventType.user_id == User.id)
        .where(User.username == username.strip().lower(), EventType.slug == slug)
    )
    row = result.first()
    if row is None or not row[0].is_active:
        raise NotFoundError("Event type not found or inactive.")
    return row[0], row[1]
