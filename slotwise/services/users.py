# slotwise/services/users.py
from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.config import get_settings
from slotwise.core.exceptions import ConflictError, NotFoundError
from slotwise.core.timeutils import get_zone
from slotwise.models.event_type import EventType
from slotwise.models.user import User
from slotwise.schemas.user import UserCreate

logger = logging.getLogger(__name__)


async def create_user(db: AsyncSession, payload: UserCreate) -> User:
    """
    Register a host. Username and email must both be unused.
    """
    timezone_name = payload.timezone or get_settings().DEFAULT_TIMEZONE
    get_zone(timezone_name)

    existing = await db.execute(
        select(User).where(
            or_(User.username == payload.username, User.email == payload.email)
        )
    )
    if existing.scalars().first() is not None:
        raise ConflictError("A user with this username or email already exists.")

    user = User(
        email=payload.email,
        name=payload.name.strip(),
        username=payload.username,
        timezone=timezone_name,
        booking_sequence=0,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Registered host user_id=%s username=%s", user.id, user.username)
    return user


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User with id {user_id} not found.")
    return user


async def get_user_by_username(db: AsyncSession, username: str) -> User:
    result = await db.execute(select(User).where(User.username == username.strip().lower()))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found.")
    return user


async def list_active_event_types(db: AsyncSession, user_id: int) -> list[EventType]:
    result = await db.execute(
        select(EventType)
        .where(EventType.user_id == user_id, EventType.is_active.is_(True))
        .order_by(EventType.duration_minutes.asc(), EventType.id.asc())
    )
    return list(result.scalars().all())
