# slotwise/services/calendar_connections.py
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.exceptions import NotFoundError
from slotwise.models.calendar_connection import CalendarConnection
from slotwise.schemas.calendar import CalendarConnectionUpsert

logger = logging.getLogger(__name__)


async def get_connection(db: AsyncSession, user_id: int) -> CalendarConnection | None:
    result = await db.execute(
        select(CalendarConnection).where(CalendarConnection.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def upsert_connection(
    db: AsyncSession,
    user_id: int,
    payload: CalendarConnectionUpsert,
) -> CalendarConnection:
    """
    Store (or replace) the host's calendar tokens. One connection per host.
    """
    connection = await get_connection(db, user_id)
    if connection is None:
        connection = CalendarConnection(user_id=user_id)
        db.add(connection)

    connection.provider = payload.provider
    connection.refresh_token = payload.refresh_token
    connection.access_token = payload.access_token
    connection.calendar_id = payload.calendar_id
    connection.is_active = True

    await db.commit()
    await db.refresh(connection)
    logger.info("Calendar connected for user_id=%s provider=%s", user_id, connection.provider)
    return connection


async def disconnect(db: AsyncSession, user_id: int) -> None:
    connection = await get_connection(db, user_id)
    if connection is None:
        raise NotFoundError("No calendar connection found.")
    await db.delete(connection)
    await db.commit()
    logger.info("Calendar disconnected for user_id=%s", user_id)
