# slotwise/api/routes/calendar.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.api.dependencies.host_auth import get_current_host
from slotwise.db.session import get_db
from slotwise.models.user import User
from slotwise.schemas.calendar import CalendarConnectionStatus, CalendarConnectionUpsert
from slotwise.services import calendar_connections

router = APIRouter(prefix="/calendar", tags=["Calendar"])


def _status(connection) -> CalendarConnectionStatus:
    if connection is None or not connection.is_active:
        return CalendarConnectionStatus(connected=False)
    return CalendarConnectionStatus(
        connected=True,
        provider=connection.provider,
        calendar_id=connection.calendar_id,
        connected_at=connection.created_at,
    )


@router.get(
    "/connection",
    response_model=CalendarConnectionStatus,
    summary="External calendar connection status",
)
async def get_connection_status(
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> CalendarConnectionStatus:
    connection = await calendar_connections.get_connection(db, host.id)
    return _status(connection)


@router.put(
    "/connection",
    response_model=CalendarConnectionStatus,
    summary="Store the host's calendar tokens",
    description=(
        "Save (or replace) the tokens returned by the calendar provider's OAuth "
        "handshake. Once connected, the host's busy times are taken into account "
        "when computing slots and new bookings are added to the calendar."
    ),
)
async def put_connection(
    payload: CalendarConnectionUpsert,
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> CalendarConnectionStatus:
    connection = await calendar_connections.upsert_connection(db, host.id, payload)
    return _status(connection)


@router.delete(
    "/connection",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Disconnect the external calendar",
    responses={404: {"description": "No calendar connected."}},
)
async def delete_connection(
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await calendar_connections.disconnect(db, host.id)
    return Response(status_code=HTTPStatus.NO_CONTENT)
