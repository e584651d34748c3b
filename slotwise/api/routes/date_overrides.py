# slotwise/api/routes/date_overrides.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.api.dependencies.host_auth import get_current_host
from slotwise.api.dependencies.providers import Clock, get_clock
from slotwise.core.timeutils import get_zone
from slotwise.db.session import get_db
from slotwise.models.user import User
from slotwise.schemas.booking import BookingSummary
from slotwise.schemas.date_override import (
    DateOverrideCreate,
    DateOverrideRead,
    DateOverrideUpdate,
    DateOverrideWriteResult,
)
from slotwise.services import date_overrides as override_service

router = APIRouter(prefix="/date-overrides", tags=["Date overrides"])


@router.get(
    "",
    response_model=list[DateOverrideRead],
    summary="List the host's date overrides",
    description="Overrides ordered by date, optionally restricted to an inclusive window.",
)
async def list_date_overrides(
    start_date: date_type | None = Query(default=None, examples=["2025-06-01"]),
    end_date: date_type | None = Query(default=None, examples=["2025-06-30"]),
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> list[DateOverrideRead]:
    overrides = await override_service.list_overrides(db, host.id, start_date, end_date)
    return [DateOverrideRead.model_validate(o) for o in overrides]


@router.post(
    "",
    response_model=DateOverrideWriteResult,
    status_code=HTTPStatus.CREATED,
    summary="Create or replace date overrides",
    description=(
        "Block a day (or give it custom hours) regardless of the weekly rules.\n\n"
        "- Single date: `date`, `is_available`, optional `start_time`/`end_time` "
        "(interpreted in the host's timezone).\n"
        "- Range (e.g. out of office): `start_date`..`end_date` inclusive, one "
        "override per day.\n\n"
        "Existing overrides on the same dates are replaced. Past dates are "
        "rejected. Confirmed bookings that fall on the affected dates are kept "
        "and listed in `warning_bookings`."
    ),
    responses={
        201: {
            "description": "Overrides stored.",
            "content": {
                "application/json": {
                    "example": {
                        "overrides": [
                            {
                                "id": 3,
                                "date": "2025-06-02",
                                "is_available": False,
                                "start_time": None,
                                "end_time": None,
                            }
                        ],
                        "count": 1,
                        "warning_bookings": None,
                    }
                }
            },
        },
        400: {"description": "Date in the past or end before start."},
    },
)
async def create_date_overrides(
    payload: DateOverrideCreate,
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DateOverrideWriteResult:
    today = clock().astimezone(get_zone(host.timezone)).date()
    overrides, affected = await override_service.create_overrides(db, host, payload, today)
    return DateOverrideWriteResult(
        overrides=[DateOverrideRead.model_validate(o) for o in overrides],
        count=len(overrides),
        warning_bookings=[BookingSummary.model_validate(b) for b in affected] or None,
    )


@router.patch(
    "/{override_id}",
    response_model=DateOverrideRead,
    summary="Update a date override",
    responses={
        400: {"description": "Custom hours incomplete or start not before end."},
        404: {"description": "No such override for this host."},
    },
)
async def update_date_override(
    payload: DateOverrideUpdate,
    override_id: int = Path(..., ge=1),
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> DateOverrideRead:
    override = await override_service.update_override(db, host.id, override_id, payload)
    return DateOverrideRead.model_validate(override)


@router.delete(
    "/{override_id}",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Delete a date override",
    responses={404: {"description": "No such override for this host."}},
)
async def delete_date_override(
    override_id: int = Path(..., ge=1),
    host: User = Depends(get_current_host),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await override_service.delete_override(db, host.id, override_id)
    return Response(status_code=HTTPStatus.NO_CONTENT)
