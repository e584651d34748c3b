# slotwise/api/routes/users.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.db.session import get_db
from slotwise.schemas.event_type import EventTypeRead, PublicEventTypeRead
from slotwise.schemas.user import PublicProfile, PublicUserRead, UserCreate, UserRead
from slotwise.services import users as user_service
from slotwise.services.event_types import get_public_event_type

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    response_model=UserRead,
    status_code=HTTPStatus.CREATED,
    summary="Register a host profile",
    description=(
        "Create the scheduling profile of a host. Identity and credentials are "
        "managed by the upstream auth service; this only stores what booking "
        "pages and availability need.\n\n"
        "`username` is the public handle used in booking URLs and must be unique, "
        "as must `email`."
    ),
    responses={
        201: {"description": "Host registered."},
        409: {
            "description": "Username or email already in use.",
            "content": {
                "application/json": {
                    "example": {"detail": "A user with this username or email already exists."}
                }
            },
        },
    },
)
async def register_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserRead:
    user = await user_service.create_user(db, payload)
    return UserRead.model_validate(user)


@router.get(
    "/{username}",
    response_model=PublicProfile,
    summary="Public host profile",
    description="Return the host's public details and their active event types.",
    responses={
        404: {
            "description": "No host with this username.",
            "content": {"application/json": {"example": {"detail": "User not found."}}},
        },
    },
)
async def get_public_profile(
    username: str = Path(..., description="Public handle of the host.", examples=["ada"]),
    db: AsyncSession = Depends(get_db),
) -> PublicProfile:
    user = await user_service.get_user_by_username(db, username)
    event_types = await user_service.list_active_event_types(db, user.id)
    return PublicProfile(
        user=PublicUserRead.model_validate(user),
        event_types=[EventTypeRead.model_validate(et) for et in event_types],
    )


@router.get(
    "/{username}/events/{slug}",
    response_model=PublicEventTypeRead,
    summary="Public event type",
    description=(
        "Look up an event type by host username and slug, as used by the public "
        "booking page. Inactive event types are reported as not found."
    ),
    responses={
        404: {
            "description": "Unknown host/slug or inactive event type.",
            "content": {
                "application/json": {"example": {"detail": "Event type not found or inactive."}}
            },
        },
    },
)
async def get_public_event(
    username: str = Path(..., examples=["ada"]),
    slug: str = Path(..., examples=["30min"]),
    db: AsyncSession = Depends(get_db),
) -> PublicEventTypeRead:
    event_type, host = await get_public_event_type(db, username, slug)
    data = EventTypeRead.model_validate(event_type).model_dump()
    return PublicEventTypeRead(
        **data,
        host_name=host.name,
        host_username=host.username,
        host_timezone=host.timezone,
    )
