# slotwise/schemas/event_type.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

Location = Literal["zoom", "google_meet", "phone", "in_person", "custom"]


def _validate_slug(value: str) -> str:
    normalized = value.strip().lower()
    if not SLUG_PATTERN.match(normalized):
        raise ValueError("Slug can only contain lowercase letters, numbers, and hyphens.")
    return normalized


def _validate_link(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    normalized = value.strip()
    if not normalized.startswith(("http://", "https://")):
        raise ValueError("Meeting link must be an http(s) URL.")
    return normalized


# --------------------------------------------------------------------------
# Base schema shared by create/read
# --------------------------------------------------------------------------

class EventTypeBase(BaseModel):
    """
    Shared fields used by EventTypeCreate and EventTypeRead.
    """

    name: str = Field(
        ...,
        min_length=1,
        description="Human-readable event name.",
        examples=["30 Minute Meeting"],
    )
    slug: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="URL slug, unique per host.",
        examples=["30min"],
    )
    description: str | None = Field(default=None)
    duration_minutes: int = Field(
        ...,
        ge=15,
        le=240,
        description="Fixed meeting length in minutes.",
        examples=[30],
    )
    is_active: bool = Field(
        default=True,
        description="Only active event types can be booked.",
    )
    location: Location | None = Field(default=None)
    meeting_link: str | None = Field(default=None)


# --------------------------------------------------------------------------
# Create schema (POST /event-types)
# --------------------------------------------------------------------------

class EventTypeCreate(EventTypeBase):
    """
    Schema for creating a new event type.
    """

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, value: str) -> str:
        return _validate_slug(value)

    @field_validator("meeting_link")
    @classmethod
    def validate_meeting_link(cls, value: str | None) -> str | None:
        return _validate_link(value)


# --------------------------------------------------------------------------
# Update schema (PATCH /event-types/{id})
# --------------------------------------------------------------------------

class EventTypeUpdate(BaseModel):
    """
    All fields are optional; only provided fields are updated.
    """

    name: str | None = Field(default=None, min_length=1)
    slug: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None)
    duration_minutes: int | None = Field(default=None, ge=15, le=240)
    is_active: bool | None = Field(default=None)
    location: Location | None = Field(default=None)
    meeting_link: str | None = Field(default=None)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _validate_slug(value)

    @field_validator("meeting_link")
    @classmethod
    def validate_meeting_link(cls, value: str | None) -> str | None:
        return _validate_link(value)


# --------------------------------------------------------------------------
# Read schemas
# --------------------------------------------------------------------------

class EventTypeRead(EventTypeBase):
    id: int = Field(..., examples=[7])
    user_id: int = Field(..., description="Owning host.")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class PublicEventTypeRead(EventTypeRead):
    """
    Event type as shown on a public booking page, with host details.
    """

    host_name: str
    host_username: str
    host_timezone: str
