# slotwise/schemas/user.py
from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from slotwise.schemas.event_type import EventTypeRead

USERNAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Invalid email address.")
    return normalized


class UserCreate(BaseModel):
    """
    Registers a host profile. Credentials are handled by the auth service.
    """

    email: str = Field(..., description="Host email address.", examples=["ada@example.com"])
    name: str = Field(..., min_length=2, description="Display name.", examples=["Ada Lovelace"])
    username: str = Field(
        ...,
        min_length=3,
        max_length=30,
        description="Public handle used in booking page URLs.",
        examples=["ada"],
    )
    timezone: str | None = Field(
        default=None,
        description="IANA timezone for override hours. Defaults to DEFAULT_TIMEZONE.",
        examples=["Europe/London"],
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not USERNAME_PATTERN.match(normalized):
            raise ValueError(
                "Username can only contain lowercase letters, numbers, hyphens, and underscores."
            )
        return normalized


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    username: str
    timezone: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class PublicUserRead(BaseModel):
    """
    What visitors may see about a host.
    """

    id: int
    name: str
    username: str
    timezone: str

    class Config:
        from_attributes = True


class PublicProfile(BaseModel):
    user: PublicUserRead
    event_types: list[EventTypeRead] = Field(
        ...,
        description="Active event types of the host.",
    )
