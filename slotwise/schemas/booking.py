# slotwise/schemas/booking.py
from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from slotwise.core.timeutils import as_utc
from slotwise.schemas.user import normalize_email

MAX_ATTENDEE_NOTES_LENGTH = 1000


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingCreate(BaseModel):
    """
    Public booking request for one slot of an event type.
    """

    event_type_id: int = Field(..., examples=[7])
    attendee_name: str = Field(..., min_length=2, examples=["Grace Hopper"])
    attendee_email: str = Field(..., examples=["grace@example.com"])
    attendee_notes: str | None = Field(default=None)
    start_time: datetime = Field(
        ...,
        description="Requested slot start (ISO-8601; naive values are read as UTC).",
        examples=["2025-06-02T10:00:00Z"],
    )
    timezone: str = Field(
        ...,
        description="Timezone the attendee booked in (used in emails and calendar events).",
        examples=["Europe/Berlin"],
    )

    @field_validator("attendee_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) < 2:
            raise ValueError("Name must be at least 2 characters.")
        return normalized

    @field_validator("attendee_email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("attendee_notes")
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        if len(normalized) > MAX_ATTENDEE_NOTES_LENGTH:
            raise ValueError(f"Notes must be {MAX_ATTENDEE_NOTES_LENGTH} characters or fewer.")
        return normalized

    @field_validator("start_time")
    @classmethod
    def normalize_start(cls, value: datetime) -> datetime:
        return as_utc(value)


class BookingCancel(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class BookingReschedule(BaseModel):
    start_time: datetime = Field(..., examples=["2025-06-03T11:00:00Z"])
    timezone: str | None = Field(
        default=None,
        description="New attendee timezone; keeps the old one when omitted.",
    )
    reason: str | None = Field(default=None, max_length=1000)

    @field_validator("start_time")
    @classmethod
    def normalize_start(cls, value: datetime) -> datetime:
        return as_utc(value)


class BookingSummary(BaseModel):
    id: int
    start_time: datetime
    attendee_name: str

    class Config:
        from_attributes = True

    @field_validator("start_time")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class BookingRead(BaseModel):
    id: int
    event_type_id: int
    user_id: int
    attendee_name: str
    attendee_email: str
    attendee_notes: str | None = None
    start_time: datetime
    end_time: datetime
    timezone: str
    status: BookingStatus
    cancellation_reason: str | None = None
    external_event_id: str | None = None
    rescheduled_from_id: int | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True

    @field_validator("start_time", "end_time")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
