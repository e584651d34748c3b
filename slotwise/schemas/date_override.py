# slotwise/schemas/date_override.py
from __future__ import annotations

from datetime import date as date_type, time

from pydantic import BaseModel, Field, model_validator

from slotwise.schemas.booking import BookingSummary


class DateOverrideCreate(BaseModel):
    """
    Either a single `date` (optionally with custom hours) or an inclusive
    `start_date`..`end_date` range. Ranges never carry custom hours.
    """

    date: date_type | None = Field(default=None, examples=["2025-06-02"])
    start_date: date_type | None = Field(default=None, examples=["2025-06-02"])
    end_date: date_type | None = Field(default=None, examples=["2025-06-06"])
    is_available: bool = Field(
        ...,
        description="False blocks the date(s); True with custom hours replaces the weekly rules.",
    )
    start_time: time | None = Field(default=None, examples=["10:00"])
    end_time: time | None = Field(default=None, examples=["14:00"])

    @model_validator(mode="after")
    def check_shape(self) -> "DateOverrideCreate":
        is_range = self.start_date is not None or self.end_date is not None
        if is_range:
            if self.start_date is None or self.end_date is None:
                raise ValueError("Both start_date and end_date are required for a range.")
            if self.date is not None:
                raise ValueError("Provide either date or start_date/end_date, not both.")
            if self.start_time is not None or self.end_time is not None:
                raise ValueError("Custom hours are only supported for a single date.")
        elif self.date is None:
            raise ValueError("Either date or start_date/end_date is required.")

        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be provided together.")
        if self.start_time is not None and self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time.")
        return self

    @property
    def is_range(self) -> bool:
        return self.start_date is not None


class DateOverrideUpdate(BaseModel):
    is_available: bool | None = None
    start_time: time | None = None
    end_time: time | None = None


class DateOverrideRead(BaseModel):
    id: int
    date: date_type
    is_available: bool
    start_time: time | None = None
    end_time: time | None = None

    class Config:
        from_attributes = True


class DateOverrideWriteResult(BaseModel):
    """
    Result of creating overrides. `warning_bookings` lists confirmed
    bookings on the affected dates; they are kept, not cancelled.
    """

    overrides: list[DateOverrideRead]
    count: int
    warning_bookings: list[BookingSummary] | None = None
