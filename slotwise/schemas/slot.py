# slotwise/schemas/slot.py
from datetime import date as date_type, datetime

from pydantic import BaseModel, Field


class TimeSlot(BaseModel):
    """
    One candidate meeting window on the requested day.
    """

    start: datetime = Field(
        ...,
        description="Slot start as an ISO-8601 instant.",
        examples=["2025-06-02T09:00:00+00:00"],
    )
    end: datetime = Field(
        ...,
        description="Slot end as an ISO-8601 instant (start + event duration).",
        examples=["2025-06-02T09:30:00+00:00"],
    )
    available: bool = Field(
        ...,
        description="False when the slot overlaps a confirmed booking or an external busy interval.",
        examples=[True],
    )


class SlotListResponse(BaseModel):
    """
    Response of the slot query endpoint.
    """

    date: date_type = Field(..., description="Requested calendar date.", examples=["2025-06-02"])
    timezone: str = Field(
        ...,
        description="Viewer timezone the instants are rendered in.",
        examples=["UTC"],
    )
    event_type_id: int = Field(..., description="Event type the slots were computed for.")
    slots: list[TimeSlot] = Field(
        ...,
        description="Future slots in chronological order, each tagged with availability.",
    )
