# slotwise/schemas/availability.py
from datetime import time

from pydantic import BaseModel, Field, model_validator


class AvailabilityRuleIn(BaseModel):
    """
    One recurring weekly open interval.
    """

    day_of_week: int = Field(
        ...,
        ge=0,
        le=6,
        description="0 = Sunday ... 6 = Saturday.",
        examples=[1],
    )
    start_time: time = Field(..., description="Local opening time.", examples=["09:00"])
    end_time: time = Field(..., description="Local closing time.", examples=["17:00"])
    timezone: str = Field(
        default="UTC",
        description="IANA timezone the times are expressed in.",
        examples=["America/New_York"],
    )

    @model_validator(mode="after")
    def check_window(self) -> "AvailabilityRuleIn":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time.")
        return self


class AvailabilityReplace(BaseModel):
    """
    The complete weekly schedule. Replaces every existing rule.
    """

    availability: list[AvailabilityRuleIn] = Field(
        ...,
        description="Full set of rules; an empty list closes every weekday.",
    )


class AvailabilityRuleRead(BaseModel):
    id: int
    day_of_week: int
    start_time: time
    end_time: time
    timezone: str

    class Config:
        from_attributes = True
