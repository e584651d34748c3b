# slotwise/schemas/calendar.py
from datetime import datetime

from pydantic import BaseModel, Field


class CalendarConnectionUpsert(BaseModel):
    """
    Tokens obtained by the OAuth handshake (performed outside this service).
    """

    provider: str = Field(default="google", pattern="^google$")
    refresh_token: str = Field(..., min_length=1)
    access_token: str | None = None
    calendar_id: str = Field(default="primary", min_length=1)


class CalendarConnectionStatus(BaseModel):
    connected: bool
    provider: str | None = None
    calendar_id: str | None = None
    connected_at: datetime | None = None
