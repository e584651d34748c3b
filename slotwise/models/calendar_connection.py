# slotwise/models/calendar_connection.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from slotwise.db.base import Base


class CalendarConnection(Base):
    """
    OAuth tokens for a host's external calendar.

    Used to read free/busy intervals during slot computation and to mirror
    new bookings as calendar events.
    """

    __tablename__ = "calendar_connections"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    provider = Column(String(32), nullable=False, default="google")
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=False)
    calendar_id = Column(String(255), nullable=False, default="primary")
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return (
            f"<CalendarConnection id={self.id} user_id={self.user_id} "
            f"provider={self.provider} active={self.is_active}>"
        )
