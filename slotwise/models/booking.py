# slotwise/models/booking.py
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from slotwise.db.base import Base


class Booking(Base):
    """
    A visitor's booking of one event type.

    `start_time` / `end_time` are stored as naive UTC. Bookings are never
    deleted: cancellation flips `status` to "cancelled" and keeps the row.
    """

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    event_type_id = Column(
        Integer,
        ForeignKey("event_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    attendee_name = Column(String(255), nullable=False)
    attendee_email = Column(String(255), nullable=False)
    attendee_notes = Column(Text, nullable=True)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    timezone = Column(String(64), nullable=False)

    status = Column(String(16), nullable=False, default="confirmed")
    cancellation_reason = Column(Text, nullable=True)
    external_event_id = Column(String(255), nullable=True)
    rescheduled_from_id = Column(
        Integer,
        ForeignKey("bookings.id"),
        nullable=True,
    )

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    event_type = relationship("EventType", backref="bookings")

    __table_args__ = (
        Index("ix_bookings_user_status_start", "user_id", "status", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking id={self.id} user_id={self.user_id} "
            f"{self.start_time}-{self.end_time} status={self.status}>"
        )
