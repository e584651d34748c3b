# slotwise/models/event_type.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from slotwise.db.base import Base


class EventType(Base):
    """
    A bookable meeting template (name, fixed duration, location) owned by a host.
    """

    __tablename__ = "event_types"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    location = Column(String(32), nullable=True)
    meeting_link = Column(String(500), nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", backref="event_types")

    __table_args__ = (
        UniqueConstraint("user_id", "slug", name="uq_event_types_user_slug"),
    )

    def __repr__(self) -> str:
        return (
            f"<EventType id={self.id} user_id={self.user_id} slug={self.slug} "
            f"duration={self.duration_minutes} active={self.is_active}>"
        )
