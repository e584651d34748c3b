# slotwise/models/date_override.py
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Integer,
    Time,
    UniqueConstraint,
)

from slotwise.db.base import Base


class DateOverride(Base):
    """
    Date-specific exception to a host's weekly rules.

    - is_available = False            => the whole date is blocked
    - is_available = True + start/end => custom hours replace the weekly rules
    """

    __tablename__ = "date_overrides"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    date = Column(Date, nullable=False, index=True)
    is_available = Column(Boolean, nullable=False, default=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_date_overrides_user_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<DateOverride id={self.id} user_id={self.user_id} "
            f"date={self.date} available={self.is_available}>"
        )
