# slotwise/models/availability_rule.py
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Time

from slotwise.db.base import Base


class AvailabilityRule(Base):
    """
    Recurring weekly open interval for a host, e.g. "Monday 09:00-17:00".

    `day_of_week` uses 0=Sunday .. 6=Saturday. Times are wall-clock times in
    `timezone`. A weekday without any rule is closed.
    """

    __tablename__ = "availability_rules"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_rules_day"),
        CheckConstraint("start_time < end_time", name="ck_availability_rules_window"),
    )

    def __repr__(self) -> str:
        return (
            f"<AvailabilityRule id={self.id} user_id={self.user_id} "
            f"day={self.day_of_week} {self.start_time}-{self.end_time} {self.timezone}>"
        )
