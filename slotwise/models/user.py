# slotwise/models/user.py
from sqlalchemy import Column, DateTime, Integer, String, func

from slotwise.db.base import Base


class User(Base):
    """
    A host: the owner of event types and availability whose calendar
    visitors book into.

    Identity and credentials live in the upstream auth service; this row
    only keeps what scheduling needs.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    username = Column(String(64), nullable=False, unique=True, index=True)
    timezone = Column(String(64), nullable=False, default="UTC")

    # Bumped inside every booking write. Updating it row-locks the host,
    # which serializes concurrent booking transactions for the same host.
    booking_sequence = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username}>"
