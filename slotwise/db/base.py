# slotwise/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models in the Slotwise service.

    Model modules import this class; `slotwise.db.session` imports every
    model module so that Base.metadata is complete before schema creation.
    """
    pass
