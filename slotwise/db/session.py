# slotwise/db/session.py
import os
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from slotwise.core.config import get_settings
from slotwise.db.base import Base

# Import ORM models so that Base.metadata is aware of them
from slotwise.models.user import User  # noqa: F401
from slotwise.models.event_type import EventType  # noqa: F401
from slotwise.models.availability_rule import AvailabilityRule  # noqa: F401
from slotwise.models.date_override import DateOverride  # noqa: F401
from slotwise.models.booking import Booking  # noqa: F401
from slotwise.models.calendar_connection import CalendarConnection  # noqa: F401

settings = get_settings()

# Detect if we're running under pytest
IS_TEST = "PYTEST_CURRENT_TEST" in os.environ


def _enable_sqlite_write_locking(engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction start with `BEGIN IMMEDIATE`.

    The driver's default deferred BEGIN lets two connections both read the
    booking set and only then race for the write lock. Taking the write lock
    up front turns the booking re-check + insert into a serialized unit,
    which is what PostgreSQL gets from the row lock on the host.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(db_url: str, **kwargs: Any) -> AsyncEngine:
    """
    Create an async engine for `db_url`.

    SQLite URLs get a busy timeout and immediate write locking; other
    backends are created as-is.
    """
    is_sqlite = db_url.startswith("sqlite")
    if is_sqlite:
        connect_args = dict(kwargs.pop("connect_args", {}))
        connect_args.setdefault("timeout", settings.SQLITE_BUSY_TIMEOUT_SECONDS)
        kwargs["connect_args"] = connect_args

    engine = create_async_engine(db_url, echo=False, future=True, **kwargs)

    if is_sqlite:
        _enable_sqlite_write_locking(engine)

    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


# ---------------------------------------------------------------------------
# Main application engine + session
# ---------------------------------------------------------------------------
engine = build_engine(
    settings.DB_URL,
    # Tests drive the app from several event loops; never reuse connections.
    **({"poolclass": NullPool} if IS_TEST else {}),
)

AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async SQLAlchemy session.

    The session is automatically closed when the request is completed.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def create_schema(target: AsyncEngine) -> None:
    """
    Create all tables on `target` if they do not exist yet.
    """
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """
    Initialize DB schema for application startup.

    Typically you'd eventually replace this with Alembic migrations.
    """
    await create_schema(engine)
