# tests/conftest.py
import asyncio
import os
from dataclasses import dataclass
from datetime import datetime, time, timezone

# Keep the module-level application engine away from any real database file.
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from slotwise.api.dependencies.providers import get_calendar_client_factory, get_clock
from slotwise.db.session import build_engine, build_sessionmaker, create_schema, get_db
from slotwise.main import create_app
from slotwise.models.availability_rule import AvailabilityRule
from slotwise.models.calendar_connection import CalendarConnection
from slotwise.models.event_type import EventType
from slotwise.models.user import User

# Sunday; the scenarios below book into Monday 2025-06-02.
FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
MONDAY = 1


@dataclass
class Seeded:
    host_id: int
    event_type_id: int


async def seed_schedule(
    session,
    *,
    username: str = "ada",
    duration_minutes: int = 30,
    host_timezone: str = "UTC",
    rule_timezone: str = "UTC",
    day_of_week: int = MONDAY,
    start: time = time(9, 0),
    end: time = time(17, 0),
    is_active: bool = True,
) -> Seeded:
    """
    One host with one event type and one weekly rule (Mon 09:00-17:00 UTC
    by default).
    """
    host = User(
        email=f"{username}@example.com",
        name=username.title(),
        username=username,
        timezone=host_timezone,
        booking_sequence=0,
    )
    session.add(host)
    await session.flush()

    event_type = EventType(
        user_id=host.id,
        name=f"{duration_minutes} Minute Meeting",
        slug=f"{duration_minutes}min",
        duration_minutes=duration_minutes,
        is_active=is_active,
    )
    session.add(event_type)
    session.add(
        AvailabilityRule(
            user_id=host.id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            timezone=rule_timezone,
        )
    )
    await session.commit()
    return Seeded(host_id=host.id, event_type_id=event_type.id)


async def connect_calendar(session, host_id: int) -> None:
    session.add(
        CalendarConnection(
            user_id=host_id,
            provider="google",
            access_token="stored-access-token",
            refresh_token="stored-refresh-token",
            calendar_id="primary",
            is_active=True,
        )
    )
    await session.commit()


class FakeCalendarClient:
    """
    In-memory stand-in for GoogleCalendarClient.
    """

    def __init__(self, busy=None, fail_with: Exception | None = None, event_id: str = "evt-1"):
        self.busy = list(busy or [])
        self.fail_with = fail_with
        self.event_id = event_id
        self.busy_calls: list[tuple[datetime, datetime]] = []
        self.created: list[dict] = []
        self.deleted: list[str] = []

    async def get_busy_intervals(self, time_min, time_max):
        self.busy_calls.append((time_min, time_max))
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.busy)

    async def create_event(self, **kwargs):
        if self.fail_with is not None:
            raise self.fail_with
        self.created.append(kwargs)
        return self.event_id

    async def delete_event(self, event_id):
        if self.fail_with is not None:
            raise self.fail_with
        self.deleted.append(event_id)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    A fresh file-backed SQLite database per test.
    """
    test_engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'slotwise-test.db'}",
        poolclass=NullPool,
    )
    await create_schema(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(db) -> Seeded:
    return await seed_schedule(db)


@pytest.fixture
def client(tmp_path) -> TestClient:
    """
    TestClient bound to a throwaway database, a frozen clock and no
    external calendar.
    """
    api_engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'slotwise-api.db'}",
        poolclass=NullPool,
    )
    asyncio.run(create_schema(api_engine))
    SessionLocal = build_sessionmaker(api_engine)

    async def _get_test_db():
        async with SessionLocal() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    app.dependency_overrides[get_calendar_client_factory] = lambda: None

    # No lifespan: the schema is created above, not by the startup hook.
    yield TestClient(app)

    asyncio.run(api_engine.dispose())


def register_host(client: TestClient, username: str = "ada", timezone_name: str = "UTC") -> dict:
    """
    Create a host through the API and return auth headers for it.
    """
    resp = client.post(
        "/users",
        json={
            "email": f"{username}@example.com",
            "name": username.title(),
            "username": username,
            "timezone": timezone_name,
        },
    )
    assert resp.status_code == 201, resp.text
    return {"X-User-Id": str(resp.json()["id"])}


@pytest.fixture
def host_headers(client) -> dict:
    return register_host(client)


@pytest.fixture
def bookable(client, host_headers) -> int:
    """
    A 30 minute event type with Monday 09:00-17:00 UTC availability.
    Returns the event type id.
    """
    resp = client.post(
        "/event-types",
        json={"name": "30 Minute Meeting", "slug": "30min", "duration_minutes": 30},
        headers=host_headers,
    )
    assert resp.status_code == 201, resp.text

    resp = client.put(
        "/availability",
        json={
            "availability": [
                {"day_of_week": MONDAY, "start_time": "09:00", "end_time": "17:00", "timezone": "UTC"}
            ]
        },
        headers=host_headers,
    )
    assert resp.status_code == 200, resp.text
    return client.get("/event-types", headers=host_headers).json()[0]["id"]
