# tests/test_busy_aggregator.py
from datetime import datetime, timezone

import pytest

from conftest import FakeCalendarClient, connect_calendar
from slotwise.models.booking import Booking
from slotwise.services.busy_aggregator import collect_busy, confirmed_bookings_between
from slotwise.services.calendar_client import CalendarClientError
from slotwise.services.overlap import BusyInterval

DAY_START = datetime(2025, 6, 2, 0, 0, tzinfo=timezone.utc)
DAY_END = datetime(2025, 6, 3, 0, 0, tzinfo=timezone.utc)


def _booking(seeded, start_hour: int, status: str = "confirmed") -> Booking:
    return Booking(
        event_type_id=seeded.event_type_id,
        user_id=seeded.host_id,
        attendee_name="Grace Hopper",
        attendee_email="grace@example.com",
        start_time=datetime(2025, 6, 2, start_hour, 0),
        end_time=datetime(2025, 6, 2, start_hour, 30),
        timezone="UTC",
        status=status,
    )


@pytest.mark.asyncio
async def test_only_confirmed_bookings_inside_window_are_busy(db, seeded):
    db.add_all(
        [
            _booking(seeded, 10),
            _booking(seeded, 11, status="cancelled"),
        ]
    )
    db.add(
        Booking(
            event_type_id=seeded.event_type_id,
            user_id=seeded.host_id,
            attendee_name="Next Day",
            attendee_email="next@example.com",
            start_time=datetime(2025, 6, 3, 9, 0),
            end_time=datetime(2025, 6, 3, 9, 30),
            timezone="UTC",
            status="confirmed",
        )
    )
    await db.commit()

    busy = await collect_busy(db, seeded.host_id, DAY_START, DAY_END, calendar_client_factory=None)

    assert busy == [
        BusyInterval(
            start=datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc),
            end=datetime(2025, 6, 2, 10, 30, tzinfo=timezone.utc),
            source="booking",
        )
    ]


@pytest.mark.asyncio
async def test_window_edges_use_exclusive_overlap(db, seeded):
    db.add(_booking(seeded, 10))
    await db.commit()

    touching_before = await confirmed_bookings_between(
        db,
        seeded.host_id,
        datetime(2025, 6, 2, 9, 30, tzinfo=timezone.utc),
        datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc),
    )
    touching_after = await confirmed_bookings_between(
        db,
        seeded.host_id,
        datetime(2025, 6, 2, 10, 30, tzinfo=timezone.utc),
        datetime(2025, 6, 2, 11, 0, tzinfo=timezone.utc),
    )
    overlapping = await confirmed_bookings_between(
        db,
        seeded.host_id,
        datetime(2025, 6, 2, 10, 15, tzinfo=timezone.utc),
        datetime(2025, 6, 2, 10, 45, tzinfo=timezone.utc),
    )

    assert touching_before == []
    assert touching_after == []
    assert len(overlapping) == 1


@pytest.mark.asyncio
async def test_external_busy_intervals_are_merged_in(db, seeded):
    await connect_calendar(db, seeded.host_id)
    external = BusyInterval(
        start=datetime(2025, 6, 2, 14, 0, tzinfo=timezone.utc),
        end=datetime(2025, 6, 2, 15, 0, tzinfo=timezone.utc),
        source="external",
    )
    fake = FakeCalendarClient(busy=[external])

    busy = await collect_busy(
        db, seeded.host_id, DAY_START, DAY_END, calendar_client_factory=lambda conn: fake
    )

    assert busy == [external]
    assert fake.busy_calls == [(DAY_START, DAY_END)]


@pytest.mark.asyncio
async def test_no_connection_means_no_external_lookup(db, seeded):
    def _factory(connection):
        raise AssertionError("calendar client must not be built without a connection")

    busy = await collect_busy(db, seeded.host_id, DAY_START, DAY_END, calendar_client_factory=_factory)
    assert busy == []


@pytest.mark.asyncio
async def test_external_failure_degrades_to_internal_bookings(db, seeded, caplog):
    db.add(_booking(seeded, 10))
    await db.commit()
    await connect_calendar(db, seeded.host_id)
    fake = FakeCalendarClient(fail_with=CalendarClientError("timeout"))

    with caplog.at_level("WARNING"):
        busy = await collect_busy(
            db, seeded.host_id, DAY_START, DAY_END, calendar_client_factory=lambda conn: fake
        )

    assert [b.source for b in busy] == ["booking"]
    assert "External calendar busy lookup failed" in caplog.text


@pytest.mark.asyncio
async def test_missing_oauth_credentials_degrade_too(db, seeded):
    """
    The default factory refuses to build a client without GOOGLE_CLIENT_ID /
    GOOGLE_CLIENT_SECRET; that failure is swallowed like any other.
    """
    await connect_calendar(db, seeded.host_id)

    busy = await collect_busy(db, seeded.host_id, DAY_START, DAY_END)

    assert busy == []
