# tests/test_date_overrides_api.py
from http import HTTPStatus


def _slots(client, event_type_id: int, day: str = "2025-06-02") -> list:
    resp = client.get("/availability/slots", params={"date": day, "event_type_id": event_type_id})
    assert resp.status_code == HTTPStatus.OK
    return resp.json()["slots"]


def test_blocking_override_empties_the_day(client, host_headers, bookable):
    resp = client.post(
        "/date-overrides",
        json={"date": "2025-06-02", "is_available": False},
        headers=host_headers,
    )

    assert resp.status_code == HTTPStatus.CREATED
    data = resp.json()
    assert data["count"] == 1
    assert data["warning_bookings"] is None
    assert _slots(client, bookable) == []


def test_custom_hours_override_is_used_instead_of_rule(client, host_headers, bookable):
    client.post(
        "/date-overrides",
        json={"date": "2025-06-02", "is_available": True, "start_time": "13:00", "end_time": "14:00"},
        headers=host_headers,
    )

    starts = [s["start"][11:16] for s in _slots(client, bookable)]
    assert starts == ["13:00", "13:30"]


def test_single_date_override_is_upserted(client, host_headers, bookable):
    client.post(
        "/date-overrides", json={"date": "2025-06-02", "is_available": False}, headers=host_headers
    )
    client.post(
        "/date-overrides",
        json={"date": "2025-06-02", "is_available": True, "start_time": "10:00", "end_time": "11:00"},
        headers=host_headers,
    )

    overrides = client.get("/date-overrides", headers=host_headers).json()
    assert len(overrides) == 1
    assert overrides[0]["is_available"] is True
    assert overrides[0]["start_time"] == "10:00:00"


def test_range_creates_one_override_per_day_and_replaces_existing(client, host_headers, bookable):
    client.post(
        "/date-overrides",
        json={"date": "2025-06-03", "is_available": True, "start_time": "10:00", "end_time": "11:00"},
        headers=host_headers,
    )

    resp = client.post(
        "/date-overrides",
        json={"start_date": "2025-06-02", "end_date": "2025-06-06", "is_available": False},
        headers=host_headers,
    )

    assert resp.status_code == HTTPStatus.CREATED
    assert resp.json()["count"] == 5

    overrides = client.get("/date-overrides", headers=host_headers).json()
    assert [o["date"] for o in overrides] == [
        "2025-06-02",
        "2025-06-03",
        "2025-06-04",
        "2025-06-05",
        "2025-06-06",
    ]
    assert all(o["is_available"] is False for o in overrides)

    window = client.get(
        "/date-overrides",
        params={"start_date": "2025-06-03", "end_date": "2025-06-04"},
        headers=host_headers,
    ).json()
    assert len(window) == 2


def test_override_on_booked_day_reports_warning_bookings(client, host_headers, bookable):
    booking = client.post(
        "/bookings",
        json={
            "event_type_id": bookable,
            "attendee_name": "Grace Hopper",
            "attendee_email": "grace@example.com",
            "start_time": "2025-06-02T10:00:00Z",
            "timezone": "UTC",
        },
    ).json()

    resp = client.post(
        "/date-overrides", json={"date": "2025-06-02", "is_available": False}, headers=host_headers
    )

    warnings = resp.json()["warning_bookings"]
    assert [w["id"] for w in warnings] == [booking["id"]]
    # The booking itself is kept.
    assert client.get(f"/bookings/{booking['id']}").json()["status"] == "confirmed"


def test_past_dates_and_bad_ranges_are_rejected(client, host_headers):
    past = client.post(
        "/date-overrides", json={"date": "2025-05-31", "is_available": False}, headers=host_headers
    )
    backwards = client.post(
        "/date-overrides",
        json={"start_date": "2025-06-06", "end_date": "2025-06-02", "is_available": False},
        headers=host_headers,
    )
    half_hours = client.post(
        "/date-overrides",
        json={"date": "2025-06-02", "is_available": True, "start_time": "10:00"},
        headers=host_headers,
    )

    assert past.status_code == HTTPStatus.BAD_REQUEST
    assert backwards.status_code == HTTPStatus.BAD_REQUEST
    assert half_hours.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_update_and_delete_override(client, host_headers, bookable):
    created = client.post(
        "/date-overrides", json={"date": "2025-06-02", "is_available": False}, headers=host_headers
    ).json()["overrides"][0]

    updated = client.patch(
        f"/date-overrides/{created['id']}",
        json={"is_available": True, "start_time": "09:00", "end_time": "10:00"},
        headers=host_headers,
    )
    assert updated.status_code == HTTPStatus.OK
    assert len(_slots(client, bookable)) == 2

    invalid = client.patch(
        f"/date-overrides/{created['id']}",
        json={"start_time": "11:00"},
        headers=host_headers,
    )
    assert invalid.status_code == HTTPStatus.BAD_REQUEST

    deleted = client.delete(f"/date-overrides/{created['id']}", headers=host_headers)
    assert deleted.status_code == HTTPStatus.NO_CONTENT
    assert len(_slots(client, bookable)) == 16
    assert client.delete(
        f"/date-overrides/{created['id']}", headers=host_headers
    ).status_code == HTTPStatus.NOT_FOUND
