# tests/test_bookings_api.py
from http import HTTPStatus


def _build_booking_payload(event_type_id: int, start_time: str = "2025-06-02T10:00:00Z", **extra) -> dict:
    return {
        "event_type_id": event_type_id,
        "attendee_name": "Grace Hopper",
        "attendee_email": "grace@example.com",
        "start_time": start_time,
        "timezone": "Europe/Berlin",
        **extra,
    }


def test_create_booking_success(client, bookable):
    resp = client.post("/bookings", json=_build_booking_payload(bookable, attendee_notes="  Agenda  "))

    assert resp.status_code == HTTPStatus.CREATED
    data = resp.json()
    assert data["status"] == "confirmed"
    assert data["start_time"].startswith("2025-06-02T10:00:00")
    assert data["end_time"].startswith("2025-06-02T10:30:00")
    assert data["attendee_notes"] == "Agenda"
    assert data["timezone"] == "Europe/Berlin"


def test_booking_taken_slot_is_a_conflict(client, bookable):
    first = client.post("/bookings", json=_build_booking_payload(bookable))
    second = client.post(
        "/bookings",
        json=_build_booking_payload(bookable, "2025-06-02T10:15:00Z", attendee_email="late@example.com"),
    )

    assert first.status_code == HTTPStatus.CREATED
    assert second.status_code == HTTPStatus.CONFLICT
    assert second.json()["detail"] == "Time slot is no longer available."


def test_booking_validation_errors(client, bookable):
    past = client.post("/bookings", json=_build_booking_payload(bookable, "2025-05-30T10:00:00Z"))
    bad_tz = client.post("/bookings", json=_build_booking_payload(bookable, timezone="Not/Real"))
    region_tz = client.post("/bookings", json=_build_booking_payload(bookable, timezone="America"))
    bad_email = client.post(
        "/bookings", json=_build_booking_payload(bookable, attendee_email="not-an-email")
    )
    unknown_event = client.post("/bookings", json=_build_booking_payload(9999))

    assert past.status_code == HTTPStatus.BAD_REQUEST
    assert bad_tz.status_code == HTTPStatus.BAD_REQUEST
    assert region_tz.status_code == HTTPStatus.BAD_REQUEST
    assert bad_email.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert unknown_event.status_code == HTTPStatus.NOT_FOUND


def test_booking_deactivated_event_type_is_not_found(client, host_headers, bookable):
    client.patch(f"/event-types/{bookable}", json={"is_active": False}, headers=host_headers)

    resp = client.post("/bookings", json=_build_booking_payload(bookable))
    assert resp.status_code == HTTPStatus.NOT_FOUND
    assert resp.json()["detail"] == "Event type not found or inactive."


def test_get_booking_public_view(client, bookable):
    created = client.post("/bookings", json=_build_booking_payload(bookable)).json()

    resp = client.get(f"/bookings/{created['id']}")
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["id"] == created["id"]

    assert client.get("/bookings/9999").status_code == HTTPStatus.NOT_FOUND


def test_cancel_then_cancel_again(client, bookable):
    created = client.post("/bookings", json=_build_booking_payload(bookable)).json()

    first = client.put(f"/bookings/{created['id']}/cancel", json={"reason": "Conflict at work"})
    second = client.put(f"/bookings/{created['id']}/cancel", json={})

    assert first.status_code == HTTPStatus.OK
    assert first.json()["status"] == "cancelled"
    assert first.json()["cancellation_reason"] == "Conflict at work"
    assert second.status_code == HTTPStatus.CONFLICT
    assert second.json()["detail"] == "Booking already cancelled."


def test_cancelled_slot_becomes_available_again(client, bookable):
    created = client.post("/bookings", json=_build_booking_payload(bookable)).json()
    client.put(f"/bookings/{created['id']}/cancel", json={})

    slots = client.get(
        "/availability/slots", params={"date": "2025-06-02", "event_type_id": bookable}
    ).json()["slots"]
    assert all(s["available"] for s in slots)


def test_reschedule_moves_booking(client, bookable):
    created = client.post("/bookings", json=_build_booking_payload(bookable)).json()

    resp = client.post(
        f"/bookings/{created['id']}/reschedule",
        json={"start_time": "2025-06-02T15:00:00Z", "timezone": "UTC"},
    )

    assert resp.status_code == HTTPStatus.CREATED
    moved = resp.json()
    assert moved["rescheduled_from_id"] == created["id"]
    assert moved["start_time"].startswith("2025-06-02T15:00:00")
    assert moved["timezone"] == "UTC"
    assert client.get(f"/bookings/{created['id']}").json()["status"] == "cancelled"


def test_host_lists_bookings(client, host_headers, bookable):
    kept = client.post("/bookings", json=_build_booking_payload(bookable)).json()
    dropped = client.post(
        "/bookings", json=_build_booking_payload(bookable, "2025-06-02T11:00:00Z")
    ).json()
    client.put(f"/bookings/{dropped['id']}/cancel", json={})

    confirmed = client.get("/bookings", headers=host_headers).json()
    cancelled = client.get("/bookings", params={"status": "cancelled"}, headers=host_headers).json()
    upcoming = client.get("/bookings", params={"upcoming": "true"}, headers=host_headers).json()

    assert [b["id"] for b in confirmed] == [kept["id"]]
    assert [b["id"] for b in cancelled] == [dropped["id"]]
    assert [b["id"] for b in upcoming] == [kept["id"]]
    assert client.get("/bookings").status_code == HTTPStatus.UNAUTHORIZED
