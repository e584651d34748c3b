# tests/test_users_api.py
from http import HTTPStatus

from conftest import register_host


def test_register_user_normalizes_and_defaults_timezone(client):
    resp = client.post(
        "/users",
        json={"email": " Ada@Example.com ", "name": "Ada Lovelace", "username": "Ada"},
    )

    assert resp.status_code == HTTPStatus.CREATED
    data = resp.json()
    assert data["email"] == "ada@example.com"
    assert data["username"] == "ada"
    assert data["timezone"] == "UTC"


def test_duplicate_username_is_a_conflict(client):
    register_host(client, "ada")

    resp = client.post(
        "/users",
        json={"email": "other@example.com", "name": "Other", "username": "ada"},
    )
    assert resp.status_code == HTTPStatus.CONFLICT


def test_unknown_timezone_is_rejected(client):
    resp = client.post(
        "/users",
        json={"email": "tz@example.com", "name": "Tz", "username": "tzuser", "timezone": "Nowhere/Land"},
    )
    assert resp.status_code == HTTPStatus.BAD_REQUEST
    assert "Unknown timezone" in resp.json()["detail"]


def test_invalid_username_is_unprocessable(client):
    resp = client.post(
        "/users",
        json={"email": "x@example.com", "name": "Xavier", "username": "no spaces!"},
    )
    assert resp.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_public_profile_lists_only_active_event_types(client):
    headers = register_host(client, "ada")
    client.post(
        "/event-types",
        json={"name": "Intro", "slug": "intro", "duration_minutes": 15},
        headers=headers,
    )
    client.post(
        "/event-types",
        json={"name": "Hidden", "slug": "hidden", "duration_minutes": 60, "is_active": False},
        headers=headers,
    )

    resp = client.get("/users/ada")

    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["user"]["username"] == "ada"
    assert "email" not in data["user"]
    assert [et["slug"] for et in data["event_types"]] == ["intro"]


def test_public_event_type_lookup(client):
    headers = register_host(client, "ada", timezone_name="Europe/London")
    client.post(
        "/event-types",
        json={"name": "Intro", "slug": "intro", "duration_minutes": 15},
        headers=headers,
    )
    client.post(
        "/event-types",
        json={"name": "Hidden", "slug": "hidden", "duration_minutes": 60, "is_active": False},
        headers=headers,
    )

    resp = client.get("/users/ada/events/intro")
    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["host_username"] == "ada"
    assert data["host_timezone"] == "Europe/London"
    assert data["duration_minutes"] == 15

    assert client.get("/users/ada/events/hidden").status_code == HTTPStatus.NOT_FOUND
    assert client.get("/users/nobody").status_code == HTTPStatus.NOT_FOUND
