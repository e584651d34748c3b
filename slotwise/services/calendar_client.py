# slotwise/services/calendar_client.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional

import httpx

from slotwise.core.config import get_settings
from slotwise.core.timeutils import as_utc
from slotwise.models.calendar_connection import CalendarConnection
from slotwise.services.overlap import BusyInterval

DEFAULT_TOKEN_URL = "https://oauth2.googleapis.com/token"
DEFAULT_BASE_URL = "https://www.googleapis.com/calendar/v3"


class CalendarClientError(RuntimeError):
    """
    Raised when the calendar client cannot obtain an access token or when a
    Calendar API call fails in a non-recoverable way.
    """


@dataclass
class _TokenState:
    access_token: str
    expires_at: datetime


class GoogleCalendarClient:
    """
    Minimal Google Calendar API client for a single connected host.

    Responsibilities
    ----------------
    - Exchange the stored refresh token for access tokens and cache them.
    - Query free/busy intervals for a time window.
    - Create and delete the calendar event mirroring a booking.

    Notes
    -----
    - Token caching is in-memory for this client instance only.
    - A stored access token (if any) is tried first; on a 401 the client
      refreshes once and retries.
    - Every HTTP call is bounded by `timeout_seconds`.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        access_token: str | None = None,
        calendar_id: str = "primary",
        token_url: str = DEFAULT_TOKEN_URL,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 5.0,
    ) -> None:
        if not client_id or not client_secret or not refresh_token:
            raise ValueError("client_id, client_secret and refresh_token are required")

        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._calendar_id = calendar_id
        self._token_url = token_url
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

        self._token_state: Optional[_TokenState] = None
        if access_token:
            # Expiry unknown: trust it until the API answers 401.
            self._token_state = _TokenState(
                access_token=access_token,
                expires_at=datetime.max.replace(tzinfo=timezone.utc),
            )

    @property
    def calendar_id(self) -> str:
        return self._calendar_id

    async def _fetch_token(self) -> _TokenState:
        """
        Obtain a fresh access token using the refresh-token grant.
        """
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "refresh_token",
            "refresh_token": self._refresh_token,
        }

        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            resp = await client.post(self._token_url, data=data)

        if resp.status_code != HTTPStatus.OK:
            raise CalendarClientError(
                f"Failed to refresh calendar token (status={resp.status_code}): {resp.text}"
            )

        payload = resp.json()
        access_token = payload.get("access_token")
        expires_in = payload.get("expires_in")

        if not access_token or not isinstance(expires_in, (int, float)):
            raise CalendarClientError(
                "Invalid token response (missing access_token/expires_in)"
            )

        # Refresh slightly before the real expiry.
        now = datetime.now(tz=timezone.utc)
        safety_margin = 60  # seconds
        expires_at = now + timedelta(seconds=float(expires_in) - safety_margin)

        return _TokenState(access_token=access_token, expires_at=expires_at)

    async def get_access_token(self) -> str:
        """
        Return a valid access token, using a cached value if still valid.
        """
        now = datetime.now(tz=timezone.utc)
        if self._token_state and self._token_state.expires_at > now:
            return self._token_state.access_token

        self._token_state = await self._fetch_token()
        return self._token_state.access_token

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        params: Optional[Dict[str, Any]],
        json: Any,
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            return await client.request(
                method=method.upper(),
                url=url,
                headers=headers,
                params=params,
                json=json,
            )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Issue an authenticated request against the Calendar API.

        Transport errors (timeouts, connection failures) are wrapped in
        CalendarClientError so callers deal with one exception type.
        """
        if path.startswith("http://") or path.startswith("https://"):
            url = path
        else:
            url = f"{self._base_url}/{path.lstrip('/')}"

        try:
            token = await self.get_access_token()
            resp = await self._send(method, url, token, params, json)
            if resp.status_code == HTTPStatus.UNAUTHORIZED:
                self._token_state = await self._fetch_token()
                resp = await self._send(method, url, self._token_state.access_token, params, json)
        except httpx.HTTPError as exc:
            raise CalendarClientError(f"Calendar request failed: {exc!r}") from exc

        return resp

    async def get_busy_intervals(
        self,
        time_min: datetime,
        time_max: datetime,
    ) -> list[BusyInterval]:
        """
        Query the free/busy endpoint for [time_min, time_max).
        """
        body = {
            "timeMin": as_utc(time_min).isoformat(),
            "timeMax": as_utc(time_max).isoformat(),
            "items": [{"id": self._calendar_id}],
        }
        resp = await self._request("POST", "/freeBusy", json=body)
        if resp.status_code // 100 != 2:
            raise CalendarClientError(
                f"Calendar freeBusy failed (status={resp.status_code}): {resp.text}"
            )

        calendar = resp.json().get("calendars", {}).get(self._calendar_id, {})
        if calendar.get("errors"):
            raise CalendarClientError(f"Calendar freeBusy errors: {calendar['errors']}")

        intervals: list[BusyInterval] = []
        for busy in calendar.get("busy", []):
            intervals.append(
                BusyInterval(
                    start=as_utc(datetime.fromisoformat(busy["start"].replace("Z", "+00:00"))),
                    end=as_utc(datetime.fromisoformat(busy["end"].replace("Z", "+00:00"))),
                    source="external",
                )
            )
        return intervals

    async def create_event(
        self,
        *,
        summary: str,
        description: str,
        start: datetime,
        end: datetime,
        attendee_email: str,
        timezone_name: str,
    ) -> str | None:
        """
        Create a calendar event and return its id (None if the API omitted it).
        """
        body = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": as_utc(start).isoformat(), "timeZone": timezone_name},
            "end": {"dateTime": as_utc(end).isoformat(), "timeZone": timezone_name},
            "attendees": [{"email": attendee_email}],
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": 24 * 60},
                    {"method": "popup", "minutes": 30},
                ],
            },
        }
        resp = await self._request("POST", f"/calendars/{self._calendar_id}/events", json=body)
        if resp.status_code // 100 != 2:
            raise CalendarClientError(
                f"Calendar event creation failed (status={resp.status_code}): {resp.text}"
            )
        return resp.json().get("id")

    async def delete_event(self, event_id: str) -> None:
        """
        Delete a calendar event. An event that is already gone is not an error.
        """
        resp = await self._request("DELETE", f"/calendars/{self._calendar_id}/events/{event_id}")
        if resp.status_code in (HTTPStatus.NOT_FOUND, HTTPStatus.GONE):
            return
        if resp.status_code // 100 != 2:
            raise CalendarClientError(
                f"Calendar event deletion failed (status={resp.status_code}): {resp.text}"
            )


CalendarClientFactory = Callable[[CalendarConnection], GoogleCalendarClient]


def build_calendar_client(connection: CalendarConnection) -> GoogleCalendarClient:
    """
    Construct a client for `connection` using the application's OAuth
    client credentials.
    """
    settings = get_settings()
    if not settings.GOOGLE_CLIENT_ID or not settings.GOOGLE_CLIENT_SECRET:
        raise CalendarClientError(
            "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be configured to "
            "talk to connected calendars."
        )
    return GoogleCalendarClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        refresh_token=connection.refresh_token,
        access_token=connection.access_token,
        calendar_id=connection.calendar_id or "primary",
        token_url=str(settings.GOOGLE_TOKEN_URL or DEFAULT_TOKEN_URL),
        base_url=str(settings.GOOGLE_CALENDAR_BASE_URL or DEFAULT_BASE_URL),
        timeout_seconds=settings.EXTERNAL_CALENDAR_TIMEOUT_SECONDS,
    )
