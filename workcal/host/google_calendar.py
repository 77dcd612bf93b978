"""
Tool: Google Calendar Host
Purpose: Google Calendar API v3 adapter for the reservation engine

Implements the CalendarHost interface over the REST API with a bearer token.
Reminders are managed as event-level overrides (useDefault disabled), which
is how the API expresses "clear host defaults, then add these".

Usage:
    from workcal.host.google_calendar import GoogleCalendarHost

    host = GoogleCalendarHost(access_token=os.environ["WORKCAL_GOOGLE_TOKEN"])
    calendar = host.get_calendar_by_id("primary")
    event = calendar.create_all_day_event("Expense report", date(2026, 3, 31))

Dependencies:
    - httpx
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any
from urllib.parse import quote
from zoneinfo import ZoneInfo

import httpx

from workcal.host.base import CalendarHost, EventOptions, HostCalendar, HostEvent
from workcal.logging_config import get_logger

logger = get_logger(__name__)


# Google API endpoints
CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3"
PAGE_SIZE = 250


def _calendar_path(calendar_id: str) -> str:
    return f"/calendars/{quote(calendar_id, safe='')}"


class GoogleEvent(HostEvent):
    def __init__(self, calendar: GoogleCalendar, data: dict[str, Any]):
        self._calendar = calendar
        self._data = data
        self._overrides: list[dict[str, Any]] = list(
            data.get("reminders", {}).get("overrides", [])
        )

        start_data = data.get("start", {})
        end_data = data.get("end", {})
        self._all_day = "date" in start_data

        if self._all_day:
            self._start = datetime.combine(
                date.fromisoformat(start_data["date"]), time.min, tzinfo=calendar.tz
            )
            self._end = datetime.combine(
                date.fromisoformat(end_data["date"]), time.min, tzinfo=calendar.tz
            )
        else:
            # Handle timezone offset
            self._start = datetime.fromisoformat(start_data.get("dateTime", "").replace("Z", "+00:00"))
            self._end = datetime.fromisoformat(end_data.get("dateTime", "").replace("Z", "+00:00"))

    @property
    def event_id(self) -> str:
        return self._data.get("id", "")

    @property
    def title(self) -> str:
        return self._data.get("summary", "")

    @property
    def start(self) -> datetime:
        return self._start

    @property
    def end(self) -> datetime:
        return self._end

    @property
    def all_day(self) -> bool:
        return self._all_day

    def _sync_reminders(self) -> None:
        self._calendar.host.request(
            "PATCH",
            f"{_calendar_path(self._calendar.calendar_id)}/events/{quote(self.event_id, safe='')}",
            json={"reminders": {"useDefault": False, "overrides": self._overrides}},
        )

    def remove_all_reminders(self) -> None:
        self._overrides = []
        self._sync_reminders()

    def add_email_reminder(self, minutes_before: int) -> None:
        self._overrides.append({"method": "email", "minutes": minutes_before})
        self._sync_reminders()

    def add_popup_reminder(self, minutes_before: int) -> None:
        self._overrides.append({"method": "popup", "minutes": minutes_before})
        self._sync_reminders()


class GoogleCalendar(HostCalendar):
    def __init__(self, host: GoogleCalendarHost, calendar_id: str, timezone: str = "UTC"):
        self.host = host
        self._calendar_id = calendar_id
        self.tz = ZoneInfo(timezone)

    @property
    def calendar_id(self) -> str:
        return self._calendar_id

    def _rfc3339(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.tz)
        return value.isoformat()

    def _date_time_body(self, value: datetime) -> dict[str, str]:
        body = {"dateTime": self._rfc3339(value)}
        tzinfo = value.tzinfo if value.tzinfo is not None else self.tz
        if isinstance(tzinfo, ZoneInfo):
            body["timeZone"] = tzinfo.key
        return body

    def _event_body(self, title: str, options: EventOptions | None) -> dict[str, Any]:
        body: dict[str, Any] = {"summary": title}
        if options:
            if options.description:
                body["description"] = options.description
            if options.location:
                body["location"] = options.location
            if options.guests:
                body["attendees"] = [{"email": guest} for guest in options.guests]
        return body

    def get_events(self, start: datetime, end: datetime) -> list[HostEvent]:
        params: dict[str, Any] = {
            "timeMin": self._rfc3339(start),
            "timeMax": self._rfc3339(end),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": PAGE_SIZE,
        }

        events: list[HostEvent] = []
        while True:
            data = self.host.request("GET", f"{_calendar_path(self.calendar_id)}/events", params=params)
            for item in data.get("items", []):
                if item.get("status") == "cancelled":
                    continue
                events.append(GoogleEvent(self, item))

            page_token = data.get("nextPageToken")
            if not page_token:
                return events
            params["pageToken"] = page_token

    def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        options: EventOptions | None = None,
    ) -> HostEvent:
        body = self._event_body(title, options)
        body["start"] = self._date_time_body(start)
        body["end"] = self._date_time_body(end)

        data = self.host.request("POST", f"{_calendar_path(self.calendar_id)}/events", json=body)
        return GoogleEvent(self, data)

    def create_all_day_event(
        self,
        title: str,
        start_date: date,
        end_date: date | None = None,
        options: EventOptions | None = None,
    ) -> HostEvent:
        if end_date is None:
            end_date = start_date + timedelta(days=1)

        body = self._event_body(title, options)
        body["start"] = {"date": start_date.isoformat()}
        body["end"] = {"date": end_date.isoformat()}

        data = self.host.request("POST", f"{_calendar_path(self.calendar_id)}/events", json=body)
        return GoogleEvent(self, data)


class GoogleCalendarHost(CalendarHost):
    """
    Google Calendar host.

    Args:
        access_token: OAuth bearer token with calendar scope
        client: Preconfigured httpx client (tests pass one with a MockTransport)
        timeout: Request timeout in seconds when no client is given
    """

    def __init__(
        self,
        access_token: str,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        self.access_token = access_token
        self._client = client or httpx.Client(base_url=CALENDAR_API_BASE, timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "google"

    def _get_headers(self) -> dict[str, str]:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> dict[str, Any]:
        """
        Make an authenticated API request.

        Returns:
            Decoded JSON body ({} for 204)

        Raises:
            httpx.HTTPStatusError: On non-2xx responses
            httpx.HTTPError: On network errors
        """
        response = self._client.request(
            method, path, headers=self._get_headers(), params=params, json=json
        )
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def get_calendar_by_id(self, calendar_id: str) -> HostCalendar | None:
        try:
            data = self.request("GET", _calendar_path(calendar_id))
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.warning(f"Calendar not found: {calendar_id}")
                return None
            raise
        return GoogleCalendar(self, calendar_id, data.get("timeZone", "UTC"))

    def close(self) -> None:
        self._client.close()
