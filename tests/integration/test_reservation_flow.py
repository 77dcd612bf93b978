"""
Integration tests for the reservation flow: config -> batch -> calendar host.

Tests the complete scheduled run:
- Business-day, by-date and explicit reservations in one batch
- Holidays read from the host's holiday calendar plus the company table
- Reminders and guests installed through the Google Calendar adapter
- Reruns skip everything already on the calendar
- Transient host failures retried with backoff

The Google Calendar API is replaced by a stateful fake behind httpx.MockTransport.
"""

import json
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import httpx
import pytest

from workcal.batch.runner import ReservationContext, run_reservation_batch
from workcal.config_models import BatchOptions
from workcal.host.google_calendar import CALENDAR_API_BASE, GoogleCalendarHost
from workcal.models import ErrorKind, OutcomeStatus, ReservationRequest
from workcal.settings import DEFAULT_HOLIDAY_CALENDAR_ID


TOKYO = ZoneInfo("Asia/Tokyo")
CALENDARS_PREFIX = "/calendar/v3/calendars/"


class StatefulCalendarApi:
    """In-process Calendar v3 API holding events per calendar."""

    def __init__(self):
        self.events: dict[str, list[dict]] = {"primary": [], DEFAULT_HOLIDAY_CALENDAR_ID: []}
        self.fail_next_posts = 0
        self.post_count = 0
        self._next_id = 0

    def add_holiday(self, day: date, title: str) -> None:
        self.events[DEFAULT_HOLIDAY_CALENDAR_ID].append({
            "id": f"holiday-{day.isoformat()}",
            "summary": title,
            "start": {"date": day.isoformat()},
            "end": {"date": (day + timedelta(days=1)).isoformat()},
        })

    @staticmethod
    def _bound(value: dict) -> datetime:
        if "date" in value:
            return datetime.combine(date.fromisoformat(value["date"]), time.min, tzinfo=TOKYO)
        return datetime.fromisoformat(value["dateTime"].replace("Z", "+00:00"))

    def _list(self, calendar_id: str, request: httpx.Request) -> httpx.Response:
        time_min = datetime.fromisoformat(request.url.params["timeMin"])
        time_max = datetime.fromisoformat(request.url.params["timeMax"])
        items = [
            item for item in self.events[calendar_id]
            if self._bound(item["start"]) < time_max and self._bound(item["end"]) > time_min
        ]
        return httpx.Response(200, json={"items": items})

    def _create(self, calendar_id: str, request: httpx.Request) -> httpx.Response:
        self.post_count += 1
        if self.fail_next_posts:
            self.fail_next_posts -= 1
            return httpx.Response(503, json={"error": {"message": "Backend Error"}})

        self._next_id += 1
        item = {"id": f"evt{self._next_id}", "status": "confirmed", **json.loads(request.content)}
        item["reminders"] = {"useDefault": True}
        self.events[calendar_id].append(item)
        return httpx.Response(200, json=item)

    def _patch(self, calendar_id: str, event_id: str, request: httpx.Request) -> httpx.Response:
        for item in self.events[calendar_id]:
            if item["id"] == event_id:
                item.update(json.loads(request.content))
                return httpx.Response(200, json=item)
        return httpx.Response(404)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path[len(CALENDARS_PREFIX):].split("/")
        calendar_id = parts[0]
        if calendar_id not in self.events:
            return httpx.Response(404, json={"error": {"message": "Not Found"}})

        if len(parts) == 1:
            return httpx.Response(200, json={"id": calendar_id, "timeZone": "Asia/Tokyo"})
        if len(parts) == 2 and request.method == "GET":
            return self._list(calendar_id, request)
        if len(parts) == 2 and request.method == "POST":
            return self._create(calendar_id, request)
        if len(parts) == 3 and request.method == "PATCH":
            return self._patch(calendar_id, parts[2], request)
        return httpx.Response(405)

    def primary_events(self) -> list[dict]:
        return self.events["primary"]


@pytest.fixture
def api() -> StatefulCalendarApi:
    api = StatefulCalendarApi()
    api.add_holiday(date(2026, 1, 1), "New Year's Day")
    api.add_holiday(date(2026, 1, 12), "Coming of Age Day")
    return api


@pytest.fixture
def google_host(api):
    client = httpx.Client(base_url=CALENDAR_API_BASE, transport=httpx.MockTransport(api))
    host = GoogleCalendarHost(access_token="ya29.test", client=client)
    yield host
    host.close()


@pytest.fixture
def context(google_host, settings, company_holidays, record_sleep) -> ReservationContext:
    return ReservationContext(
        host=google_host,
        settings=settings,
        company_holidays=company_holidays,
        sleep=record_sleep,
        today=date(2025, 12, 10),
    )


@pytest.fixture
def requests() -> list[ReservationRequest]:
    return [
        ReservationRequest.from_dict({
            "type": "businessDay",
            "title": "Expense report",
            "year_month": "current",
            "business_day_type": "last",
            "all_day": True,
        }),
        ReservationRequest.from_dict({
            "type": "businessDay",
            "title": "Kickoff prep",
            "year_month": "next",
            "business_day_type": "first",
            "all_day": True,
        }),
        ReservationRequest.from_dict({
            "type": "date",
            "title": "Kickoff",
            "year": 2026,
            "month": 1,
            "day": 5,
            "start_time_str": "09:00",
            "end_time_str": "09:30",
            "guests": ["team@example.com"],
            "reminder": {"popup": 10, "email": [1440]},
        }),
        ReservationRequest.from_dict({
            "type": "basic",
            "title": "Offsite",
            "all_day": True,
            "start_date": "2026-01-15",
            "end_date": "2026-01-16",
        }),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Full Run
# ─────────────────────────────────────────────────────────────────────────────


class TestReservationRun:
    def test_registers_every_reservation(self, context, requests, api):
        result = run_reservation_batch(context, requests=requests, options=BatchOptions())

        assert result.success_count == 4
        assert result.failure_count == 0

        by_title = {item["summary"]: item for item in api.primary_events()}
        # Year-end closure moves the last business day to Friday the 26th
        assert by_title["Expense report"]["start"] == {"date": "2025-12-26"}
        # Jan 1 public holiday, Jan 2 company holiday
        assert by_title["Kickoff prep"]["start"] == {"date": "2026-01-05"}
        assert by_title["Kickoff"]["start"]["dateTime"] == "2026-01-05T09:00:00+09:00"
        assert by_title["Offsite"]["end"] == {"date": "2026-01-17"}

    def test_reminders_and_guests(self, context, requests, api):
        result = run_reservation_batch(context, requests=requests, options=BatchOptions())

        by_title = {item["summary"]: item for item in api.primary_events()}
        kickoff = by_title["Kickoff"]
        assert kickoff["attendees"] == [{"email": "team@example.com"}]
        assert kickoff["reminders"] == {"useDefault": False, "overrides": [
            {"method": "email", "minutes": 1440},
            {"method": "popup", "minutes": 10},
        ]}
        assert by_title["Expense report"]["reminders"]["overrides"] == [{"method": "popup", "minutes": 30}]

        kickoff_result = result.results[2].result
        assert kickoff_result.event_url == f"https://calendar.google.com/calendar/event?eid={kickoff['id']}"
        assert result.results[0].result.event_url is None

    def test_rerun_creates_nothing(self, context, requests, api):
        run_reservation_batch(context, requests=requests, options=BatchOptions())
        posts_after_first_run = api.post_count

        result = run_reservation_batch(context, requests=requests, options=BatchOptions())

        assert [o.result.status for o in result.results] == [OutcomeStatus.SKIPPED] * 4
        assert api.post_count == posts_after_first_run
        assert len(api.primary_events()) == 4

    def test_transient_failure_retried(self, context, requests, api, sleeps):
        api.fail_next_posts = 2

        result = run_reservation_batch(context, requests=requests[:1], options=BatchOptions())

        assert result.results[0].result.status is OutcomeStatus.CREATED
        assert api.post_count == 3
        assert sleeps == [1.0, 2.0]
        assert len(api.primary_events()) == 1

    def test_persistent_failure_isolated(self, context, requests, api, sleeps):
        api.fail_next_posts = 3

        result = run_reservation_batch(context, requests=requests[:2], options=BatchOptions())

        first, second = (o.result for o in result.results)
        assert first.error_kind is ErrorKind.RETRY_EXHAUSTED
        assert "503" in first.error
        assert second.status is OutcomeStatus.CREATED
        assert sleeps == [1.0, 2.0]

    def test_missing_calendar_fails_item(self, context, requests, api):
        requests[0].calendar_id = "someone-else@example.com"

        result = run_reservation_batch(
            context, requests=requests[:1], options=BatchOptions(max_retries=1),
        )

        failed = result.results[0].result
        assert failed.error_kind is ErrorKind.RETRY_EXHAUSTED
        assert "Calendar not found" in failed.error
