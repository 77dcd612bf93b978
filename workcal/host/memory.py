"""
Tool: In-Memory Calendar Host
Purpose: Process-local calendar host for dry runs and tests

Behaves like a real host: events overlap-filtered by window, all-day events
with an exclusive end day, and host default reminders applied on creation
(so callers must clear them, exactly as with Google Calendar).

Usage:
    from workcal.host.memory import InMemoryCalendarHost

    host = InMemoryCalendarHost()
    calendar = host.get_calendar_by_id("primary")
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from workcal.host.base import CalendarHost, EventOptions, HostCalendar, HostEvent
from workcal.models import Reminder, ReminderChannel


class InMemoryEvent(HostEvent):
    def __init__(
        self,
        title: str,
        start: datetime,
        end: datetime,
        all_day: bool,
        options: EventOptions | None = None,
        reminders: list[Reminder] | None = None,
    ):
        self._event_id = f"event_{uuid.uuid4().hex[:12]}"
        self._title = title
        self._start = start
        self._end = end
        self._all_day = all_day
        self.options = options or EventOptions()
        self.reminders: list[Reminder] = list(reminders or [])

    @property
    def event_id(self) -> str:
        return self._event_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def start(self) -> datetime:
        return self._start

    @property
    def end(self) -> datetime:
        return self._end

    @property
    def all_day(self) -> bool:
        return self._all_day

    def remove_all_reminders(self) -> None:
        self.reminders.clear()

    def add_email_reminder(self, minutes_before: int) -> None:
        self.reminders.append(Reminder(ReminderChannel.EMAIL, minutes_before))

    def add_popup_reminder(self, minutes_before: int) -> None:
        self.reminders.append(Reminder(ReminderChannel.POPUP, minutes_before))

    def __repr__(self) -> str:
        return f"InMemoryEvent({self._title!r}, {self._start.isoformat()}, all_day={self._all_day})"


class InMemoryCalendar(HostCalendar):
    def __init__(self, calendar_id: str, tz: ZoneInfo, default_reminders: list[Reminder]):
        self._calendar_id = calendar_id
        self.tz = tz
        self.default_reminders = default_reminders
        self.events: list[InMemoryEvent] = []

    @property
    def calendar_id(self) -> str:
        return self._calendar_id

    def get_events(self, start: datetime, end: datetime) -> list[HostEvent]:
        return [e for e in self.events if e.start < end and e.end > start]

    def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        options: EventOptions | None = None,
    ) -> HostEvent:
        if start.tzinfo is None:
            start = start.replace(tzinfo=self.tz)
        if end.tzinfo is None:
            end = end.replace(tzinfo=self.tz)
        event = InMemoryEvent(title, start, end, False, options, self.default_reminders)
        self.events.append(event)
        return event

    def create_all_day_event(
        self,
        title: str,
        start_date: date,
        end_date: date | None = None,
        options: EventOptions | None = None,
    ) -> HostEvent:
        if end_date is None:
            end_date = start_date + timedelta(days=1)
        event = InMemoryEvent(
            title,
            datetime.combine(start_date, time.min, tzinfo=self.tz),
            datetime.combine(end_date, time.min, tzinfo=self.tz),
            True,
            options,
            self.default_reminders,
        )
        self.events.append(event)
        return event

    def add_holiday(self, title: str, day: date) -> HostEvent:
        """Seed a single-day all-day entry (holiday calendars)."""
        return self.create_all_day_event(title, day)


class InMemoryCalendarHost(CalendarHost):
    """
    Calendar host held entirely in memory.

    Args:
        timezone: Timezone for all-day boundaries and naive date-times
        calendar_ids: Calendars that exist up front ("primary" by default)
        default_reminders: Reminders the host applies to every new event
    """

    def __init__(
        self,
        timezone: str = "Asia/Tokyo",
        calendar_ids: list[str] | None = None,
        default_reminders: list[Reminder] | None = None,
    ):
        self.tz = ZoneInfo(timezone)
        if default_reminders is None:
            default_reminders = [Reminder(ReminderChannel.POPUP, 10)]
        self.default_reminders = default_reminders
        self.calendars: dict[str, InMemoryCalendar] = {}
        for calendar_id in calendar_ids or ["primary"]:
            self.add_calendar(calendar_id)

    @property
    def provider_name(self) -> str:
        return "memory"

    def add_calendar(self, calendar_id: str) -> InMemoryCalendar:
        calendar = InMemoryCalendar(calendar_id, self.tz, self.default_reminders)
        self.calendars[calendar_id] = calendar
        return calendar

    def get_calendar_by_id(self, calendar_id: str) -> HostCalendar | None:
        return self.calendars.get(calendar_id)
