"""
Tool: Calendar Host Base
Purpose: Abstract interface for the external calendar that reservations are written to

Defines the three seams the engine talks to: the host (calendar lookup),
a calendar (event listing and creation) and an event handle (read-only view
plus reminder management). Adapters implement these for a concrete service.

Usage:
    from workcal.host.base import CalendarHost
    from workcal.host.google_calendar import GoogleCalendarHost

    host = GoogleCalendarHost(access_token)
    calendar = host.get_calendar_by_id("primary")
    events = calendar.get_events(start, end)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass
class EventOptions:
    """Optional event fields passed through to the host on creation."""

    description: str | None = None
    location: str | None = None
    guests: list[str] = field(default_factory=list)

    @property
    def guest_csv(self) -> str | None:
        """Guests joined by commas, or None when there are none."""
        return ",".join(self.guests) if self.guests else None


class HostEvent(ABC):
    """
    Event as reported by the host.

    For all-day events, start is midnight of the first day in the calendar's
    timezone and end is midnight after the last day.
    """

    @property
    @abstractmethod
    def event_id(self) -> str:
        pass

    @property
    @abstractmethod
    def title(self) -> str:
        pass

    @property
    @abstractmethod
    def start(self) -> datetime:
        pass

    @property
    @abstractmethod
    def end(self) -> datetime:
        pass

    @property
    @abstractmethod
    def all_day(self) -> bool:
        pass

    @abstractmethod
    def remove_all_reminders(self) -> None:
        pass

    @abstractmethod
    def add_email_reminder(self, minutes_before: int) -> None:
        pass

    @abstractmethod
    def add_popup_reminder(self, minutes_before: int) -> None:
        pass


class HostCalendar(ABC):
    """A single calendar on the host."""

    @property
    @abstractmethod
    def calendar_id(self) -> str:
        pass

    @abstractmethod
    def get_events(self, start: datetime, end: datetime) -> list[HostEvent]:
        """
        Get every event overlapping [start, end).

        Returns:
            Events in host enumeration order
        """
        pass

    @abstractmethod
    def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        options: EventOptions | None = None,
    ) -> HostEvent:
        pass

    @abstractmethod
    def create_all_day_event(
        self,
        title: str,
        start_date: date,
        end_date: date | None = None,
        options: EventOptions | None = None,
    ) -> HostEvent:
        """
        Create an all-day event.

        Args:
            title: Event title
            start_date: First day
            end_date: Exclusive end (the day after the last day), or None
                for a single-day event
            options: Description, location, guests
        """
        pass


class CalendarHost(ABC):
    """Entry point of a calendar service."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'google', 'memory')."""
        pass

    @abstractmethod
    def get_calendar_by_id(self, calendar_id: str) -> HostCalendar | None:
        """Return the calendar, or None when it does not exist or is not accessible."""
        pass
