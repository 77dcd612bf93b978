"""Calendar hosts — where reservations are written

Components:
    base.py: CalendarHost / HostCalendar / HostEvent interfaces
    google_calendar.py: Google Calendar API v3 adapter (httpx)
    memory.py: In-process host for dry runs and tests
"""

from .base import CalendarHost, EventOptions, HostCalendar, HostEvent
from .memory import InMemoryCalendarHost


__all__ = [
    "CalendarHost",
    "EventOptions",
    "HostCalendar",
    "HostEvent",
    "InMemoryCalendarHost",
]
