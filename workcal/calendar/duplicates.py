"""
Tool: Duplicate Detector
Purpose: Find an identical event already on the target calendar

No idempotency ledger is kept anywhere: the host calendar is the source of
truth, and it is re-queried before every create. An event is a duplicate
when it has the same all-day flag and title, and either the same start date
(all-day) or exactly the same start and end instants (timed).

All-day dates are read in the host calendar's zone, never converted into the
configured default timezone.

Lookup errors fail open: they are logged and treated as "no duplicate".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from workcal.calendar.utils import format_date, format_date_time
from workcal.host.base import CalendarHost, HostEvent
from workcal.logging_config import get_logger

logger = get_logger(__name__)

SEARCH_MARGIN = timedelta(minutes=1)
ALL_DAY_MARGIN = timedelta(days=1)


@dataclass
class DuplicateCandidate:
    title: str
    start_time: datetime
    end_time: datetime | None  # None for all-day
    all_day: bool
    calendar_id: str

    @property
    def start_date(self) -> date:
        return self.start_time.date()


class DuplicateDetector:
    def __init__(self, host: CalendarHost):
        self.host = host

    def _matches(self, event: HostEvent, candidate: DuplicateCandidate) -> bool:
        if event.all_day != candidate.all_day:
            return False
        if event.title != candidate.title:
            return False

        if candidate.all_day:
            # All-day starts are midnight in the host calendar's own zone
            return event.start.date() == candidate.start_date

        return event.start == candidate.start_time and event.end == candidate.end_time

    def check_duplicate(self, candidate: DuplicateCandidate) -> HostEvent | None:
        """
        Look for an identical event around the candidate's window.

        Returns:
            The first matching event in host order, or None
        """
        try:
            calendar = self.host.get_calendar_by_id(candidate.calendar_id)
            if calendar is None:
                logger.warning(f"Calendar not found: {candidate.calendar_id}")
                return None

            if candidate.all_day:
                # The host calendar may sit in another zone than the candidate
                search_start = candidate.start_time - ALL_DAY_MARGIN
                search_end = candidate.start_time + timedelta(days=1) + ALL_DAY_MARGIN
            else:
                search_start = candidate.start_time - SEARCH_MARGIN
                search_end = candidate.end_time + SEARCH_MARGIN

            for event in calendar.get_events(search_start, search_end):
                if self._matches(event, candidate):
                    if candidate.all_day:
                        when = format_date(candidate.start_time)
                    else:
                        when = f"{format_date_time(candidate.start_time)} - {format_date_time(candidate.end_time)}"
                    logger.info(f"Duplicate event detected: {candidate.title} ({when})")
                    return event

            return None

        except Exception as e:
            logger.warning(f"Duplicate check failed, assuming no duplicate: {e}")
            return None
