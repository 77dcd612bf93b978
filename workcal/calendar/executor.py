"""
Tool: Reservation Executor
Purpose: Validate a reservation request and place it on the calendar host

Three entry points, one per reservation type:

    create_event                explicit instants, or an all-day start date
    create_event_by_date        year/month/day plus optional "HH:mm" strings
    create_business_day_event   first/last business day of a year-month (all-day)

Each returns a ReservationResult and never raises. Before every write the
target calendar is checked for an identical event; a match returns a skipped
result carrying the existing event id and nothing is written.

After creation the host's automatic reminders are cleared and the request's
normalized reminders are installed (or a single popup reminder at the
configured default).

Usage:
    from workcal.calendar.executor import ReservationExecutor
    from workcal.models import ReservationRequest

    executor = ReservationExecutor(host, settings_provider)
    result = executor.create_event_by_date(ReservationRequest(
        type="date", title="Team Sync", year=2026, month=3, day=2,
        start_time_str="10:00", end_time_str="10:30",
    ))
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from urllib.parse import quote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from workcal.calendar.business_days import BusinessDayCalculator
from workcal.calendar.duplicates import DuplicateCandidate, DuplicateDetector
from workcal.calendar.holidays import HolidayResolver, load_company_holidays
from workcal.calendar.reminders import normalize_reminders
from workcal.calendar.utils import (
    build_event_options,
    is_valid_date,
    parse_date,
    parse_date_time,
    parse_time_str,
)
from workcal.errors import HostUnavailableError, ReservationError, ValidationError
from workcal.host.base import CalendarHost, HostEvent
from workcal.logging_config import get_logger
from workcal.models import ErrorKind, Reminder, ReminderChannel, ReservationRequest, ReservationResult
from workcal.settings import CalendarSettings, SettingsProvider, get_calendar_settings

logger = get_logger(__name__)

EVENT_URL_TEMPLATE = "https://calendar.google.com/calendar/event?eid={}"


class ReservationExecutor:
    """
    Creates reservations on a calendar host.

    Args:
        host: Calendar host to write to
        settings: Settings store for calendar, timezone and reminder defaults
        duplicate_detector: Defaults to a detector over the same host
        business_days: Defaults to a calculator over the same host and the
            company holidays in args/company_holidays.yaml
    """

    def __init__(
        self,
        host: CalendarHost,
        settings: SettingsProvider,
        duplicate_detector: DuplicateDetector | None = None,
        business_days: BusinessDayCalculator | None = None,
    ):
        self.host = host
        self.settings = settings
        self.duplicate_detector = duplicate_detector or DuplicateDetector(host)
        if business_days is None:
            business_days = BusinessDayCalculator(HolidayResolver(host, settings, load_company_holidays()))
        self.business_days = business_days

    # =========================================================================
    # Helpers
    # =========================================================================

    def _load_settings(self) -> CalendarSettings:
        try:
            return get_calendar_settings(self.settings)
        except Exception as e:
            raise HostUnavailableError(f"Settings lookup failed: {e}") from e

    @staticmethod
    def _zone(name: str) -> ZoneInfo:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone: {name}") from None

    @staticmethod
    def _apply_reminders(event: HostEvent, reminders: list[Reminder]) -> None:
        event.remove_all_reminders()
        for reminder in reminders:
            if reminder.channel is ReminderChannel.EMAIL:
                event.add_email_reminder(reminder.minutes_before)
            else:
                event.add_popup_reminder(reminder.minutes_before)

    @staticmethod
    def _failure(request: ReservationRequest, error: Exception) -> ReservationResult:
        if isinstance(error, ReservationError):
            logger.warning(f"Event creation failed: {request.title or '(untitled)'} - {error}")
            return ReservationResult.failed(error.kind, str(error))
        logger.error(f"Calendar host error: {request.title or '(untitled)'} - {error}")
        return ReservationResult.failed(ErrorKind.HOST_UNAVAILABLE, f"Calendar host error: {error}")

    # =========================================================================
    # Explicit instants
    # =========================================================================

    def create_event(self, request: ReservationRequest) -> ReservationResult:
        """
        Create a timed or all-day event.

        Timed events need start_time and end_time with start strictly before
        end. All-day events need start_date (start_time is accepted in its
        place); end_date is the inclusive last day of a multi-day event.
        Naive date-times are read in the configured default timezone.
        """
        try:
            return self._create_event(request)
        except Exception as e:
            return self._failure(request, e)

    def _create_event(self, request: ReservationRequest) -> ReservationResult:
        if not request.title:
            raise ValidationError("Title is required")

        if request.all_day:
            if not request.start_date and not request.start_time:
                raise ValidationError("start_date is required for all-day events")
        else:
            if not request.start_time:
                raise ValidationError("start_time is required")
            if not request.end_time:
                raise ValidationError("end_time is required")

        settings = self._load_settings()
        tz = self._zone(settings.default_timezone)
        reminders = normalize_reminders(request.reminder, settings.default_reminder_minutes)
        calendar_id = request.calendar_id or settings.default_calendar_id

        start_date: date | None = None
        end_date: date | None = None
        if request.all_day:
            start_date = parse_date(request.start_date or request.start_time)
            end_date = parse_date(request.end_date) if request.end_date else None
            if end_date is not None and end_date < start_date:
                raise ValidationError("end_date must not be before start_date")
            check_start = datetime.combine(start_date, time.min, tzinfo=tz)
            check_end = None
        else:
            check_start = parse_date_time(request.start_time, tz)
            check_end = parse_date_time(request.end_time, tz)
            if check_start >= check_end:
                raise ValidationError("start_time must be before end_time")

        calendar = self.host.get_calendar_by_id(calendar_id)
        if calendar is None:
            raise HostUnavailableError(f"Calendar not found: {calendar_id}")

        duplicate = self.duplicate_detector.check_duplicate(DuplicateCandidate(
            title=request.title,
            start_time=check_start,
            end_time=check_end,
            all_day=request.all_day,
            calendar_id=calendar_id,
        ))
        if duplicate is not None:
            logger.info(f"Skipped (duplicate): {request.title}")
            return ReservationResult.skipped_duplicate(duplicate.event_id)

        options = build_event_options(request.description, request.location, request.guests)

        if request.all_day:
            if end_date is not None:
                # Host end dates are exclusive
                event = calendar.create_all_day_event(
                    request.title, start_date, end_date + timedelta(days=1), options
                )
            else:
                event = calendar.create_all_day_event(request.title, start_date, None, options)
        else:
            event = calendar.create_event(request.title, check_start, check_end, options)

        self._apply_reminders(event, reminders)

        event_url = None
        if options.guests:
            event_url = EVENT_URL_TEMPLATE.format(quote(event.event_id, safe=""))

        logger.info(f"Event created: {request.title} ({event.event_id})")
        return ReservationResult.created(event.event_id, event_url)

    # =========================================================================
    # Year / month / day
    # =========================================================================

    def create_event_by_date(self, request: ReservationRequest) -> ReservationResult:
        """
        Create an event from year/month/day and "HH:mm" strings.

        The date is checked for calendar validity (leap years included) and
        the time strings for two-digit HH:mm before anything is sent to the
        host. All-day requests ignore the time strings.
        """
        try:
            if request.year is None or request.month is None or request.day is None:
                raise ValidationError("year, month and day are required")
            if not request.title:
                raise ValidationError("Title is required")
            if not request.all_day:
                if not request.start_time_str:
                    raise ValidationError("start_time_str is required")
                if not request.end_time_str:
                    raise ValidationError("end_time_str is required")

            if not is_valid_date(request.year, request.month, request.day):
                raise ValidationError(f"Invalid date: {request.year}-{request.month}-{request.day}")

            if request.all_day:
                delegated = replace(
                    request,
                    start_date=date(request.year, request.month, request.day),
                    end_date=None,
                    start_time=None,
                    end_time=None,
                )
            else:
                start_hour, start_minute = parse_time_str(request.start_time_str)
                end_hour, end_minute = parse_time_str(request.end_time_str)
                delegated = replace(
                    request,
                    start_time=datetime(request.year, request.month, request.day, start_hour, start_minute),
                    end_time=datetime(request.year, request.month, request.day, end_hour, end_minute),
                    start_date=None,
                    end_date=None,
                )
        except ReservationError as e:
            return self._failure(request, e)

        return self.create_event(delegated)

    # =========================================================================
    # Business day
    # =========================================================================

    def create_business_day_event(self, request: ReservationRequest) -> ReservationResult:
        """Create an all-day event on the first or last business day of year_month."""
        try:
            if not request.title:
                raise ValidationError("Title is required")
            if not request.year_month:
                raise ValidationError("year_month is required")
            if not request.business_day_type:
                raise ValidationError("business_day_type is required")

            target = self.business_days.resolve_business_day(
                request.year_month,
                request.business_day_type,
                request.holiday_calendar_id,
            )
        except Exception as e:
            return self._failure(request, e)

        logger.info(f"Resolved {request.business_day_type} business day of {request.year_month}: {target.isoformat()}")
        return self.create_event_by_date(replace(
            request,
            year=target.year,
            month=target.month,
            day=target.day,
            all_day=True,
            start_time_str=None,
            end_time_str=None,
        ))
