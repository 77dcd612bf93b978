"""
Tool: Holiday Resolver
Purpose: Merge public holidays from the host with the static company-holiday table

Public holidays come from a holiday calendar on the host (for Japan,
ja.japanese#holiday@group.v.calendar.google.com). Company holidays (year-end
closure and similar) come from args/company_holidays.yaml:

    2025:
      - "2025-12-29"
      - "2025-12-30"

Holiday dates compare by calendar date only, never by instant. All-day
entries keep the date they have on the holiday calendar, whatever its zone.

Usage:
    from workcal.calendar.holidays import HolidayResolver, load_company_holidays

    resolver = HolidayResolver(host, settings_provider, load_company_holidays())
    holidays = resolver.get_all_holidays(2026, 1)

Dependencies:
    - pyyaml
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import yaml

from workcal import COMPANY_HOLIDAYS_PATH
from workcal.host.base import CalendarHost
from workcal.logging_config import get_logger
from workcal.settings import SettingsProvider, get_calendar_settings

logger = get_logger(__name__)


def parse_holiday_table(raw: Mapping) -> dict[int, list[date]]:
    """
    Parse a year -> [ISO date string or date] mapping.

    Entries that are not valid dates, or whose year does not match their key,
    are logged and skipped.
    """
    table: dict[int, list[date]] = {}
    for year_key, entries in (raw or {}).items():
        try:
            year = int(year_key)
        except (TypeError, ValueError):
            logger.warning(f"Skipping company holidays under non-year key: {year_key!r}")
            continue

        dates: list[date] = []
        for entry in entries or []:
            try:
                # PyYAML already turns unquoted ISO dates into date objects
                if isinstance(entry, datetime):
                    day = entry.date()
                elif isinstance(entry, date):
                    day = entry
                else:
                    day = date.fromisoformat(str(entry))
            except ValueError:
                logger.warning(f"Skipping unparseable company holiday: {entry!r}")
                continue
            if day.year != year:
                logger.warning(f"Skipping company holiday {day.isoformat()} listed under {year}")
                continue
            dates.append(day)
        table[year] = sorted(set(dates))
    return table


def load_company_holidays(path: Path = COMPANY_HOLIDAYS_PATH) -> dict[int, list[date]]:
    """Load the static company-holiday table. A missing file yields an empty table."""
    if not path.exists():
        logger.info(f"No company holiday table at {path}")
        return {}
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return parse_holiday_table(raw)


def _month_bounds(year: int, month: int, tz: ZoneInfo) -> tuple[datetime, datetime]:
    start = datetime(year, month, 1, tzinfo=tz)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(year, month + 1, 1, tzinfo=tz)
    return start, end


class HolidayResolver:
    """
    Resolve the holiday set of a month.

    Args:
        host: Calendar host holding the public-holiday calendar
        settings: Settings store (holiday calendar id and timezone defaults)
        company_holidays: year -> dates or ISO date strings
    """

    def __init__(
        self,
        host: CalendarHost,
        settings: SettingsProvider,
        company_holidays: Mapping[int, Iterable[date | str]] | None = None,
    ):
        self.host = host
        self.settings = settings
        self.company_holidays = parse_holiday_table(company_holidays or {})

    def get_public_holidays(self, year: int, month: int, calendar_id: str | None = None) -> set[date]:
        """
        Read holiday-calendar entries overlapping the month.

        Never raises: a missing calendar or a lookup error yields an empty set.
        """
        try:
            settings = get_calendar_settings(self.settings)
            calendar_id = calendar_id or settings.holiday_calendar_id
            tz = ZoneInfo(settings.default_timezone)

            calendar = self.host.get_calendar_by_id(calendar_id)
            if calendar is None:
                logger.warning(f"Holiday calendar not found: {calendar_id}")
                return set()

            start, end = _month_bounds(year, month, tz)
            holidays: set[date] = set()
            for event in calendar.get_events(start - timedelta(days=1), end + timedelta(days=1)):
                if event.all_day:
                    day = event.start.date()
                elif event.start.tzinfo is not None:
                    day = event.start.astimezone(tz).date()
                else:
                    day = event.start.date()
                if day.year == year and day.month == month:
                    holidays.add(day)
            return holidays

        except Exception as e:
            logger.warning(f"Public holiday lookup failed for {year}-{month:02d}: {e}")
            return set()

    def get_company_holidays_for_year(self, year: int) -> list[date]:
        return list(self.company_holidays.get(year, []))

    def get_company_holidays(self, year: int, month: int) -> set[date]:
        return {day for day in self.company_holidays.get(year, []) if day.month == month}

    def get_all_holidays(self, year: int, month: int, calendar_id: str | None = None) -> set[date]:
        """Union of public and company holidays for the month."""
        return self.get_public_holidays(year, month, calendar_id) | self.get_company_holidays(year, month)

    def is_company_holiday(self, day: date | datetime) -> bool:
        if isinstance(day, datetime):
            day = day.date()
        return day in self.company_holidays.get(day.year, [])
