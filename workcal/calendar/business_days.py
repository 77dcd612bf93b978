"""
Tool: Business Day Calculator
Purpose: Business-day sequences for a month and first/last business day lookup

A business day is a Monday-Friday date that is not in the month's resolved
holiday set. The sequence is recomputed on every query, never cached, so a
holiday table edit between runs takes effect immediately.
"""

from __future__ import annotations

import calendar
from collections.abc import Collection
from datetime import date

from workcal.calendar.holidays import HolidayResolver
from workcal.calendar.utils import parse_year_month
from workcal.errors import ValidationError

BUSINESS_DAY_TYPES = ("first", "last")


def get_business_days(year: int, month: int, holidays: Collection[date]) -> list[date]:
    """
    Ordered business days of a month.

    Args:
        year: Year
        month: Month (1-12)
        holidays: Dates to exclude in addition to weekends

    Returns:
        Strictly ascending list of weekday, non-holiday dates
    """
    days_in_month = calendar.monthrange(year, month)[1]
    business_days = []
    for day in range(1, days_in_month + 1):
        current = date(year, month, day)
        # Saturday=5, Sunday=6
        if current.weekday() >= 5:
            continue
        if current in holidays:
            continue
        business_days.append(current)
    return business_days


class BusinessDayCalculator:
    def __init__(self, resolver: HolidayResolver):
        self.resolver = resolver

    def get_business_days_in_month(
        self,
        year_month: str,
        holiday_calendar_id: str | None = None,
    ) -> list[date]:
        year, month = parse_year_month(year_month)
        holidays = self.resolver.get_all_holidays(year, month, holiday_calendar_id)
        return get_business_days(year, month, holidays)

    def get_business_day_count(self, year_month: str, holiday_calendar_id: str | None = None) -> int:
        return len(self.get_business_days_in_month(year_month, holiday_calendar_id))

    def resolve_business_day(
        self,
        year_month: str,
        business_day_type: str,
        holiday_calendar_id: str | None = None,
    ) -> date:
        """
        First or last business day of a month.

        Raises:
            ValidationError: Unknown business_day_type, malformed year_month,
                or a month with no business days at all
        """
        if business_day_type not in BUSINESS_DAY_TYPES:
            raise ValidationError(
                f"business_day_type must be one of {', '.join(BUSINESS_DAY_TYPES)}: {business_day_type!r}"
            )

        business_days = self.get_business_days_in_month(year_month, holiday_calendar_id)
        if not business_days:
            raise ValidationError(f"No business days in {year_month}")

        return business_days[0] if business_day_type == "first" else business_days[-1]
