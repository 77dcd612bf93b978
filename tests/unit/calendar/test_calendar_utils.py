"""Tests for workcal/calendar/utils.py"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from workcal.calendar.utils import (
    build_event_options,
    format_date,
    format_date_time,
    get_current_year_month,
    get_next_year_month,
    is_valid_date,
    is_valid_time_format,
    parse_date,
    parse_date_time,
    parse_time_str,
    parse_year_month,
)
from workcal.errors import ValidationError


TOKYO = ZoneInfo("Asia/Tokyo")


# ─────────────────────────────────────────────────────────────────────────────
# Year-Month
# ─────────────────────────────────────────────────────────────────────────────


class TestYearMonth:
    def test_current_year_month(self):
        assert get_current_year_month(date(2026, 3, 15)) == "2026-03"

    def test_next_year_month(self):
        assert get_next_year_month(date(2026, 3, 15)) == "2026-04"

    def test_next_year_month_rolls_over_december(self):
        assert get_next_year_month(date(2025, 12, 31)) == "2026-01"

    def test_defaults_to_today(self):
        today = date.today()
        assert get_current_year_month() == f"{today.year:04d}-{today.month:02d}"

    def test_parse_year_month(self):
        assert parse_year_month("2026-01") == (2026, 1)

    @pytest.mark.parametrize("value", ["2026-13", "2026-00", "2026-1", "202601", "", None])
    def test_parse_year_month_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            parse_year_month(value)


# ─────────────────────────────────────────────────────────────────────────────
# Date Validity
# ─────────────────────────────────────────────────────────────────────────────


class TestIsValidDate:
    def test_leap_day_in_leap_year(self):
        assert is_valid_date(2024, 2, 29) is True

    def test_leap_day_in_common_year(self):
        assert is_valid_date(2025, 2, 29) is False

    def test_century_rule(self):
        assert is_valid_date(1900, 2, 29) is False
        assert is_valid_date(2000, 2, 29) is True

    def test_month_lengths(self):
        assert is_valid_date(2026, 4, 30) is True
        assert is_valid_date(2026, 4, 31) is False
        assert is_valid_date(2026, 12, 31) is True

    @pytest.mark.parametrize("year,month,day", [(2026, 0, 1), (2026, 13, 1), (2026, 1, 0)])
    def test_out_of_range(self, year, month, day):
        assert is_valid_date(year, month, day) is False

    def test_non_integer_parts(self):
        assert is_valid_date("2026", 1, 1) is False
        assert is_valid_date(2026, True, 1) is False


# ─────────────────────────────────────────────────────────────────────────────
# Time Format
# ─────────────────────────────────────────────────────────────────────────────


class TestTimeFormat:
    @pytest.mark.parametrize("value", ["00:00", "09:30", "23:59", "12:00"])
    def test_valid(self, value):
        assert is_valid_time_format(value) is True

    @pytest.mark.parametrize("value", ["9:30", "24:00", "12:60", "1230", "12:3", " 12:30", "ab:cd", ""])
    def test_invalid(self, value):
        assert is_valid_time_format(value) is False

    def test_non_string(self):
        assert is_valid_time_format(930) is False
        assert is_valid_time_format(None) is False

    def test_parse_time_str(self):
        assert parse_time_str("09:05") == (9, 5)

    def test_parse_time_str_invalid(self):
        with pytest.raises(ValidationError, match="Invalid time format"):
            parse_time_str("9:05")


# ─────────────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────────────


class TestParsing:
    def test_naive_string_localized(self):
        parsed = parse_date_time("2026-03-02T10:00:00", TOKYO)
        assert parsed == datetime(2026, 3, 2, 10, 0, tzinfo=TOKYO)
        assert parsed.utcoffset() == timedelta(hours=9)

    def test_aware_string_kept(self):
        parsed = parse_date_time("2026-03-02T01:00:00+00:00", TOKYO)
        assert parsed.utcoffset() == timedelta(0)
        assert parsed == datetime(2026, 3, 2, 10, 0, tzinfo=TOKYO)

    def test_datetime_passthrough(self):
        value = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
        assert parse_date_time(value, TOKYO) is value

    def test_naive_without_tz_stays_naive(self):
        assert parse_date_time("2026-03-02T10:00:00").tzinfo is None

    def test_invalid_date_time(self):
        with pytest.raises(ValidationError, match="Invalid date-time format"):
            parse_date_time("next tuesday", TOKYO)

    def test_non_string_date_time(self):
        with pytest.raises(ValidationError):
            parse_date_time(12345, TOKYO)

    def test_parse_date_variants(self):
        assert parse_date("2026-03-02") == date(2026, 3, 2)
        assert parse_date("2026-03-02T10:00:00") == date(2026, 3, 2)
        assert parse_date(date(2026, 3, 2)) == date(2026, 3, 2)
        assert parse_date(datetime(2026, 3, 2, 23, 0)) == date(2026, 3, 2)

    def test_parse_date_invalid(self):
        with pytest.raises(ValidationError):
            parse_date("2026-02-30")


# ─────────────────────────────────────────────────────────────────────────────
# Options and Formatting
# ─────────────────────────────────────────────────────────────────────────────


class TestEventOptions:
    def test_drops_empty_fields(self):
        options = build_event_options(description="", location=None, guests=["a@example.com", ""])
        assert options.description is None
        assert options.location is None
        assert options.guests == ["a@example.com"]

    def test_guest_csv(self):
        options = build_event_options(guests=["a@example.com", "b@example.com"])
        assert options.guest_csv == "a@example.com,b@example.com"
        assert build_event_options().guest_csv is None


class TestFormatting:
    def test_format_date(self):
        assert format_date(date(2026, 1, 5)) == "2026-01-05"

    def test_format_date_time(self):
        assert format_date_time(datetime(2026, 1, 5, 9, 7)) == "2026-01-05 09:07"

    def test_format_date_time_converts_zone(self):
        value = datetime(2026, 1, 5, 0, 30, tzinfo=timezone.utc)
        assert format_date_time(value, TOKYO) == "2026-01-05 09:30"
