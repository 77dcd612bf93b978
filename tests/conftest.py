"""Shared test fixtures for workcal tests.

This module provides common fixtures used across all test modules:
- In-memory settings and calendar host
- A recording sleep so throttle and backoff never actually wait
- The company-holiday table used by business-day tests

Usage:
    def test_something(host, settings):
        executor = ReservationExecutor(host, settings)
        ...
"""

from collections.abc import Generator
from datetime import date

import pytest
import structlog

from workcal.calendar.business_days import BusinessDayCalculator
from workcal.calendar.executor import ReservationExecutor
from workcal.calendar.holidays import HolidayResolver
from workcal.host.memory import InMemoryCalendar, InMemoryCalendarHost
from workcal.settings import (
    DEFAULT_HOLIDAY_CALENDAR_ID,
    InMemorySettingsProvider,
    initialize_calendar_settings,
)


# ─────────────────────────────────────────────────────────────────────────────
# Settings Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> InMemorySettingsProvider:
    """Settings store initialized with the Japanese defaults."""
    provider = InMemorySettingsProvider()
    initialize_calendar_settings(provider)
    return provider


# ─────────────────────────────────────────────────────────────────────────────
# Host Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def host() -> InMemoryCalendarHost:
    """In-memory host with the primary and public-holiday calendars."""
    return InMemoryCalendarHost(
        timezone="Asia/Tokyo",
        calendar_ids=["primary", DEFAULT_HOLIDAY_CALENDAR_ID],
    )


@pytest.fixture
def primary(host: InMemoryCalendarHost) -> InMemoryCalendar:
    return host.calendars["primary"]


@pytest.fixture
def holiday_calendar(host: InMemoryCalendarHost) -> InMemoryCalendar:
    """Holiday calendar seeded with the Japanese public holidays used in tests."""
    calendar = host.calendars[DEFAULT_HOLIDAY_CALENDAR_ID]
    calendar.add_holiday("New Year's Day", date(2026, 1, 1))
    calendar.add_holiday("Coming of Age Day", date(2026, 1, 12))
    calendar.add_holiday("Vernal Equinox Day", date(2026, 3, 20))
    return calendar


# ─────────────────────────────────────────────────────────────────────────────
# Holiday Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def company_holidays() -> dict:
    """Year-end closure table."""
    return {
        2025: ["2025-12-29", "2025-12-30", "2025-12-31"],
        2026: ["2026-01-02"],
    }


@pytest.fixture
def resolver(host, settings, company_holidays) -> HolidayResolver:
    return HolidayResolver(host, settings, company_holidays)


# ─────────────────────────────────────────────────────────────────────────────
# Engine Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def executor(host, settings, resolver) -> ReservationExecutor:
    return ReservationExecutor(host, settings, business_days=BusinessDayCalculator(resolver))


# ─────────────────────────────────────────────────────────────────────────────
# Logging and Timing Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True, scope="session")
def stdlib_logging() -> Generator[None, None, None]:
    """Route structlog through stdlib logging so stdout stays clean and caplog sees log lines."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def sleeps() -> list:
    """Delays passed to the recording sleep, in seconds."""
    return []


@pytest.fixture
def record_sleep(sleeps: list):
    """Sleep replacement that records the requested delay and returns at once."""
    return sleeps.append
