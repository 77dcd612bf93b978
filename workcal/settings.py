"""
Tool: Calendar Settings
Purpose: String key-value settings store and the calendar defaults resolved from it

The engine never reads ambient global state: a SettingsProvider instance is
passed to every component that needs defaults.

Keys:
    DEFAULT_CALENDAR_ID       calendar used when a request has no calendar_id
    DEFAULT_TIMEZONE          timezone for naive date-times
    HOLIDAY_CALENDAR_ID       public-holiday calendar on the host
    DEFAULT_REMINDER_MINUTES  popup reminder used when a request has none

Usage:
    from workcal.settings import YamlSettingsProvider, get_calendar_settings

    provider = YamlSettingsProvider()
    settings = get_calendar_settings(provider)
    print(settings.default_calendar_id)

Dependencies:
    - pydantic
    - pyyaml
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from workcal import SETTINGS_PATH
from workcal.logging_config import get_logger

logger = get_logger(__name__)


KEY_DEFAULT_CALENDAR_ID = "DEFAULT_CALENDAR_ID"
KEY_DEFAULT_TIMEZONE = "DEFAULT_TIMEZONE"
KEY_HOLIDAY_CALENDAR_ID = "HOLIDAY_CALENDAR_ID"
KEY_DEFAULT_REMINDER_MINUTES = "DEFAULT_REMINDER_MINUTES"

DEFAULT_CALENDAR_ID = "primary"
DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_HOLIDAY_CALENDAR_ID = "ja.japanese#holiday@group.v.calendar.google.com"
DEFAULT_REMINDER_MINUTES = 30


class SettingsProvider(ABC):
    """String key-value store. Missing keys read as None."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class InMemorySettingsProvider(SettingsProvider):
    def __init__(self, values: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)


class YamlSettingsProvider(SettingsProvider):
    """
    Settings persisted as a flat mapping in a YAML file.

    The file is re-read on every get so external edits are picked up
    between scheduled runs.
    """

    def __init__(self, path: Path = SETTINGS_PATH):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Settings file must contain a mapping: {self.path}")
        return {str(key): str(value) for key, value in raw.items() if value is not None}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = str(value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(values, f, default_flow_style=False, allow_unicode=True)


class CalendarSettings(BaseModel):
    model_config = ConfigDict(frozen=True)
    default_calendar_id: str = Field(default=DEFAULT_CALENDAR_ID)
    default_timezone: str = Field(default=DEFAULT_TIMEZONE)
    holiday_calendar_id: str = Field(default=DEFAULT_HOLIDAY_CALENDAR_ID)
    default_reminder_minutes: int = Field(default=DEFAULT_REMINDER_MINUTES, ge=0)


def _parse_reminder_minutes(raw: str | None) -> int:
    if raw is None or raw == "":
        return DEFAULT_REMINDER_MINUTES
    try:
        minutes = int(raw)
    except ValueError:
        logger.warning(f"Invalid {KEY_DEFAULT_REMINDER_MINUTES} value {raw!r}, using {DEFAULT_REMINDER_MINUTES}")
        return DEFAULT_REMINDER_MINUTES
    if minutes < 0:
        logger.warning(f"Negative {KEY_DEFAULT_REMINDER_MINUTES} value {raw!r}, using {DEFAULT_REMINDER_MINUTES}")
        return DEFAULT_REMINDER_MINUTES
    return minutes


def get_calendar_settings(provider: SettingsProvider) -> CalendarSettings:
    """
    Resolve calendar settings, filling unset keys with defaults.

    Args:
        provider: Settings store to read from

    Returns:
        CalendarSettings with every field populated
    """
    return CalendarSettings(
        default_calendar_id=provider.get(KEY_DEFAULT_CALENDAR_ID) or DEFAULT_CALENDAR_ID,
        default_timezone=provider.get(KEY_DEFAULT_TIMEZONE) or DEFAULT_TIMEZONE,
        holiday_calendar_id=provider.get(KEY_HOLIDAY_CALENDAR_ID) or DEFAULT_HOLIDAY_CALENDAR_ID,
        default_reminder_minutes=_parse_reminder_minutes(provider.get(KEY_DEFAULT_REMINDER_MINUTES)),
    )


def set_calendar_settings(
    provider: SettingsProvider,
    default_calendar_id: str | None = None,
    default_timezone: str | None = None,
    holiday_calendar_id: str | None = None,
    default_reminder_minutes: int | None = None,
) -> None:
    """Write the supplied settings. Empty or missing values leave the stored value untouched."""
    if default_calendar_id:
        provider.set(KEY_DEFAULT_CALENDAR_ID, default_calendar_id)
    if default_timezone:
        provider.set(KEY_DEFAULT_TIMEZONE, default_timezone)
    if holiday_calendar_id:
        provider.set(KEY_HOLIDAY_CALENDAR_ID, holiday_calendar_id)
    if default_reminder_minutes:
        provider.set(KEY_DEFAULT_REMINDER_MINUTES, str(default_reminder_minutes))
    logger.info("Calendar settings updated")


def initialize_calendar_settings(provider: SettingsProvider) -> None:
    """Store the Japanese-office defaults."""
    set_calendar_settings(
        provider,
        default_calendar_id=DEFAULT_CALENDAR_ID,
        default_timezone=DEFAULT_TIMEZONE,
        holiday_calendar_id=DEFAULT_HOLIDAY_CALENDAR_ID,
        default_reminder_minutes=DEFAULT_REMINDER_MINUTES,
    )
    logger.info("Calendar settings initialized with Japanese defaults")


__all__ = [
    "CalendarSettings",
    "InMemorySettingsProvider",
    "SettingsProvider",
    "YamlSettingsProvider",
    "get_calendar_settings",
    "initialize_calendar_settings",
    "set_calendar_settings",
]
