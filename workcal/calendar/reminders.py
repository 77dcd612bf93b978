"""
Reminder normalization.

A reminder spec maps a channel to minutes-before, as a single value or a list:

    {"popup": [30, 1440], "email": 60}

It normalizes to an ordered list with every email reminder first (input
order), then every popup reminder (input order). An absent spec, or a
mapping with no entries, yields a single popup reminder at the configured
default. Anything other than a mapping is a validation error.
"""

from __future__ import annotations

from collections.abc import Mapping

from workcal.errors import ValidationError
from workcal.models import Reminder, ReminderChannel

# Installation order on the host
CHANNEL_ORDER = (ReminderChannel.EMAIL, ReminderChannel.POPUP)


def _minutes_list(channel: str, value: int | list[int] | None) -> list[int]:
    if value is None:
        return []
    values = value if isinstance(value, (list, tuple)) else [value]

    minutes = []
    for item in values:
        if item is None:
            continue
        if isinstance(item, bool) or not isinstance(item, int) or item < 0:
            raise ValidationError(f"Invalid {channel} reminder minutes: {item!r}")
        minutes.append(item)
    return minutes


def normalize_reminders(
    spec: Mapping[str, int | list[int] | None] | None,
    default_minutes: int = 30,
) -> list[Reminder]:
    """
    Normalize a reminder spec.

    Args:
        spec: Channel -> minutes (int or list), or None
        default_minutes: Popup reminder used when the spec has no entries

    Returns:
        Email reminders followed by popup reminders

    Raises:
        ValidationError: Spec is not a mapping, or has an unknown channel or invalid minutes
    """
    if spec is None:
        spec = {}
    if not isinstance(spec, Mapping):
        raise ValidationError(f"Reminder must map channels to minutes, got {type(spec).__name__}: {spec!r}")

    unknown = {str(key) for key in spec} - {channel.value for channel in ReminderChannel}
    if unknown:
        raise ValidationError(f"Unknown reminder channel: {', '.join(sorted(unknown))}")

    reminders = [
        Reminder(channel, minutes)
        for channel in CHANNEL_ORDER
        for minutes in _minutes_list(channel.value, spec.get(channel.value))
    ]

    if not reminders:
        return [Reminder(ReminderChannel.POPUP, default_minutes)]
    return reminders
