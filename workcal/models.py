"""
Reservation Models — Data structures for reservation requests and outcomes

Usage:
    from workcal.models import ReservationRequest, ReservationResult, BatchResult

Requests are plain dataclasses built from YAML (see ReservationRequest.from_dict).
Every processed request produces exactly one ReservationResult; a batch run
collects them into a BatchResult that is created fresh per run and never
persisted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any


class ReservationType(StrEnum):
    """
    Closed set of reservation kinds.

    - BASIC: explicit start/end instants (or an all-day start date)
    - BY_DATE: year/month/day plus optional "HH:mm" start/end strings
    - BUSINESS_DAY: first or last business day of a year-month
    """

    BASIC = "basic"
    BY_DATE = "date"
    BUSINESS_DAY = "businessDay"


class ReminderChannel(StrEnum):
    EMAIL = "email"
    POPUP = "popup"


class ErrorKind(StrEnum):
    """Typed failure reason carried by a failed ReservationResult."""

    VALIDATION = "validation"
    HOST_UNAVAILABLE = "host_unavailable"
    UNKNOWN_RESERVATION_TYPE = "unknown_reservation_type"
    RETRY_EXHAUSTED = "retry_exhausted"


class OutcomeStatus(StrEnum):
    CREATED = "created"
    SKIPPED = "skipped"  # duplicate already on the calendar
    FAILED = "failed"


@dataclass(frozen=True)
class Reminder:
    channel: ReminderChannel
    minutes_before: int

    def to_dict(self) -> dict[str, Any]:
        return {"channel": self.channel.value, "minutes_before": self.minutes_before}


@dataclass
class ReservationRequest:
    """
    One reservation to place on the calendar.

    The type tag stays a raw string so that an unrecognized tag survives
    parsing and can be reported as its own failure by the batch processor.
    Which time fields are required depends on the type and on all_day;
    title is always required.
    """

    type: str
    title: str = ""

    # BASIC: explicit instants (datetime or ISO-8601 string)
    start_time: datetime | str | None = None
    end_time: datetime | str | None = None
    start_date: date | str | None = None  # all-day start
    end_date: date | str | None = None  # all-day last day (inclusive)

    # BY_DATE
    year: int | None = None
    month: int | None = None
    day: int | None = None
    start_time_str: str | None = None  # "HH:mm"
    end_time_str: str | None = None

    # BUSINESS_DAY
    year_month: str | None = None  # "YYYY-MM"
    business_day_type: str | None = None  # "first" | "last"
    holiday_calendar_id: str | None = None

    all_day: bool = False
    description: str | None = None
    location: str | None = None
    guests: list[str] = field(default_factory=list)
    reminder: dict[str, int | list[int]] | None = None
    calendar_id: str | None = None

    # Set when the config entry could not be read; the item fails validation
    parse_error: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReservationRequest:
        """
        Create from a dictionary (YAML entry). Unknown keys are ignored.

        Raises:
            ValueError: type, title or guests has the wrong shape
        """
        for key in ("type", "title"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"{key} must be a string, got {data[key]!r}")
        guests = data.get("guests")
        if guests is not None and (
            not isinstance(guests, list) or not all(isinstance(g, str) for g in guests)
        ):
            raise ValueError(f"guests must be a list of email addresses, got {guests!r}")

        known = {name for name in cls.__dataclass_fields__} - {"parse_error"}
        values = {key: value for key, value in data.items() if key in known}
        values.setdefault("type", "")
        if values.get("guests") is None:
            values["guests"] = []
        values["all_day"] = values.get("all_day") is True
        return cls(**values)

    @classmethod
    def from_entry(cls, entry: Any) -> ReservationRequest:
        """Like from_dict, but an unreadable entry becomes a request carrying parse_error."""
        if not isinstance(entry, Mapping):
            return cls(
                type="",
                parse_error=f"Reservation entry must be a mapping, got {type(entry).__name__}: {entry!r}",
            )
        try:
            return cls.from_dict(entry)
        except (TypeError, ValueError) as e:
            title = entry.get("title")
            return cls(
                type="",
                title=title if isinstance(title, str) else "",
                parse_error=f"Invalid reservation entry: {e}",
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict, omitting unset fields."""
        result: dict[str, Any] = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if value is None or value == []:
                continue
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            result[name] = value
        return result


@dataclass
class ReservationResult:
    """
    Outcome of a single reservation attempt.

    CREATED carries the new event id, SKIPPED the id of the event that was
    already on the calendar, FAILED an error kind and message.
    """

    status: OutcomeStatus
    event_id: str | None = None
    existing_event_id: str | None = None
    event_url: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def created(cls, event_id: str, event_url: str | None = None) -> ReservationResult:
        return cls(status=OutcomeStatus.CREATED, event_id=event_id, event_url=event_url)

    @classmethod
    def skipped_duplicate(cls, existing_event_id: str) -> ReservationResult:
        return cls(status=OutcomeStatus.SKIPPED, existing_event_id=existing_event_id)

    @classmethod
    def failed(cls, kind: ErrorKind, error: str) -> ReservationResult:
        return cls(status=OutcomeStatus.FAILED, error=error, error_kind=kind)

    @property
    def success(self) -> bool:
        """Created and skipped both count as success."""
        return self.status is not OutcomeStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status is OutcomeStatus.SKIPPED

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "status": self.status.value}
        if self.status is OutcomeStatus.CREATED:
            result["event_id"] = self.event_id
            if self.event_url:
                result["event_url"] = self.event_url
        elif self.status is OutcomeStatus.SKIPPED:
            result["skipped"] = True
            result["reason"] = "An identical event already exists"
            result["existing_event_id"] = self.existing_event_id
        else:
            result["error"] = self.error
            result["error_kind"] = self.error_kind.value if self.error_kind else None
        return result


@dataclass
class BatchOutcome:
    index: int
    request: ReservationRequest
    result: ReservationResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "reservation": self.request.to_dict(),
            "result": self.result.to_dict(),
        }


@dataclass
class BatchResult:
    """
    Aggregate result of one batch run, in input order.

    Invariant: success_count + failure_count == len(results).
    """

    results: list[BatchOutcome] = field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0

    def record(self, index: int, request: ReservationRequest, result: ReservationResult) -> None:
        self.results.append(BatchOutcome(index=index, request=request, result=result))
        if result.success:
            self.success_count += 1
        else:
            self.failure_count += 1

    @property
    def success(self) -> bool:
        return self.failure_count == 0

    @property
    def failures(self) -> list[BatchOutcome]:
        return [outcome for outcome in self.results if not outcome.result.success]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "results": [outcome.to_dict() for outcome in self.results],
        }
