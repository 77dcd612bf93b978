"""
Reservation error taxonomy.

Exceptions are raised inside the engine only. ReservationExecutor and
BatchProcessor convert them into failed ReservationResult values, so nothing
here crosses the batch boundary. ConfigError is raised before a batch starts,
when the reservations file itself is unusable.
"""

from __future__ import annotations

from workcal.models import ErrorKind


class ReservationError(Exception):
    """Base class for engine errors. Each subclass maps to one ErrorKind."""

    kind: ErrorKind = ErrorKind.HOST_UNAVAILABLE


class ValidationError(ReservationError):
    """A request field is missing or malformed."""

    kind = ErrorKind.VALIDATION


class ConfigError(ReservationError):
    """A configuration file could not be read or does not have the expected shape."""

    kind = ErrorKind.VALIDATION


class HostUnavailableError(ReservationError):
    """The calendar host or settings store could not be reached or refused the call."""

    kind = ErrorKind.HOST_UNAVAILABLE


class UnknownReservationTypeError(ReservationError):
    """A request carries a type tag with no registered handler."""

    kind = ErrorKind.UNKNOWN_RESERVATION_TYPE

    def __init__(self, type_tag: object):
        self.type_tag = type_tag
        super().__init__(f"Unknown reservation type: {type_tag}")


class RetryExhaustedError(ReservationError):
    """Every attempt of a retried operation failed."""

    kind = ErrorKind.RETRY_EXHAUSTED

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed after {attempts} attempts: {last_error}")


__all__ = [
    "ConfigError",
    "HostUnavailableError",
    "ReservationError",
    "RetryExhaustedError",
    "UnknownReservationTypeError",
    "ValidationError",
]
