"""
Tool: Batch Processor
Purpose: Run an ordered list of reservation requests with retries and throttling

Processing rules:
- Requests run strictly in input order, one at a time
- Each request is dispatched by its type tag; an unknown tag fails that
  item immediately without retries
- A request whose config entry could not be read fails validation without
  being dispatched
- Host failures are retried with exponential backoff; validation failures
  are not (retrying cannot fix them)
- After every batch_size-th item (but not after the last) the processor
  pauses batch_delay_ms to respect host rate limits
- Every request yields exactly one outcome; nothing raises past process_batch

Usage:
    from workcal.batch.processor import BatchProcessor

    processor = BatchProcessor(executor)
    result = processor.process_batch(requests, BatchOptions(batch_size=5))
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping

from workcal.calendar.executor import ReservationExecutor
from workcal.config_models import BatchOptions
from workcal.errors import (
    HostUnavailableError,
    ReservationError,
    RetryExhaustedError,
    UnknownReservationTypeError,
)
from workcal.logging_config import get_logger, item_context
from workcal.models import BatchResult, ErrorKind, ReservationRequest, ReservationResult, ReservationType
from workcal.ops.retry import RetryExecutor

logger = get_logger(__name__)

ReservationHandler = Callable[[ReservationRequest], ReservationResult]


def build_handlers(executor: ReservationExecutor) -> dict[ReservationType, ReservationHandler]:
    """Map every reservation type to its executor entry point."""
    return {
        ReservationType.BASIC: executor.create_event,
        ReservationType.BY_DATE: executor.create_event_by_date,
        ReservationType.BUSINESS_DAY: executor.create_business_day_event,
    }


class BatchProcessor:
    """
    Drives reservation requests through the executor.

    Args:
        executor: Reservation executor (handlers are built from it unless given)
        retry: Retry executor; defaults to one sharing this processor's sleep
        sleep: Called with the throttle pause in seconds
        handlers: Explicit type -> handler mapping; must cover every ReservationType
    """

    def __init__(
        self,
        executor: ReservationExecutor | None = None,
        retry: RetryExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
        handlers: Mapping[ReservationType, ReservationHandler] | None = None,
    ):
        if handlers is None:
            if executor is None:
                raise ValueError("Either executor or handlers is required")
            handlers = build_handlers(executor)

        missing = set(ReservationType) - set(handlers)
        if missing:
            raise ValueError(f"No handler registered for: {', '.join(sorted(missing))}")

        self.handlers = dict(handlers)
        self.sleep = sleep
        self.retry = retry or RetryExecutor(sleep=sleep)

    def resolve_handler(self, type_tag: str) -> ReservationHandler:
        try:
            reservation_type = ReservationType(type_tag)
        except ValueError:
            raise UnknownReservationTypeError(type_tag) from None
        return self.handlers[reservation_type]

    def _run_item(self, request: ReservationRequest, options: BatchOptions) -> ReservationResult:
        if request.parse_error:
            return ReservationResult.failed(ErrorKind.VALIDATION, request.parse_error)

        try:
            handler = self.resolve_handler(request.type)
        except UnknownReservationTypeError as e:
            return ReservationResult.failed(e.kind, str(e))

        def attempt() -> ReservationResult:
            result = handler(request)
            if result.error_kind is ErrorKind.HOST_UNAVAILABLE:
                raise HostUnavailableError(result.error)
            return result

        try:
            return self.retry.run(attempt, options.max_retries, options.initial_delay_ms)
        except RetryExhaustedError as e:
            return ReservationResult.failed(e.kind, str(e))
        except ReservationError as e:
            return ReservationResult.failed(e.kind, str(e))
        except Exception as e:
            return ReservationResult.failed(ErrorKind.HOST_UNAVAILABLE, str(e))

    def process_batch(
        self,
        requests: list[ReservationRequest],
        options: BatchOptions | None = None,
    ) -> BatchResult:
        """
        Process requests in order.

        Args:
            requests: Reservation requests
            options: Batch size, throttle delay and retry settings

        Returns:
            BatchResult with one outcome per request, in input order
        """
        options = options or BatchOptions()
        batch = BatchResult()
        total = len(requests)

        logger.info(f"Batch started: {total} reservations")

        for i, request in enumerate(requests):
            with item_context(i + 1, total):
                try:
                    result = self._run_item(request, options)
                except Exception as e:
                    result = ReservationResult.failed(ErrorKind.HOST_UNAVAILABLE, str(e))

                batch.record(i, request, result)
                if result.success:
                    logger.info(f"Reservation succeeded: {request.title}")
                else:
                    logger.warning(f"Reservation failed: {request.title} - {result.error}")

            if (i + 1) % options.batch_size == 0 and i < total - 1:
                logger.info(f"Batch throttle: waiting {options.batch_delay_ms}ms")
                self.sleep(options.batch_delay_ms / 1000)

        logger.info(f"Batch finished: succeeded={batch.success_count}, failed={batch.failure_count}")
        return batch
