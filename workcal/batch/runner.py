"""
Tool: Reservation Runner
Purpose: Entry point invoked on a schedule to register the configured reservations

Reads args/reservations.yaml, resolves relative months ("current", "next"),
and runs the batch. A scheduler (cron, Cloud Scheduler, ...) invokes this on
its own cadence; reruns are safe because duplicates are skipped.

Usage:
    python -m workcal.batch.runner
    python -m workcal.batch.runner --config args/reservations.yaml --json
    python -m workcal.batch.runner --dry-run

Environment:
    WORKCAL_GOOGLE_TOKEN   OAuth bearer token for Google Calendar
    WORKCAL_LOG_LEVEL      Log level (default INFO)
    WORKCAL_LOG_FORMAT     "json" for JSON log lines

Dependencies:
    - httpx
    - pydantic
    - pyyaml
    - structlog
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path

from workcal import RESERVATIONS_PATH
from workcal.batch.processor import BatchProcessor
from workcal.calendar.business_days import BusinessDayCalculator
from workcal.calendar.executor import ReservationExecutor
from workcal.calendar.holidays import HolidayResolver, load_company_holidays
from workcal.calendar.utils import get_current_year_month, get_next_year_month
from workcal.config_models import BatchOptions, ReservationsConfig, load_and_validate
from workcal.errors import ConfigError
from workcal.host.base import CalendarHost
from workcal.logging_config import bind_run_context, get_logger, setup_logging
from workcal.models import BatchOutcome, BatchResult, ReservationRequest
from workcal.ops.retry import RetryExecutor
from workcal.settings import SettingsProvider, YamlSettingsProvider

logger = get_logger(__name__)


@dataclass
class ReservationContext:
    """Collaborators for one run. Nothing here is global."""

    host: CalendarHost
    settings: SettingsProvider
    company_holidays: Mapping[int, Iterable[date | str]] = field(default_factory=dict)
    sleep: Callable[[float], None] = time.sleep
    today: date | None = None


def build_processor(context: ReservationContext) -> BatchProcessor:
    resolver = HolidayResolver(context.host, context.settings, context.company_holidays)
    executor = ReservationExecutor(
        context.host,
        context.settings,
        business_days=BusinessDayCalculator(resolver),
    )
    return BatchProcessor(executor, retry=RetryExecutor(sleep=context.sleep), sleep=context.sleep)


def resolve_relative_month(request: ReservationRequest, today: date | None = None) -> ReservationRequest:
    """Replace year_month "current" / "next" with the concrete YYYY-MM."""
    if request.year_month == "current":
        return replace(request, year_month=get_current_year_month(today))
    if request.year_month == "next":
        return replace(request, year_month=get_next_year_month(today))
    return request


def load_reservations(path: Path = RESERVATIONS_PATH) -> tuple[list[ReservationRequest], BatchOptions]:
    """
    Read reservations and batch options from a YAML file.

    Every entry becomes one request; an entry that cannot be read becomes a
    request carrying parse_error, which the batch reports as a failure.

    Raises:
        ConfigError: The file cannot be parsed or its sections are invalid
    """
    config = load_and_validate("reservations", ReservationsConfig, path=path)
    requests = [ReservationRequest.from_entry(entry) for entry in config.reservations]
    return requests, config.batch


def run_reservation_batch(
    context: ReservationContext,
    requests: list[ReservationRequest] | None = None,
    options: BatchOptions | None = None,
    config_path: Path = RESERVATIONS_PATH,
) -> BatchResult:
    """
    Register reservations and return the batch result.

    Args:
        context: Host, settings and holiday table for this run
        requests: Reservations to register; read from config_path when None
        options: Batch options; read from config_path when requests is None
        config_path: YAML file with `batch` and `reservations` sections

    Returns:
        BatchResult (empty when there is nothing to register)

    Raises:
        ConfigError: requests is None and config_path is unusable
    """
    bind_run_context(run_id=uuid.uuid4().hex[:8])

    if requests is None:
        requests, configured = load_reservations(config_path)
        options = options or configured

    requests = [resolve_relative_month(request, context.today) for request in requests]
    logger.info(
        f"Target months: {get_current_year_month(context.today)}, {get_next_year_month(context.today)}"
    )

    if not requests:
        logger.info("No reservations configured. Add entries under `reservations` in the config file.")
        return BatchResult()

    result = build_processor(context).process_batch(requests, options)

    logger.info("========== Reservation results ==========")
    logger.info(f"Succeeded: {result.success_count}")
    logger.info(f"Failed: {result.failure_count}")

    failures = result.failures
    if failures:
        logger.info("--- Failed reservations ---")
        for outcome in failures:
            logger.info(f"  - {_label(outcome)}: {outcome.result.error}")

    return result


def _label(outcome: BatchOutcome) -> str:
    return outcome.request.title or f"reservations[{outcome.index}]"


def _build_host(dry_run: bool, settings: SettingsProvider) -> CalendarHost:
    if dry_run:
        from workcal.host.memory import InMemoryCalendarHost
        from workcal.settings import get_calendar_settings

        calendar_settings = get_calendar_settings(settings)
        return InMemoryCalendarHost(
            timezone=calendar_settings.default_timezone,
            calendar_ids=[calendar_settings.default_calendar_id, calendar_settings.holiday_calendar_id],
        )

    from workcal.host.google_calendar import GoogleCalendarHost

    token = os.environ.get("WORKCAL_GOOGLE_TOKEN")
    if not token:
        raise SystemExit("WORKCAL_GOOGLE_TOKEN is not set (use --dry-run to run without a host)")
    return GoogleCalendarHost(access_token=token)


def main():
    parser = argparse.ArgumentParser(description="Register configured calendar reservations")
    parser.add_argument("--config", type=Path, default=RESERVATIONS_PATH, help="Reservations YAML file")
    parser.add_argument("--settings", type=Path, default=None, help="Settings YAML file")
    parser.add_argument("--dry-run", action="store_true", help="Use an in-memory calendar host")
    parser.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args()
    setup_logging()

    settings = YamlSettingsProvider(args.settings) if args.settings else YamlSettingsProvider()
    context = ReservationContext(
        host=_build_host(args.dry_run, settings),
        settings=settings,
        company_holidays=load_company_holidays(),
    )

    try:
        result = run_reservation_batch(context, config_path=args.config)
    except ConfigError as e:
        logger.error(f"Reservation run aborted: {e}")
        if args.json:
            print(json.dumps({"success": False, "error": str(e)}, indent=2, ensure_ascii=False))
        else:
            print(f"Error: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str, ensure_ascii=False))
    else:
        print(f"Succeeded: {result.success_count}  Failed: {result.failure_count}")
        for outcome in result.results:
            status = outcome.result.status.value
            detail = outcome.result.event_id or outcome.result.existing_event_id or outcome.result.error
            print(f"  [{status}] {_label(outcome)}: {detail}")

    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
