"""WorkCal — Automated work calendar reservations

Creates recurring work reservations (expense reports, monthly reviews, fixed
meetings) on an external calendar host. Safe to run repeatedly: the host
calendar is re-queried before every write, so a rerun never double-books.

Components:
    models.py: Reservation requests, results, batch outcomes
    errors.py: Error taxonomy carried by failed results
    settings.py: Key-value settings store and resolved calendar settings
    config_models.py: Batch configuration (args/reservations.yaml)
    logging_config.py: structlog setup
    host/: Calendar host adapters (Google Calendar, in-memory)
    calendar/: Holidays, business days, duplicate detection, event creation
    ops/: Retry with exponential backoff
    batch/: Ordered batch processing and the run entry point
"""

from pathlib import Path


# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_ROOT = Path(__file__).parent
ARGS_DIR = PROJECT_ROOT / "args"

SETTINGS_PATH = ARGS_DIR / "settings.yaml"
RESERVATIONS_PATH = ARGS_DIR / "reservations.yaml"
COMPANY_HOLIDAYS_PATH = ARGS_DIR / "company_holidays.yaml"

__all__ = [
    "ARGS_DIR",
    "COMPANY_HOLIDAYS_PATH",
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
    "RESERVATIONS_PATH",
    "SETTINGS_PATH",
]
