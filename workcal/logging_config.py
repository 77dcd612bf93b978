"""
Logging for reservation runs, using structlog on top of stdlib logging.

Every line logged during a run carries the run id bound by the runner. Lines
logged while one reservation is processed also carry its batch position:

    2026-03-31T00:00:02Z [info] Event created: Expense report (evt1)  item=2/4 run_id=3f2a9c1d

WORKCAL_LOG_FORMAT=json switches to one JSON object per line, which is what
scheduled runs should ship to their log collector.

Usage:
    from workcal.logging_config import bind_run_context, item_context, setup_logging

    setup_logging()
    bind_run_context(run_id="3f2a9c1d")
    with item_context(1, 4):
        logger.info("Event created: Expense report (evt1)")
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog

# Per-request HTTP lines from the Google Calendar client
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Route structlog and stdlib loggers to one handler.

    Args:
        level: Log level name; WORKCAL_LOG_LEVEL or INFO when None
        json_output: JSON lines; WORKCAL_LOG_FORMAT=json when None
        stream: Output stream, stderr by default so stdout stays free for results
    """
    level = level or os.environ.get("WORKCAL_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("WORKCAL_LOG_FORMAT", "").lower() == "json"
    stream = stream or sys.stderr

    # Also applied to records from stdlib loggers such as httpx
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_run_context(**values: object) -> None:
    """Start a new run: drop context left by an earlier run and bind values."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


@contextmanager
def item_context(position: int, total: int) -> Iterator[None]:
    """Tag lines logged inside the block with item="position/total"."""
    with structlog.contextvars.bound_contextvars(item=f"{position}/{total}"):
        yield


__all__ = ["bind_run_context", "get_logger", "item_context", "setup_logging"]
