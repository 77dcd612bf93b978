"""workcal Test Suite

This package contains all tests for the workcal reservation engine.

Test organization:
- unit/: Unit tests for individual modules
  - calendar/: Date utilities, holidays, business days, duplicates, reminders, executor
  - host/: In-memory and Google Calendar hosts
  - ops/: Retry executor
  - batch/: Batch processor and scheduled runner
- integration/: End-to-end reservation runs against the in-memory host

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/calendar/

    # With coverage
    pytest --cov=workcal --cov-report=term-missing
"""
