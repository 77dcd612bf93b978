"""Batch processing — ordered, throttled reservation runs

Components:
    processor.py: Drives requests through the executor with retries
    runner.py: run_reservation_batch entry point and CLI
"""
