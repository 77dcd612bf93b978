"""Operational helpers for talking to a rate-limited calendar host

Components:
    retry.py: Bounded retries with exponential backoff
"""
