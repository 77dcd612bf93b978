"""Calendar reservation core — holidays, business days, duplicates, creation

Components:
    utils.py: Date/time validation, parsing and formatting
    holidays.py: Public + company holiday resolution per month
    business_days.py: Business-day sequences, first/last business day
    duplicates.py: Host re-query before every write
    reminders.py: Reminder spec normalization
    executor.py: Request validation and event creation
"""
