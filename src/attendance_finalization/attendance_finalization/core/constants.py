"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SHIFT_END_BUFFER_MINUTES = 30
DEFAULT_AUTO_CLOCK_OUT_BUFFER_MINUTES = 30
DEFAULT_FINALIZATION_INTERVAL_MINUTES = 15
DEFAULT_FULL_DAY_HOURS = 8.0
DEFAULT_HALF_DAY_HOURS = 4.0
DEFAULT_NOTIFICATION_WORKERS = 2
DEFAULT_NOTIFICATION_RETAIN_DAYS = 2
DEFAULT_WEEKEND_DAYS = (5, 6)

NO_CLOCK_IN_REASON = "No clock-in recorded"
MISSING_CLOCK_OUT_REASON = "Missing clock-out — correction available"
INVALID_CLOCK_OUT_REASON = "Invalid record: clock-out without clock-in"
NOT_CLOCKED_IN_REASON = "No clock-in yet"
