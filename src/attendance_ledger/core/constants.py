"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ZERO_DURATION = "00:00:00"
END_OF_DAY_TIME = "23:59:59"

TIME_FORMAT = "%H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_IDEMPOTENCY_CACHE_SIZE = 512
DEFAULT_DB_CONNECTION_TIMEOUT = 10
