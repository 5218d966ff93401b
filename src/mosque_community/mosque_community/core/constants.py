"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
DEFAULT_STATS_DAYS = 30
DEFAULT_ACTIVITY_STATS_DAYS = 7
DAILY_PRAYER_COUNT = 5
DEFAULT_TOKEN_MINUTES = 60 * 24 * 7
MIN_PASSWORD_LENGTH = 6
DRIVER_MOBILITIES = ("car", "motorbike")
STREAK_LOOKBACK_DAYS = 366
DEFAULT_WAKE_UP_STATS_DAYS = 30
