"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Store collections (one per sheet in the original workbook)
USERS = "users"
PTO_REQUESTS = "pto_requests"
PTO_BALANCES = "pto_balances"
HOLIDAYS = "holidays"
BLACKOUT_DATES = "blackout_dates"
SYSTEM_CONFIG = "system_config"

SYSTEM_CONFIG_ID = "default"

DEFAULT_FULL_TIME_DAYS = 15
DEFAULT_PART_TIME_DAYS = 10
DEFAULT_SHORT_NOTICE_DAYS = 14

STORE_TIMEOUT_SECONDS = 30
OUTBOUND_TIMEOUT_SECONDS = 30
