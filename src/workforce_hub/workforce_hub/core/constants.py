"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LIST_LIMIT = 200
STATS_LIMIT = 10000
DEFAULT_CURRENCY = "USD"

# Attendance
DEFAULT_WORKDAY_START = time(9, 0)
DEFAULT_LATE_GRACE_MINUTES = 15
STANDARD_WORKDAY_HOURS = 8

# Yearly leave allowances (days)
LEAVE_ALLOWANCES = {
    "annual": 20,
    "sick": 10,
    "personal": 5,
    "study": 3,
}
