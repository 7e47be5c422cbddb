"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_TIMEZONE = "UTC"

MEMBERS_PER_PAGE = 10
PLANS_PER_PAGE = 5
ATTENDANCES_PER_PAGE = 15

NO_MEMBERSHIP_LABEL = "No membership"
EMPTY_DURATION = "0h 0m"
