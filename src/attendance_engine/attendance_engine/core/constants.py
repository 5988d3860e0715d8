"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 24 * 60

DEFAULT_SCHEDULE_START = "09:00"
DEFAULT_SCHEDULE_END = "18:00"
# Used when a schedule has a start but no end.
DEFAULT_SHIFT_LENGTH_MINUTES = 9 * 60

NIGHT_DIFF_START_MINUTE = 22 * 60
NIGHT_DIFF_END_MINUTE = 6 * 60

DEFAULT_DUPLICATE_TOLERANCE_MINUTES = 5
DEFAULT_BASIC_DAILY_RATE = 513.00
DEFAULT_HOLIDAY_COUNTRY = "PH"

DEFAULT_PROGRESS_EVERY = 10
DEFAULT_PROGRESS_RETENTION_SECONDS = 3600

SCHEDULE_GROUPS_PER_PAGE = 10

# Holidays observed as special (non-working) days, matched as lowercase name fragments.
DEFAULT_SPECIAL_HOLIDAY_NAMES = {
    "PH": (
        "chinese new year",
        "edsa people power",
        "black saturday",
        "ninoy aquino",
        "all saints",
        "all souls",
        "immaculate conception",
        "christmas eve",
        "last day of the year",
    ),
}
