from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Union

from ..core.exceptions import ScheduleResolutionError

TimeLike = Union[time, datetime, timedelta, str]

# "8:00 AM", "08:00:15 pm", "8 PM", "8:00PM"
_TWELVE_HOUR = re.compile(
    r"^\s*(?P<h>\d{1,2})(?::(?P<m>\d{1,2}))?(?::(?P<s>\d{1,2}))?\s*(?P<p>[AaPp])\.?[Mm]\.?\s*$"
)
# "08:00", "8:05:30"
_TWENTY_FOUR_HOUR = re.compile(r"^\s*(?P<h>\d{1,2}):(?P<m>\d{1,2})(?::(?P<s>\d{1,2}))?\s*$")


def parse_iso_date(value: Any) -> date:
    """Parse YYYY-MM-DD string (or date/datetime) into date.

    A longer string is accepted only when a time part follows the date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if len(s) > 10 and s[10] not in "T ":
        raise ValueError(f"invalid date: {value!r}")
    return datetime.strptime(s[:10], "%Y-%m-%d").date()


def parse_time_of_day(value: TimeLike) -> time:
    """Parse a time-of-day from 24-hour or 12-hour (AM/PM) notation.

    Also accepts `time`, `datetime` and the `timedelta` values MySQL returns for
    TIME columns. Raises ScheduleResolutionError when the value is unusable.
    """

    if value is None:
        raise ScheduleResolutionError("missing time value")

    if isinstance(value, datetime):
        return value.time().replace(microsecond=0)

    if isinstance(value, time):
        return value.replace(microsecond=0)

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60, second=total_seconds % 60)

    if not isinstance(value, str) or not value.strip():
        raise ScheduleResolutionError(f"unsupported time value: {value!r}")

    m = _TWELVE_HOUR.match(value)
    if m:
        hours = int(m.group("h"))
        if not 1 <= hours <= 12:
            raise ScheduleResolutionError(f"invalid 12-hour time: {value!r}")
        if m.group("p").upper() == "P" and hours < 12:
            hours += 12
        elif m.group("p").upper() == "A" and hours == 12:
            hours = 0
        return _build_time(value, hours, m.group("m"), m.group("s"))

    m = _TWENTY_FOUR_HOUR.match(value)
    if m:
        return _build_time(value, int(m.group("h")), m.group("m"), m.group("s"))

    raise ScheduleResolutionError(f"unrecognized time format: {value!r}")


def _build_time(raw: str, hours: int, minutes: str | None, seconds: str | None) -> time:
    try:
        return time(hour=hours, minute=int(minutes or 0), second=int(seconds or 0))
    except ValueError as exc:
        raise ScheduleResolutionError(f"invalid time: {raw!r}") from exc


def minutes_since_midnight(value: TimeLike) -> int:
    t = parse_time_of_day(value)
    return t.hour * 60 + t.minute


def format_time(value: time | None) -> str | None:
    return value.strftime("%H:%M:%S") if value else None


def schedule_hours(start: TimeLike, end: TimeLike) -> float:
    """Length of a schedule in hours, wrapping past midnight for overnight shifts."""
    start_min = minutes_since_midnight(start)
    end_min = minutes_since_midnight(end)
    total = end_min - start_min
    if total <= 0:
        total += 24 * 60
    return total / 60
