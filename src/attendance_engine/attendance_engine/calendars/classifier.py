from __future__ import annotations

from datetime import date
from typing import Optional, Union

from .holiday_calendar import HolidayCalendar, HolidayInfo, NOT_A_HOLIDAY

WEEKDAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

RestDaySpec = Union[str, int, None]


def sunday_based_weekday(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def rest_day_index(rest_day_spec: RestDaySpec) -> Optional[int]:
    if rest_day_spec is None or isinstance(rest_day_spec, bool):
        return None
    if isinstance(rest_day_spec, int):
        return rest_day_spec if 0 <= rest_day_spec <= 6 else None

    spec = str(rest_day_spec).strip().lower()
    if not spec:
        return None
    if spec.isdigit():
        index = int(spec)
        return index if 0 <= index <= 6 else None
    if spec in WEEKDAY_NAMES:
        return WEEKDAY_NAMES.index(spec)
    return None


class CalendarClassifier:
    def __init__(self, holiday_calendar: Optional[HolidayCalendar] = None):
        self._holidays = holiday_calendar

    def is_rest_day(self, work_date: date, rest_day_spec: RestDaySpec) -> bool:
        index = rest_day_index(rest_day_spec)
        return index is not None and sunday_based_weekday(work_date) == index

    def classify_holiday(self, work_date: date) -> HolidayInfo:
        if self._holidays is None:
            return NOT_A_HOLIDAY
        return self._holidays.lookup(work_date)
