from __future__ import annotations

from typing import Iterable, Optional

from ..common.datetime_utils import schedule_hours
from ..core.constants import DEFAULT_BASIC_DAILY_RATE
from ..core.enums import HolidayType
from ..core.exceptions import ScheduleResolutionError
from .model import DailyMetrics, PeriodSummary, round2


def _day_schedule_hours(day: DailyMetrics) -> Optional[float]:
    if day.schedule_start is None or day.schedule_end is None:
        return None
    try:
        hours = schedule_hours(day.schedule_start, day.schedule_end)
    except ScheduleResolutionError:
        return None
    return hours if hours > 0 else None


class PeriodSummaryAggregator:
    """Rolls per-day metrics up into pay-period totals.

    Days without metrics (absent, still open, unparseable) still count toward
    rest-day and holiday totals.
    """

    def __init__(self, *, basic_daily_rate: float = DEFAULT_BASIC_DAILY_RATE):
        self._basic_daily_rate = float(basic_daily_rate)

    def summarize(self, daily_metrics: Iterable[DailyMetrics]) -> PeriodSummary:
        summary = PeriodSummary()
        reg_hrs: Optional[float] = None

        for day in daily_metrics:
            if reg_hrs is None:
                hours = _day_schedule_hours(day)
                if hours:
                    reg_hrs = round2(self._basic_daily_rate / hours)

            result = day.result
            if result is not None:
                summary.total_hours_worked += result.nt
                summary.regular_ot += result.ot
                summary.total_late_time += result.lt
                summary.total_undertime += result.ut
                summary.total_night_diff += result.nd
                summary.worked_days += 1

                if day.is_rest_day:
                    summary.rest_days_worked += 1
                if day.is_holiday:
                    if day.holiday_type == HolidayType.REGULAR:
                        summary.regular_holidays_worked += 1
                    else:
                        summary.special_holidays_worked += 1

            if day.is_rest_day:
                summary.total_rest_days += 1
            if day.is_holiday:
                if day.holiday_type == HolidayType.REGULAR:
                    summary.total_regular_holidays += 1
                else:
                    summary.total_special_holidays += 1

        summary.reg_hrs = reg_hrs or 0.0
        summary.total_hours_worked = round2(summary.total_hours_worked)
        summary.regular_ot = round2(summary.regular_ot)
        summary.total_late_time = round2(summary.total_late_time)
        summary.total_undertime = round2(summary.total_undertime)
        summary.total_night_diff = round2(summary.total_night_diff)
        return summary
