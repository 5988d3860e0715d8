from __future__ import annotations

import calendar
from datetime import date, time, timedelta
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..calendars.classifier import CalendarClassifier
from ..common.validators import require_date, require_non_empty
from ..core.exceptions import ValidationError
from ..schedules.repository import UserProfileRepository
from ..schedules.service import ScheduleResolver
from .calculator.base import WorkHourCalculator
from .calculator.standard_calculator import StandardWorkHourCalculator
from .model import DailyMetrics, PeriodReport, PeriodSummary
from .summary import PeriodSummaryAggregator

MAX_REPORT_DAYS = 62


def pay_period_bounds(day: date) -> tuple[date, date]:
    """Semi-monthly pay period containing `day`: 1st-15th or 16th-end of month."""
    if day.day <= 15:
        return day.replace(day=1), day.replace(day=15)
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=16), day.replace(day=last_day)


def _day_span(records: Sequence[AttendanceRecord]) -> tuple[Optional[time], Optional[time]]:
    """Earliest time_in and the time_out of the last closed record of the day."""
    ins = [r.time_in for r in records if r.time_in is not None]
    closed = [r for r in records if r.time_in is not None and r.time_out is not None]
    time_in = min(ins) if ins else None
    time_out = closed[-1].time_out if closed else None
    return time_in, time_out


class PayrollReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        resolver: ScheduleResolver,
        classifier: CalendarClassifier,
        users: Optional[UserProfileRepository] = None,
        *,
        calculator: Optional[WorkHourCalculator] = None,
        aggregator: Optional[PeriodSummaryAggregator] = None,
    ):
        self._attendance = attendance
        self._resolver = resolver
        self._classifier = classifier
        self._users = users
        self._calculator = calculator or StandardWorkHourCalculator()
        self._aggregator = aggregator or PeriodSummaryAggregator()

    def compute_daily_metrics(self, work_date: date | str, user_key: str) -> DailyMetrics:
        work_date = require_date(work_date, "date")
        user_key = require_non_empty(user_key, "user_key")
        rest_day = self._users.get_rest_day(user_key) if self._users else None
        return self._daily(work_date, user_key, rest_day)

    def _daily(self, work_date: date, user_key: str, rest_day: Optional[str]) -> DailyMetrics:
        records = sorted(
            self._attendance.get_for_user_and_date(user_key, work_date),
            key=lambda r: (r.time_in or time.min, r.attendance_id),
        )
        time_in, time_out = _day_span(records)
        schedule = self._resolver.resolve(user_key, work_date)
        holiday = self._classifier.classify_holiday(work_date)

        result = None
        if time_in is not None and time_out is not None:
            result = self._calculator.compute(time_in, time_out, schedule.start, schedule.end)

        return DailyMetrics(
            work_date=work_date,
            user_key=user_key,
            time_in=time_in,
            time_out=time_out,
            schedule_start=schedule.start,
            schedule_end=schedule.end,
            is_rest_day=self._classifier.is_rest_day(work_date, rest_day),
            is_holiday=holiday.is_holiday,
            holiday_type=holiday.holiday_type,
            holiday_name=holiday.holiday_name,
            result=result,
        )

    def compute_period_summary(self, daily_metrics: Iterable[DailyMetrics]) -> PeriodSummary:
        return self._aggregator.summarize(daily_metrics)

    def build_period_report(self, user_key: str, start: date | str, end: date | str) -> PeriodReport:
        user_key = require_non_empty(user_key, "user_key")
        start = require_date(start, "start")
        end = require_date(end, "end")
        if end < start:
            raise ValidationError("end must not be before start")
        if (end - start).days + 1 > MAX_REPORT_DAYS:
            raise ValidationError(f"report range is limited to {MAX_REPORT_DAYS} days")

        rest_day = self._users.get_rest_day(user_key) if self._users else None
        days = [
            self._daily(start + timedelta(days=offset), user_key, rest_day)
            for offset in range((end - start).days + 1)
        ]
        return PeriodReport(user_key=user_key, start=start, end=end, days=days, summary=self.compute_period_summary(days))
