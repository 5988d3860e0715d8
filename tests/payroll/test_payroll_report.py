from __future__ import annotations

from datetime import date, time

import pytest

from src.attendance_engine.attendance_engine.core.enums import HolidayType, Origin
from src.attendance_engine.attendance_engine.core.exceptions import ValidationError
from src.attendance_engine.attendance_engine.payroll.model import DailyMetrics, WorkHourResult
from src.attendance_engine.attendance_engine.payroll.service import pay_period_bounds
from src.attendance_engine.attendance_engine.payroll.summary import PeriodSummaryAggregator


def _worked(repo, day, time_in=time(8, 55), time_out=time(18, 30), user_key="7"):
    repo.insert_record(user_key=user_key, work_date=day, time_in=time_in, time_out=time_out, origin=Origin.DEVICE)


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2025, 1, 15), (date(2025, 1, 1), date(2025, 1, 15))),
        (date(2025, 1, 16), (date(2025, 1, 16), date(2025, 1, 31))),
        (date(2025, 2, 20), (date(2025, 2, 16), date(2025, 2, 28))),
        (date(2024, 2, 20), (date(2024, 2, 16), date(2024, 2, 29))),
    ],
)
def test_pay_period_bounds(day, expected):
    assert pay_period_bounds(day) == expected


def test_daily_metrics_for_worked_day(engine, attendance_repo):
    _worked(attendance_repo, date(2025, 1, 6))

    metrics = engine.payroll_service.compute_daily_metrics("2025-01-06", "7")

    assert metrics.result == WorkHourResult(nt=9.58, ot=0.5, lt=0.0, ut=0.0, nd=0.0)
    assert (metrics.schedule_start, metrics.schedule_end) == (time(9, 0), time(18, 0))
    assert not metrics.is_rest_day
    assert metrics.to_dict()["schedule"] == "09:00 - 18:00"


def test_daily_metrics_use_schedule_override(engine, attendance_repo, schedules_repo):
    day = date(2025, 1, 7)
    schedules_repo.upsert_override(schedule_group_id=3, work_date=day, start=time(8, 0), end=time(17, 0))
    _worked(attendance_repo, day, time_in=time(8, 30), time_out=time(17, 0))

    metrics = engine.payroll_service.compute_daily_metrics(day, "7")

    assert metrics.result.lt == 0.5


def test_open_day_has_no_metrics(engine, attendance_repo):
    attendance_repo.insert_record(user_key="7", work_date=date(2025, 1, 6), time_in=time(8, 0))

    metrics = engine.payroll_service.compute_daily_metrics(date(2025, 1, 6), "7")

    assert metrics.time_in == time(8, 0)
    assert metrics.time_out is None
    assert metrics.result is None
    assert metrics.to_dict()["metrics"] is None


def test_split_shift_uses_day_span(engine, attendance_repo):
    day = date(2025, 1, 6)
    _worked(attendance_repo, day, time_in=time(13, 0), time_out=time(18, 0))
    _worked(attendance_repo, day, time_in=time(9, 0), time_out=time(12, 0))

    metrics = engine.payroll_service.compute_daily_metrics(day, "7")

    assert (metrics.time_in, metrics.time_out) == (time(9, 0), time(18, 0))
    assert metrics.result.nt == 9.0


def test_rest_day_and_holiday_flags(engine):
    sunday = engine.payroll_service.compute_daily_metrics(date(2025, 1, 5), "7")
    new_year = engine.payroll_service.compute_daily_metrics(date(2025, 1, 1), "7")

    assert sunday.is_rest_day
    assert new_year.is_holiday
    assert new_year.holiday_type == HolidayType.REGULAR
    assert new_year.holiday_name == "New Year's Day"


def test_period_report_summary(engine, attendance_repo):
    _worked(attendance_repo, date(2025, 1, 1))
    _worked(attendance_repo, date(2025, 1, 5))
    _worked(attendance_repo, date(2025, 1, 6))

    report = engine.payroll_service.build_period_report("7", "2025-01-01", "2025-01-15")
    summary = report.summary

    assert len(report.days) == 15
    assert summary.worked_days == 3
    assert summary.total_hours_worked == 28.74
    assert summary.regular_ot == 1.5
    assert summary.reg_hrs == 57.0
    assert (summary.rest_days_worked, summary.total_rest_days) == (1, 2)
    assert (summary.regular_holidays_worked, summary.total_regular_holidays) == (1, 1)
    assert (summary.special_holidays_worked, summary.total_special_holidays) == (0, 0)


def test_unknown_user_falls_back_to_system_schedule(engine, attendance_repo):
    _worked(attendance_repo, date(2025, 1, 6), user_key="99")

    report = engine.payroll_service.build_period_report("99", date(2025, 1, 6), date(2025, 1, 6))

    assert report.days[0].schedule_start == time(9, 0)
    assert report.summary.total_rest_days == 0


@pytest.mark.parametrize(
    "start, end",
    [
        ("2025-01-15", "2025-01-01"),
        ("2025-01-01", "2025-03-31"),
        ("2025-01-01", ""),
    ],
)
def test_period_report_rejects_bad_ranges(engine, start, end):
    with pytest.raises(ValidationError):
        engine.payroll_service.build_period_report("7", start, end)


def test_aggregator_counts_unworked_special_holiday():
    days = [
        DailyMetrics(
            work_date=date(2025, 1, 29),
            user_key="7",
            schedule_start=time(22, 0),
            schedule_end=time(6, 0),
            is_holiday=True,
            holiday_type=HolidayType.SPECIAL,
        ),
        DailyMetrics(
            work_date=date(2025, 1, 30),
            user_key="7",
            schedule_start=time(22, 0),
            schedule_end=time(6, 0),
            is_holiday=True,
            holiday_type=HolidayType.SPECIAL,
            result=WorkHourResult(nt=8.0, ot=0.0, lt=0.0, ut=0.0, nd=8.0),
        ),
    ]

    summary = PeriodSummaryAggregator(basic_daily_rate=600).summarize(days)

    assert summary.reg_hrs == 75.0
    assert summary.total_special_holidays == 2
    assert summary.special_holidays_worked == 1
    assert summary.total_night_diff == 8.0


def test_aggregator_without_schedules_has_zero_rate():
    summary = PeriodSummaryAggregator().summarize([DailyMetrics(work_date=date(2025, 1, 6), user_key="7")])

    assert summary.reg_hrs == 0.0
    assert summary.worked_days == 0
