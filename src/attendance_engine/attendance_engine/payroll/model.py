from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..common.datetime_utils import format_time
from ..core.enums import HolidayType


def round2(value: float) -> float:
    """Half-up rounding to 2 decimals (payroll figures, not banker's rounding)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class WorkHourResult:
    nt: float
    ot: float
    lt: float
    ut: float
    nd: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DailyMetrics:
    """Read-model of one user-day, as rendered in the monthly/period view."""

    work_date: date
    user_key: str
    time_in: Optional[time] = None
    time_out: Optional[time] = None
    schedule_start: Optional[time] = None
    schedule_end: Optional[time] = None
    is_rest_day: bool = False
    is_holiday: bool = False
    holiday_type: Optional[HolidayType] = None
    holiday_name: Optional[str] = None
    result: Optional[WorkHourResult] = None

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "user_key": self.user_key,
            "time_in": format_time(self.time_in),
            "time_out": format_time(self.time_out),
            "schedule": (
                f"{self.schedule_start:%H:%M} - {self.schedule_end:%H:%M}"
                if self.schedule_start and self.schedule_end
                else None
            ),
            "is_rest_day": self.is_rest_day,
            "is_holiday": self.is_holiday,
            "holiday_type": self.holiday_type.value if self.holiday_type else None,
            "holiday_name": self.holiday_name,
            "metrics": self.result.to_dict() if self.result else None,
        }


@dataclass
class PeriodSummary:
    reg_hrs: float = 0.0
    worked_days: int = 0
    total_hours_worked: float = 0.0
    regular_ot: float = 0.0
    rest_days_worked: int = 0
    total_rest_days: int = 0
    total_late_time: float = 0.0
    total_undertime: float = 0.0
    total_night_diff: float = 0.0
    regular_holidays_worked: int = 0
    special_holidays_worked: int = 0
    total_regular_holidays: int = 0
    total_special_holidays: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PeriodReport:
    user_key: str
    start: date
    end: date
    days: list[DailyMetrics] = field(default_factory=list)
    summary: PeriodSummary = field(default_factory=PeriodSummary)

    def to_dict(self) -> dict:
        return {
            "user_key": self.user_key,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "days": [d.to_dict() for d in self.days],
            "summary": self.summary.to_dict(),
        }
