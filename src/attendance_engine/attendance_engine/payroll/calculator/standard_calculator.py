from __future__ import annotations

import logging
from typing import Optional

from ...common.datetime_utils import TimeLike, minutes_since_midnight
from ...core.constants import (
    DEFAULT_SHIFT_LENGTH_MINUTES,
    MINUTES_PER_DAY,
    NIGHT_DIFF_END_MINUTE,
    NIGHT_DIFF_START_MINUTE,
)
from ...core.exceptions import ScheduleResolutionError
from ..model import WorkHourResult, round2
from .base import WorkHourCalculator

logger = logging.getLogger(__name__)


def _missing(value: Optional[TimeLike]) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def night_minutes(start_minute: int, end_minute: int) -> int:
    """Whole minutes in [start, end) whose time of day falls in [22:00, 06:00)."""
    count = 0
    for minute in range(start_minute, end_minute):
        of_day = minute % MINUTES_PER_DAY
        if of_day >= NIGHT_DIFF_START_MINUTE or of_day < NIGHT_DIFF_END_MINUTE:
            count += 1
    return count


class StandardWorkHourCalculator(WorkHourCalculator):
    """Standard rule set, minute resolution.

    - out < in means the shift crossed midnight (out is on the next day)
    - NT: worked hours; OT: past the scheduled end; LT: past the scheduled start
    - UT: scheduled hours not covered by NT; ND: hours inside 22:00-06:00
    """

    def compute(
        self,
        time_in: Optional[TimeLike],
        time_out: Optional[TimeLike],
        schedule_start: Optional[TimeLike],
        schedule_end: Optional[TimeLike] = None,
    ) -> Optional[WorkHourResult]:
        if _missing(time_in) or _missing(time_out) or _missing(schedule_start):
            return None

        try:
            in_min = minutes_since_midnight(time_in)
            out_min = minutes_since_midnight(time_out)
            start_min = minutes_since_midnight(schedule_start)
            if _missing(schedule_end):
                end_min = start_min + DEFAULT_SHIFT_LENGTH_MINUTES
            else:
                end_min = minutes_since_midnight(schedule_end)
        except ScheduleResolutionError as exc:
            logger.debug("work hours skipped: %s", exc)
            return None

        if out_min < in_min:
            out_min += MINUTES_PER_DAY

        total_minutes = out_min - in_min
        nt = total_minutes / 60

        adjusted_end = end_min if end_min > start_min else end_min + MINUTES_PER_DAY
        ot = max(0, out_min - adjusted_end) / 60

        scheduled_hours = (adjusted_end - start_min) / 60
        ut = max(0.0, scheduled_hours - nt)

        lt = max(0, in_min - start_min) / 60
        nd = night_minutes(in_min, out_min) / 60

        return WorkHourResult(nt=round2(nt), ot=round2(ot), lt=round2(lt), ut=round2(ut), nd=round2(nd))
