from __future__ import annotations

import calendar
import logging
import math
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import parse_time_of_day
from ..common.validators import require_date, require_non_empty, require_time
from ..core.constants import DEFAULT_SCHEDULE_END, DEFAULT_SCHEDULE_START, SCHEDULE_GROUPS_PER_PAGE
from ..core.enums import ScheduleSource
from ..core.exceptions import ValidationError
from .model import ResolvedSchedule, ScheduleOverride
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleResolver:
    """Effective working hours of a user on a date.

    Precedence: schedule-group override for the date, then the user's default
    schedule, then the system default. Storage errors propagate.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        *,
        default_start: time | str = DEFAULT_SCHEDULE_START,
        default_end: time | str = DEFAULT_SCHEDULE_END,
    ):
        self._schedules = schedules
        self._system_default = ResolvedSchedule(
            start=parse_time_of_day(default_start),
            end=parse_time_of_day(default_end),
            source=ScheduleSource.SYSTEM,
        )

    def resolve(self, user_key: str, work_date: date) -> ResolvedSchedule:
        schedule = self._schedules.get_default_schedule(user_key)
        if schedule is None:
            return self._system_default

        if schedule.schedule_group_id is not None:
            override = self._schedules.get_schedule_override(schedule.schedule_group_id, work_date)
            if override is not None:
                return ResolvedSchedule(start=override.start, end=override.end, source=ScheduleSource.OVERRIDE)

        if schedule.start is None or schedule.end is None:
            logger.debug("incomplete default schedule, using system default", extra={"user_key": user_key})
            return self._system_default

        return ResolvedSchedule(start=schedule.start, end=schedule.end, source=ScheduleSource.DEFAULT)


class ScheduleService:
    """Maintenance of schedule groups and their date-specific overrides."""

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def create_group(self, name) -> int:
        name = require_non_empty(name, "name")
        group_id = self._schedules.create_group(name)
        logger.info("schedule group created", extra={"schedule_group_id": group_id})
        return group_id

    def list_groups(self, page=1) -> dict:
        """One page of groups, newest first, with pagination info."""

        try:
            page = max(1, int(page or 1))
        except (TypeError, ValueError):
            page = 1

        limit = SCHEDULE_GROUPS_PER_PAGE
        total = self._schedules.count_groups()
        total_pages = math.ceil(total / limit)
        groups = self._schedules.list_groups(limit=limit, offset=(page - 1) * limit)
        return {
            "data": [g.to_dict() for g in groups],
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_items": total,
                "items_per_page": limit,
                "has_next_page": page < total_pages,
                "has_previous_page": page > 1,
            },
        }

    def delete_group(self, schedule_group_id: int) -> bool:
        deleted = self._schedules.delete_group(int(schedule_group_id))
        if deleted:
            logger.info("schedule group deleted", extra={"schedule_group_id": schedule_group_id})
        return deleted

    def set_override(self, *, schedule_group_id: int, work_date, start, end) -> int:
        if schedule_group_id is None or int(schedule_group_id) <= 0:
            raise ValidationError("schedule_group_id is invalid")

        work_date = require_date(work_date, "schedule_date")
        start = require_time(start, "work_schedule_start")
        end = require_time(end, "work_schedule_end")
        if start == end:
            raise ValidationError("work_schedule_start and work_schedule_end must differ")
        if self._schedules.get_group(int(schedule_group_id)) is None:
            raise ValidationError(f"schedule group {schedule_group_id} does not exist")

        return self._schedules.upsert_override(
            schedule_group_id=int(schedule_group_id), work_date=work_date, start=start, end=end
        )

    def month_calendar(self, *, schedule_group_id: int, year: int, month: int) -> list[dict]:
        """Every day of the month with the group's override, if any."""

        if not 1 <= int(month) <= 12:
            raise ValidationError("month must be 1-12")

        last_day = calendar.monthrange(int(year), int(month))[1]
        first, last = date(int(year), int(month), 1), date(int(year), int(month), last_day)
        by_date = {
            o.work_date: o
            for o in self._schedules.list_overrides(schedule_group_id=int(schedule_group_id), start=first, end=last)
        }

        out: list[dict] = []
        for day in range(1, last_day + 1):
            current = date(int(year), int(month), day)
            override: Optional[ScheduleOverride] = by_date.get(current)
            out.append(
                {
                    "date": current.isoformat(),
                    "day": day,
                    "day_name": current.strftime("%A"),
                    "has_schedule": override is not None,
                    "schedule": (
                        {
                            "id": override.override_id,
                            "start": override.start.strftime("%H:%M"),
                            "end": override.end.strftime("%H:%M"),
                        }
                        if override is not None
                        else None
                    ),
                }
            )
        return out
