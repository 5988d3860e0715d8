from __future__ import annotations

from dataclasses import replace
from datetime import date, time
from typing import Callable, Optional

import pytest

from src.attendance_engine.attendance_engine.attendance.model import AttendanceRecord
from src.attendance_engine.attendance_engine.calendars.holiday_calendar import StaticHolidayCalendar
from src.attendance_engine.attendance_engine.container import build_engine
from src.attendance_engine.attendance_engine.core.config import EngineConfig
from src.attendance_engine.attendance_engine.core.enums import HolidayType, Origin
from src.attendance_engine.attendance_engine.core.exceptions import ConflictError, PersistenceError
from src.attendance_engine.attendance_engine.schedules.model import Schedule, ScheduleGroup, ScheduleOverride


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.on_insert: Optional[Callable[[AttendanceRecord], None]] = None
        self.fail_inserts_for: set[str] = set()

    def get_for_user_and_date(self, user_key: str, work_date: date):
        items = [r for r in self.records.values() if r.user_key == user_key and r.work_date == work_date]
        items.sort(key=lambda r: (r.time_in or time.min, r.attendance_id))
        return items

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def insert_record(
        self,
        *,
        user_key: str,
        work_date: date,
        time_in: time,
        time_out: Optional[time] = None,
        origin: Origin = Origin.MANUAL,
        is_reliever: bool = False,
    ) -> int:
        if user_key in self.fail_inserts_for:
            raise PersistenceError("connection lost")
        self._id += 1
        rec = AttendanceRecord(
            attendance_id=self._id,
            user_key=user_key,
            work_date=work_date,
            time_in=time_in,
            time_out=time_out,
            origin=origin,
            is_reliever=is_reliever,
        )
        self.records[self._id] = rec
        if self.on_insert:
            self.on_insert(rec)
        return self._id

    def close_record(self, *, attendance_id: int, time_out: time, origin: Optional[Origin] = None) -> None:
        rec = self.records.get(attendance_id)
        if rec is None or not rec.is_open:
            raise PersistenceError(f"attendance {attendance_id} is not open")
        self.records[attendance_id] = replace(rec, time_out=time_out, origin=origin or rec.origin)


class InMemorySchedules:
    def __init__(self):
        self.defaults: dict[str, Schedule] = {}
        self.overrides: dict[tuple[int, date], ScheduleOverride] = {}
        self.groups: dict[int, ScheduleGroup] = {}
        self.rest_days: dict[str, str] = {}
        self._id = 0

    def get_group(self, schedule_group_id: int) -> Optional[ScheduleGroup]:
        return self.groups.get(schedule_group_id)

    def create_group(self, name: str) -> int:
        if any(g.name == name for g in self.groups.values()):
            raise ConflictError(f"schedule group {name!r} already exists")
        group_id = max(self.groups, default=0) + 1
        self.groups[group_id] = ScheduleGroup(group_id=group_id, name=name)
        return group_id

    def list_groups(self, *, limit: int, offset: int):
        return sorted(self.groups.values(), key=lambda g: -g.group_id)[offset : offset + limit]

    def count_groups(self) -> int:
        return len(self.groups)

    def delete_group(self, schedule_group_id: int) -> bool:
        if self.groups.pop(schedule_group_id, None) is None:
            return False
        self.overrides = {k: o for k, o in self.overrides.items() if k[0] != schedule_group_id}
        return True

    def get_default_schedule(self, user_key: str) -> Optional[Schedule]:
        return self.defaults.get(user_key)

    def get_schedule_override(self, schedule_group_id: int, work_date: date) -> Optional[ScheduleOverride]:
        return self.overrides.get((schedule_group_id, work_date))

    def upsert_override(self, *, schedule_group_id: int, work_date: date, start: time, end: time) -> int:
        existing = self.overrides.get((schedule_group_id, work_date))
        if existing is not None:
            override_id = existing.override_id
        else:
            self._id += 1
            override_id = self._id
        self.overrides[(schedule_group_id, work_date)] = ScheduleOverride(
            schedule_group_id=schedule_group_id, work_date=work_date, start=start, end=end, override_id=override_id
        )
        return override_id

    def list_overrides(self, *, schedule_group_id: int, start: date, end: date):
        return [
            o
            for (sid, day), o in sorted(self.overrides.items(), key=lambda kv: kv[0][1])
            if sid == schedule_group_id and start <= day <= end
        ]

    def get_rest_day(self, user_key: str) -> Optional[str]:
        return self.rest_days.get(user_key)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def schedules_repo() -> InMemorySchedules:
    repo = InMemorySchedules()
    repo.groups[3] = ScheduleGroup(group_id=3, name="Rotating A")
    repo.groups[4] = ScheduleGroup(group_id=4, name="Rotating B")
    repo.defaults["7"] = Schedule(user_key="7", start=time(9, 0), end=time(18, 0), schedule_group_id=3)
    repo.rest_days["7"] = "Sunday"
    return repo


@pytest.fixture
def holiday_calendar() -> StaticHolidayCalendar:
    return StaticHolidayCalendar(
        {
            date(2025, 1, 1): ("New Year's Day", HolidayType.REGULAR),
            date(2025, 1, 29): ("Chinese New Year", HolidayType.SPECIAL),
        }
    )


@pytest.fixture
def engine(attendance_repo, schedules_repo, holiday_calendar):
    return build_engine(
        attendance_repo=attendance_repo,
        schedules_repo=schedules_repo,
        users_repo=schedules_repo,
        config=EngineConfig(progress_every=1),
        holiday_calendar=holiday_calendar,
    )
