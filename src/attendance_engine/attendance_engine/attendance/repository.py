from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import Origin
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Storage contract for attendance records.

    Implementations raise PersistenceError for any storage failure.
    """

    def get_for_user_and_date(self, user_key: str, work_date: date) -> Sequence[AttendanceRecord]:
        """All records of the user on that day, ordered by time_in ascending."""

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        raise NotImplementedError

    def close_record(self, *, attendance_id: int, time_out: time, origin: Optional[Origin] = None) -> None:
        """Set time_out of an open record; `origin` overrides the stored origin when given."""

        raise NotImplementedError
