from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import format_time
from ..core.enums import Origin, PunchAction


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one time-in/time-out pair of a user on a calendar day."""

    attendance_id: int
    user_key: str
    work_date: date
    time_in: Optional[time]
    time_out: Optional[time]
    origin: Origin = Origin.MANUAL
    is_reliever: bool = False

    @property
    def is_open(self) -> bool:
        return self.time_in is not None and self.time_out is None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "user_key": self.user_key,
            "date": self.work_date.isoformat(),
            "time_in": format_time(self.time_in),
            "time_out": format_time(self.time_out),
            "origin": self.origin.value,
            "is_reliever": self.is_reliever,
        }


@dataclass(frozen=True)
class PunchResult:
    """Outcome of reconciling one punch. `record` is None only for errors."""

    action: PunchAction
    record: Optional[AttendanceRecord]
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict = {"action": self.action.value}
        if self.record is not None:
            out["record"] = self.record.to_dict()
        if self.reason:
            out["reason" if self.action != PunchAction.ERROR else "error"] = self.reason
        return out
