from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import ScheduleSource


@dataclass(frozen=True)
class Schedule:
    """A user's default working hours; `schedule_group_id` links to date overrides."""

    user_key: str
    start: Optional[time]
    end: Optional[time]
    schedule_group_id: Optional[int] = None


@dataclass(frozen=True)
class ScheduleGroup:
    """Named rotation that users share; overrides hang off its id."""

    group_id: int
    name: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.group_id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class ScheduleOverride:
    """Date-specific hours of a schedule group (rotating shifts)."""

    schedule_group_id: int
    work_date: date
    start: time
    end: time
    override_id: Optional[int] = None


@dataclass(frozen=True)
class ResolvedSchedule:
    start: time
    end: time
    source: ScheduleSource

    def to_dict(self) -> dict:
        return {
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
            "source": self.source.value,
        }
