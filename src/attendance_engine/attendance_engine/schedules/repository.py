from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from .model import Schedule, ScheduleGroup, ScheduleOverride


class ScheduleRepository(Protocol):
    def get_group(self, schedule_group_id: int) -> Optional[ScheduleGroup]:
        raise NotImplementedError

    def create_group(self, name: str) -> int:
        """Insert a named group and return its id.

        Raises ConflictError when the name is taken.
        """

        raise NotImplementedError

    def list_groups(self, *, limit: int, offset: int) -> Sequence[ScheduleGroup]:
        raise NotImplementedError

    def count_groups(self) -> int:
        raise NotImplementedError

    def delete_group(self, schedule_group_id: int) -> bool:
        raise NotImplementedError

    def get_default_schedule(self, user_key: str) -> Optional[Schedule]:
        raise NotImplementedError

    def get_schedule_override(self, schedule_group_id: int, work_date: date) -> Optional[ScheduleOverride]:
        raise NotImplementedError

    def upsert_override(self, *, schedule_group_id: int, work_date: date, start: time, end: time) -> int:
        """Create or replace the override of a group for one date.

        Returns the override id.
        """

        raise NotImplementedError

    def list_overrides(self, *, schedule_group_id: int, start: date, end: date) -> Sequence[ScheduleOverride]:
        raise NotImplementedError


class UserProfileRepository(Protocol):
    def get_rest_day(self, user_key: str) -> Optional[str]:
        """Rest day as stored: weekday name or index (0 = Sunday)."""

        raise NotImplementedError
