from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, time
from typing import Optional, Protocol


class PunchLike(Protocol):
    user_key: str
    work_date: date
    time_in: Optional[time]


class DuplicateMatchStrategy(ABC):
    """Strategy Pattern: one rule deciding whether two punches are the same event."""

    reason: str = "duplicate"

    @abstractmethod
    def matches(self, candidate: PunchLike, existing: PunchLike) -> bool:
        raise NotImplementedError

    @staticmethod
    def same_user_day(candidate: PunchLike, existing: PunchLike) -> bool:
        return candidate.user_key == existing.user_key and candidate.work_date == existing.work_date
