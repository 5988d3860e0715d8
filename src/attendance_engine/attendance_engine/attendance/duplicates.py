from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .model import AttendanceRecord
from .strategies.base import DuplicateMatchStrategy, PunchLike


@dataclass(frozen=True)
class DuplicateVerdict:
    duplicate: bool
    reason: Optional[str] = None
    matched_id: Optional[int] = None

    def to_dict(self) -> dict:
        if not self.duplicate:
            return {"duplicate": False}
        return {"duplicate": True, "reason": self.reason, "matched_id": self.matched_id}


NOT_DUPLICATE = DuplicateVerdict(duplicate=False)


class DuplicateDetector:
    """Runs match strategies in order; the first strategy that matches any record wins.

    Pure: the caller fetches the comparison set for the candidate's (user, day).
    """

    def __init__(self, strategies: Sequence[DuplicateMatchStrategy]):
        self._strategies = tuple(strategies)

    @property
    def strategies(self) -> tuple[DuplicateMatchStrategy, ...]:
        return self._strategies

    def is_duplicate(self, candidate: PunchLike, existing_for_user_date: Iterable[AttendanceRecord]) -> DuplicateVerdict:
        existing = list(existing_for_user_date)
        for strategy in self._strategies:
            for record in existing:
                if strategy.matches(candidate, record):
                    return DuplicateVerdict(duplicate=True, reason=strategy.reason, matched_id=record.attendance_id)
        return NOT_DUPLICATE
