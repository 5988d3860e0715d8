from __future__ import annotations

from datetime import time

from ...core.constants import DEFAULT_DUPLICATE_TOLERANCE_MINUTES
from .base import DuplicateMatchStrategy, PunchLike


def _seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


class ToleranceWindowStrategy(DuplicateMatchStrategy):
    """Same user and day, time_in within `tolerance_minutes` (inclusive) of each other."""

    reason = "near-identical punch within tolerance window"

    def __init__(self, tolerance_minutes: int = DEFAULT_DUPLICATE_TOLERANCE_MINUTES):
        if tolerance_minutes < 0:
            raise ValueError("tolerance_minutes must be >= 0")
        self.tolerance_minutes = int(tolerance_minutes)

    def matches(self, candidate: PunchLike, existing: PunchLike) -> bool:
        if candidate.time_in is None or existing.time_in is None:
            return False
        if not self.same_user_day(candidate, existing):
            return False
        return abs(_seconds(candidate.time_in) - _seconds(existing.time_in)) <= self.tolerance_minutes * 60
