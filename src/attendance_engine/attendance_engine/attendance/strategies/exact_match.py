from __future__ import annotations

from .base import DuplicateMatchStrategy, PunchLike


class ExactMatchStrategy(DuplicateMatchStrategy):
    """Same user, same day, same time_in."""

    reason = "identical punch already recorded"

    def matches(self, candidate: PunchLike, existing: PunchLike) -> bool:
        if candidate.time_in is None or existing.time_in is None:
            return False
        return self.same_user_day(candidate, existing) and candidate.time_in == existing.time_in
