from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_DUPLICATE_TOLERANCE_MINUTES
from ..core.enums import DuplicatePolicy
from .duplicates import DuplicateDetector
from .strategies.exact_match import ExactMatchStrategy
from .strategies.tolerance_window import ToleranceWindowStrategy


@dataclass
class DuplicateDetectorFactory:
    """Factory Pattern: build the duplicate policy an import source asks for."""

    tolerance_minutes: int = DEFAULT_DUPLICATE_TOLERANCE_MINUTES

    def for_policy(self, policy: DuplicatePolicy | str = DuplicatePolicy.STANDARD) -> DuplicateDetector:
        policy = DuplicatePolicy(policy)
        if policy == DuplicatePolicy.STRICT:
            return DuplicateDetector([ExactMatchStrategy()])
        return DuplicateDetector([ExactMatchStrategy(), ToleranceWindowStrategy(self.tolerance_minutes)])
