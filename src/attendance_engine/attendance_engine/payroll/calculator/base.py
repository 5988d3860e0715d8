from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...common.datetime_utils import TimeLike
from ..model import WorkHourResult


class WorkHourCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll hour rules)."""

    @abstractmethod
    def compute(
        self,
        time_in: Optional[TimeLike],
        time_out: Optional[TimeLike],
        schedule_start: Optional[TimeLike],
        schedule_end: Optional[TimeLike],
    ) -> Optional[WorkHourResult]:
        """Metrics of one time-in/time-out pair, or None when inputs are unusable."""

        raise NotImplementedError
