from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .constants import (
    DEFAULT_BASIC_DAILY_RATE,
    DEFAULT_DUPLICATE_TOLERANCE_MINUTES,
    DEFAULT_HOLIDAY_COUNTRY,
    DEFAULT_PROGRESS_EVERY,
    DEFAULT_PROGRESS_RETENTION_SECONDS,
    DEFAULT_SCHEDULE_END,
    DEFAULT_SCHEDULE_START,
)
from .enums import DuplicatePolicy


@dataclass(frozen=True)
class EngineConfig:
    """Tunables of the time-accounting engine (see ENGINE_CONFIG in config/*)."""

    duplicate_tolerance_minutes: int = DEFAULT_DUPLICATE_TOLERANCE_MINUTES
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.STANDARD
    holiday_country: str = DEFAULT_HOLIDAY_COUNTRY
    # None means the holiday country defaults.
    special_holidays: Optional[frozenset[str]] = None
    basic_daily_rate: float = DEFAULT_BASIC_DAILY_RATE
    default_schedule_start: str = DEFAULT_SCHEDULE_START
    default_schedule_end: str = DEFAULT_SCHEDULE_END
    progress_retention_seconds: int = DEFAULT_PROGRESS_RETENTION_SECONDS
    progress_every: int = DEFAULT_PROGRESS_EVERY

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "EngineConfig":
        values = dict(values or {})
        special = values.get("special_holidays") or ()
        if isinstance(special, str):
            special = [s for s in special.split(",")]
        special = frozenset(s.strip().lower() for s in special if s and s.strip())
        return cls(
            duplicate_tolerance_minutes=int(
                values.get("duplicate_tolerance_minutes", DEFAULT_DUPLICATE_TOLERANCE_MINUTES)
            ),
            duplicate_policy=DuplicatePolicy(values.get("duplicate_policy", DuplicatePolicy.STANDARD.value)),
            holiday_country=str(values.get("holiday_country") or DEFAULT_HOLIDAY_COUNTRY),
            special_holidays=special or None,
            basic_daily_rate=float(values.get("basic_daily_rate", DEFAULT_BASIC_DAILY_RATE)),
            default_schedule_start=str(values.get("default_schedule_start") or DEFAULT_SCHEDULE_START),
            default_schedule_end=str(values.get("default_schedule_end") or DEFAULT_SCHEDULE_END),
            progress_retention_seconds=int(
                values.get("progress_retention_seconds", DEFAULT_PROGRESS_RETENTION_SECONDS)
            ),
            progress_every=max(1, int(values.get("progress_every", DEFAULT_PROGRESS_EVERY))),
        )
