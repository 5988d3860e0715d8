from __future__ import annotations

from enum import Enum


class Origin(str, Enum):
    """Where an attendance record came from."""

    DEVICE = "device"
    MANUAL = "manual"
    IMPORT = "import"


class PunchAction(str, Enum):
    TIME_IN = "time_in"
    TIME_OUT = "time_out"
    SKIPPED = "skipped"
    ERROR = "error"


class RowOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


class ImportStatus(str, Enum):
    """Overall status of an import job, derived from the row counts."""

    SUCCESS = "success"
    WARNING = "warning"
    PARTIAL = "partial"
    ERROR = "error"


class JobState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class DuplicatePolicy(str, Enum):
    """STRICT only rejects identical punches; STANDARD also rejects near-identical ones."""

    STRICT = "strict"
    STANDARD = "standard"


class HolidayType(str, Enum):
    REGULAR = "regular"
    SPECIAL = "special"


class ScheduleSource(str, Enum):
    OVERRIDE = "override"
    DEFAULT = "default"
    SYSTEM = "system"
