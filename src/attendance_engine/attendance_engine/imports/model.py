from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Optional

from ..common.datetime_utils import format_time
from ..core.enums import ImportStatus, RowOutcome


@dataclass(frozen=True)
class ImportRow:
    """A validated row handed over by the file normalization stage."""

    user_key: str
    work_date: date
    time_in: time
    time_out: Optional[time] = None
    is_reliever: bool = False

    def to_dict(self) -> dict:
        return {
            "user_key": self.user_key,
            "date": self.work_date.isoformat(),
            "time_in": format_time(self.time_in),
            "time_out": format_time(self.time_out),
        }


@dataclass(frozen=True)
class RowResult:
    index: int
    outcome: RowOutcome
    row: dict
    attendance_id: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"index": self.index, "status": self.outcome.value, "row": self.row}
        if self.attendance_id is not None:
            out["id"] = self.attendance_id
        if self.reason:
            out["error" if self.outcome == RowOutcome.ERROR else "reason"] = self.reason
        return out


def derive_status(*, total: int, inserted: int, updated: int, failed: int) -> ImportStatus:
    if total == 0:
        return ImportStatus.WARNING
    if failed >= total:
        return ImportStatus.ERROR
    if failed > 0:
        return ImportStatus.PARTIAL
    if inserted + updated == 0:
        return ImportStatus.WARNING
    return ImportStatus.SUCCESS


@dataclass(frozen=True)
class ImportReport:
    job_id: str
    total: int
    inserted: list[RowResult] = field(default_factory=list)
    updated: list[RowResult] = field(default_factory=list)
    skipped: list[RowResult] = field(default_factory=list)
    errors: list[RowResult] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    cancelled: bool = False

    @property
    def counts(self) -> dict[str, int]:
        return {
            "total": self.total,
            "inserted": len(self.inserted),
            "updated": len(self.updated),
            "skipped": len(self.skipped),
            "failed": len(self.errors),
        }

    @property
    def status(self) -> ImportStatus:
        return derive_status(
            total=self.total,
            inserted=len(self.inserted),
            updated=len(self.updated),
            failed=len(self.errors),
        )

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "counts": self.counts,
            "inserted": [r.to_dict() for r in self.inserted],
            "updated": [r.to_dict() for r in self.updated],
            "skipped": [r.to_dict() for r in self.skipped],
            "errors": [r.to_dict() for r in self.errors],
            "time": f"{self.elapsed_seconds:.1f}s",
            "cancelled": self.cancelled,
        }
