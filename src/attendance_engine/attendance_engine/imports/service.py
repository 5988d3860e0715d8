from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..attendance.duplicates import DuplicateDetector
from ..attendance.factory import DuplicateDetectorFactory
from ..attendance.locks import UserLockRegistry
from ..attendance.repository import AttendanceRepository
from ..core.constants import DEFAULT_PROGRESS_EVERY
from ..core.enums import DuplicatePolicy, JobState, Origin, RowOutcome
from ..core.exceptions import PersistenceError, SequenceError, ValidationError
from .model import ImportReport, ImportRow, RowResult
from .normalizer import group_raw_punches, normalize_row
from .progress import ImportProgressRegistry

logger = logging.getLogger(__name__)

UNREADABLE_PUNCH = "unreadable punch: expected a user key and an ISO timestamp"


def _row_dict(raw: Any) -> dict:
    return dict(raw) if isinstance(raw, Mapping) else {"value": raw}


class BatchImporter:
    """Writes normalized import rows, one outcome per row.

    Rows are never retried and one bad row never stops the job: every row ends
    up inserted, updated, skipped (duplicate) or in the error list.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        detector_factory: Optional[DuplicateDetectorFactory] = None,
        policy: DuplicatePolicy = DuplicatePolicy.STANDARD,
        progress: Optional[ImportProgressRegistry] = None,
        locks: Optional[UserLockRegistry] = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
    ):
        self._attendance = attendance
        self._factory = detector_factory or DuplicateDetectorFactory()
        self._policy = DuplicatePolicy(policy)
        self._progress = progress or ImportProgressRegistry()
        self._locks = locks or UserLockRegistry()
        self._progress_every = max(1, int(progress_every))

    @property
    def progress(self) -> ImportProgressRegistry:
        return self._progress

    def import_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        *,
        job_id: Optional[str] = None,
        policy: DuplicatePolicy | str | None = None,
        unreadable: Sequence[Any] = (),
    ) -> ImportReport:
        """Import normalized-source rows; `unreadable` entries are reported as errors after them."""

        rows = list(rows)
        try:
            detector = self._factory.for_policy(policy or self._policy)
        except ValueError as exc:
            raise ValidationError(f"unknown duplicate policy {policy!r}") from exc

        total = len(rows) + len(unreadable)
        job_id = self._progress.create(total=total, job_id=job_id).job_id
        self._progress.start(job_id)
        logger.info("import started", extra={"job_id": job_id, "total": total})

        started = perf_counter()
        buckets: dict[RowOutcome, list[RowResult]] = {outcome: [] for outcome in RowOutcome}
        cancelled = False

        try:
            for index, raw in enumerate(rows):
                if self._progress.is_cancel_requested(job_id):
                    cancelled = True
                    break

                result = self._import_one(index, raw, detector)
                buckets[result.outcome].append(result)
                if result.outcome == RowOutcome.ERROR:
                    logger.warning(
                        "import row failed: %s", result.reason, extra={"job_id": job_id, "row_index": index}
                    )

                if (index + 1) % self._progress_every == 0 or index == len(rows) - 1:
                    self._progress.advance(job_id, index + 1, f"Processing record {index + 1} of {len(rows)}...")
        except Exception as exc:
            self._progress.finish(job_id, JobState.FAILED, str(exc))
            logger.exception("import aborted", extra={"job_id": job_id})
            raise

        if unreadable and not cancelled:
            buckets[RowOutcome.ERROR].extend(
                RowResult(index=len(rows) + offset, outcome=RowOutcome.ERROR, row=_row_dict(raw), reason=UNREADABLE_PUNCH)
                for offset, raw in enumerate(unreadable)
            )
            self._progress.advance(job_id, total, f"Processing record {total} of {total}...")

        report = ImportReport(
            job_id=job_id,
            total=total,
            inserted=buckets[RowOutcome.INSERTED],
            updated=buckets[RowOutcome.UPDATED],
            skipped=buckets[RowOutcome.SKIPPED],
            errors=buckets[RowOutcome.ERROR],
            elapsed_seconds=perf_counter() - started,
            cancelled=cancelled,
        )

        counts = report.counts
        message = (
            f"inserted={counts['inserted']} updated={counts['updated']} "
            f"skipped={counts['skipped']} failed={counts['failed']}"
        )
        self._progress.finish(job_id, JobState.CANCELLED if cancelled else JobState.COMPLETED, message)
        logger.info(
            "import finished", extra={"job_id": job_id, "status": report.status.value, **counts}
        )
        return report

    def _import_one(self, index: int, raw: Any, detector: DuplicateDetector) -> RowResult:
        try:
            row = normalize_row(raw)
        except ValidationError as exc:
            return RowResult(index=index, outcome=RowOutcome.ERROR, row=_row_dict(raw), reason=str(exc))

        try:
            with self._locks.hold(row.user_key):
                return self._write(index, row, detector)
        except (SequenceError, PersistenceError) as exc:
            return RowResult(index=index, outcome=RowOutcome.ERROR, row=row.to_dict(), reason=str(exc))

    def _write(self, index: int, row: ImportRow, detector: DuplicateDetector) -> RowResult:
        existing = list(self._attendance.get_for_user_and_date(row.user_key, row.work_date))

        verdict = detector.is_duplicate(row, existing)
        if verdict.duplicate:
            matched = next(r for r in existing if r.attendance_id == verdict.matched_id)
            if matched.is_open and row.time_out is not None and row.time_out != matched.time_in:
                self._attendance.close_record(attendance_id=matched.attendance_id, time_out=row.time_out)
                return RowResult(
                    index=index,
                    outcome=RowOutcome.UPDATED,
                    row=row.to_dict(),
                    attendance_id=matched.attendance_id,
                    reason="closed open record with imported time_out",
                )
            return RowResult(
                index=index,
                outcome=RowOutcome.SKIPPED,
                row=row.to_dict(),
                attendance_id=verdict.matched_id,
                reason=verdict.reason,
            )

        if row.time_out is None and any(r.is_open for r in existing):
            raise SequenceError("user already has an open record on this date")

        attendance_id = self._attendance.insert_record(
            user_key=row.user_key,
            work_date=row.work_date,
            time_in=row.time_in,
            time_out=row.time_out,
            origin=Origin.IMPORT,
            is_reliever=row.is_reliever,
        )
        return RowResult(index=index, outcome=RowOutcome.INSERTED, row=row.to_dict(), attendance_id=attendance_id)

    def import_punches(
        self,
        punches: Iterable[Any],
        *,
        job_id: Optional[str] = None,
        policy: DuplicatePolicy | str | None = None,
    ) -> ImportReport:
        """Group raw device punches per user and day, then import them as rows."""

        grouped = group_raw_punches(punches)
        return self.import_rows(grouped.rows, job_id=job_id, policy=policy, unreadable=grouped.unreadable)
