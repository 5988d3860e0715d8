from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, time
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import TimeLike
from ..common.validators import first_present, require_date, require_non_empty, require_time
from ..core.enums import Origin, PunchAction
from ..core.exceptions import PersistenceError, SequenceError, ValidationError
from .locks import UserLockRegistry
from .model import AttendanceRecord, PunchResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

REPLAY_REASON = "identical punch already recorded"


def _by_time_in(record: AttendanceRecord) -> tuple[time, int]:
    return (record.time_in or time.min, record.attendance_id)


def _find_replay(
    records: Sequence[AttendanceRecord], punch: time, open_record: Optional[AttendanceRecord]
) -> Optional[AttendanceRecord]:
    # While a record is open only its own time_in counts as a replay.
    if open_record is not None:
        return open_record if open_record.time_in == punch else None
    for record in records:
        if record.time_in == punch or record.time_out == punch:
            return record
    return None


def _parse_origin(value: Any) -> Origin:
    try:
        return Origin(value)
    except ValueError as exc:
        raise ValidationError(f"unknown origin {value!r}") from exc


class PunchReconciler:
    """Pairs single punch events into time-in/time-out records.

    One punch either opens a record, closes the open record, or is rejected.
    An exact replay of a stored punch is reported as skipped so device log
    re-polls are idempotent. While a record is open, only a replay of its
    time_in is skipped and any other earlier punch is a sequence error; near-identical punches are NOT filtered here
    (only the bulk importer applies the tolerance window).
    """

    def __init__(self, attendance: AttendanceRepository, *, locks: UserLockRegistry | None = None):
        self._attendance = attendance
        self._locks = locks or UserLockRegistry()

    def reconcile(
        self,
        user_key: str,
        work_date: date | str,
        punch_time: TimeLike,
        origin: Origin | str = Origin.DEVICE,
    ) -> PunchResult:
        user_key = require_non_empty(user_key, "user_key")
        work_date = require_date(work_date, "date")
        punch = require_time(punch_time, "time")
        origin = _parse_origin(origin)

        with self._locks.hold(user_key):
            records = sorted(self._attendance.get_for_user_and_date(user_key, work_date), key=_by_time_in)

            open_record = next((r for r in records if r.is_open), None)
            replayed = _find_replay(records, punch, open_record)
            if replayed is not None:
                logger.info(
                    "punch replay skipped",
                    extra={"user_key": user_key, "work_date": str(work_date), "punch": str(punch)},
                )
                return PunchResult(action=PunchAction.SKIPPED, record=replayed, reason=REPLAY_REASON)

            if open_record is not None:
                return self._close(open_record, punch, origin)

            last_record = records[-1] if records else None
            if last_record is None or (last_record.time_out is not None and punch > last_record.time_out):
                return self._open(user_key, work_date, punch, origin)

            logger.warning(
                "punch rejected: before last close",
                extra={"user_key": user_key, "work_date": str(work_date), "punch": str(punch)},
            )
            raise SequenceError("punch time is before the last close")

    def _close(self, open_record: AttendanceRecord, punch: time, origin: Origin) -> PunchResult:
        if not punch > open_record.time_in:
            logger.warning(
                "punch rejected: precedes open time_in",
                extra={"user_key": open_record.user_key, "attendance_id": open_record.attendance_id, "punch": str(punch)},
            )
            raise SequenceError("punch precedes last time_in")

        new_origin = Origin.DEVICE if origin == Origin.DEVICE else None
        self._attendance.close_record(attendance_id=open_record.attendance_id, time_out=punch, origin=new_origin)
        record = replace(open_record, time_out=punch, origin=new_origin or open_record.origin)
        logger.info("time_out recorded", extra={"user_key": record.user_key, "attendance_id": record.attendance_id})
        return PunchResult(action=PunchAction.TIME_OUT, record=record)

    def _open(self, user_key: str, work_date: date, punch: time, origin: Origin) -> PunchResult:
        attendance_id = self._attendance.insert_record(
            user_key=user_key,
            work_date=work_date,
            time_in=punch,
            time_out=None,
            origin=origin,
        )
        record = AttendanceRecord(
            attendance_id=attendance_id,
            user_key=user_key,
            work_date=work_date,
            time_in=punch,
            time_out=None,
            origin=origin,
        )
        logger.info("time_in recorded", extra={"user_key": user_key, "attendance_id": attendance_id})
        return PunchResult(action=PunchAction.TIME_IN, record=record)

    def reconcile_many(
        self,
        punches: Iterable[Mapping[str, Any]],
        *,
        origin: Origin | str = Origin.DEVICE,
    ) -> list[PunchResult]:
        """Reconcile a batch of device log entries in chronological order.

        Results come back in input order; a bad entry is reported as an error
        and does not stop the rest.
        """

        results: dict[int, PunchResult] = {}
        pending: list[tuple[date, time, int, str, Origin]] = []

        for index, raw in enumerate(punches):
            try:
                user_key = require_non_empty(first_present(raw, "user_key", "userKey", "zk_id"), "user_key")
                work_date = require_date(first_present(raw, "date", "log_date", "work_date"), "date")
                punch = require_time(first_present(raw, "time", "punch_time"), "time")
                entry_origin = _parse_origin(raw.get("origin") or origin)
            except ValidationError as exc:
                results[index] = PunchResult(action=PunchAction.ERROR, record=None, reason=str(exc))
                continue
            pending.append((work_date, punch, index, user_key, entry_origin))

        for work_date, punch, index, user_key, entry_origin in sorted(pending, key=lambda p: (p[0], p[1], p[2])):
            try:
                results[index] = self.reconcile(user_key, work_date, punch, entry_origin)
            except (SequenceError, PersistenceError) as exc:
                results[index] = PunchResult(action=PunchAction.ERROR, record=None, reason=str(exc))

        return [results[i] for i in sorted(results)]
