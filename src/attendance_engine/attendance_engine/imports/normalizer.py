"""Row normalization for bulk imports.

Spreadsheet, CSV and DAT decoding happens before this module; here rows are
plain mappings whose column names vary by source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Union

from ..common.validators import first_present, optional_time, require_date, require_non_empty, require_time
from .model import ImportRow

logger = logging.getLogger(__name__)

USER_KEY_FIELDS = ("user_key", "userKey", "zk_id", "ZK_ID", "employee_id", "employeeId")
DATE_FIELDS = ("date", "log_date", "LOG_DATE", "work_date")
TIME_IN_FIELDS = ("time_in", "timeIn", "TIME_IN")
TIME_OUT_FIELDS = ("time_out", "timeOut", "TIME_OUT")
RELIEVER_FIELDS = ("is_reliever", "isReliever")

RawPunch = Union[tuple[Any, Any], Mapping[str, Any]]


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def normalize_row(raw: Mapping[str, Any]) -> ImportRow:
    """Validate one row; raises ValidationError on missing/malformed fields."""

    return ImportRow(
        user_key=require_non_empty(first_present(raw, *USER_KEY_FIELDS), "user_key"),
        work_date=require_date(first_present(raw, *DATE_FIELDS), "date"),
        time_in=require_time(first_present(raw, *TIME_IN_FIELDS), "time_in"),
        time_out=optional_time(first_present(raw, *TIME_OUT_FIELDS), "time_out"),
        is_reliever=_truthy(first_present(raw, *RELIEVER_FIELDS) or False),
    )


@dataclass(frozen=True)
class GroupedPunches:
    rows: list[dict] = field(default_factory=list)
    unreadable: list[Any] = field(default_factory=list)


def _local_naive(stamp: datetime) -> datetime:
    # Offset-aware stamps are grouped by the operating-locale calendar day.
    if stamp.tzinfo is not None:
        return stamp.astimezone().replace(tzinfo=None)
    return stamp


def _as_punch(raw: RawPunch) -> tuple[str, datetime] | None:
    if isinstance(raw, Mapping):
        user_key = first_present(raw, *USER_KEY_FIELDS)
        stamp = first_present(raw, "timestamp", "ts")
    elif isinstance(raw, (tuple, list)) and len(raw) == 2:
        user_key, stamp = raw
    else:
        return None

    if user_key is None or not str(user_key).strip() or stamp is None:
        return None
    if not isinstance(stamp, datetime):
        try:
            stamp = datetime.fromisoformat(str(stamp).strip())
        except ValueError:
            return None
    return str(user_key).strip(), _local_naive(stamp)


def group_raw_punches(punches: Iterable[RawPunch]) -> GroupedPunches:
    """Group ungrouped device punches (legacy DAT exports) into import rows.

    Per (user, calendar day): earliest punch is time_in, latest later punch is
    time_out. Entries that are not a (user, timestamp) pair or whose timestamp
    cannot be read are returned in `unreadable` so the importer can report them.
    """

    parsed: list[tuple[str, datetime]] = []
    unreadable: list[Any] = []
    for raw in punches:
        punch = _as_punch(raw)
        if punch is None:
            logger.warning("unreadable punch %r", raw)
            unreadable.append(raw)
            continue
        parsed.append(punch)

    parsed.sort(key=lambda p: (p[0], p[1]))

    grouped: dict[tuple[str, date], dict] = {}
    for user_key, stamp in parsed:
        key = (user_key, stamp.date())
        clock = stamp.strftime("%H:%M:%S")
        row = grouped.get(key)
        if row is None:
            grouped[key] = {"user_key": user_key, "date": stamp.date().isoformat(), "time_in": clock, "time_out": None}
        elif clock > row["time_in"]:
            row["time_out"] = clock

    return GroupedPunches(rows=list(grouped.values()), unreadable=unreadable)
