from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..common.datetime_utils import parse_time_of_day
from ..core.enums import Origin
from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, zk_id, log_date, time_in, time_out, origin, is_reliever"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        user_key=str(r["zk_id"]),
        work_date=r["log_date"],
        time_in=parse_time_of_day(r["time_in"]) if r.get("time_in") is not None else None,
        time_out=parse_time_of_day(r["time_out"]) if r.get("time_out") is not None else None,
        origin=Origin(r.get("origin") or Origin.MANUAL.value),
        is_reliever=bool(r.get("is_reliever")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_key: str, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE zk_id=%s AND log_date=%s
                ORDER BY time_in ASC, id ASC
                """,
                (user_key, work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_record(
        self,
        *,
        user_key: str,
        work_date: date,
        time_in: time,
        time_out: Optional[time] = None,
        origin: Origin = Origin.MANUAL,
        is_reliever: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(zk_id, log_date, time_in, time_out, origin, is_reliever)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (user_key, work_date, time_in, time_out, origin.value, int(bool(is_reliever))),
            )
            if not cur.lastrowid:
                raise PersistenceError("insert did not return an id")
            return int(cur.lastrowid)

    def close_record(self, *, attendance_id: int, time_out: time, origin: Optional[Origin] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if origin is None:
                cur.execute(
                    "UPDATE attendance SET time_out=%s WHERE id=%s AND time_out IS NULL",
                    (time_out, int(attendance_id)),
                )
            else:
                cur.execute(
                    "UPDATE attendance SET time_out=%s, origin=%s WHERE id=%s AND time_out IS NULL",
                    (time_out, origin.value, int(attendance_id)),
                )
            if cur.rowcount != 1:
                raise PersistenceError(f"attendance {attendance_id} is not open")
