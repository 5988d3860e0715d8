from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import parse_time_of_day
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Schedule, ScheduleGroup, ScheduleOverride
from .repository import ScheduleRepository, UserProfileRepository


def _to_group(r: dict) -> ScheduleGroup:
    return ScheduleGroup(group_id=int(r["id"]), name=str(r["name"]), created_at=r.get("created_at"))


def _to_override(r: dict) -> ScheduleOverride:
    return ScheduleOverride(
        override_id=int(r["id"]),
        schedule_group_id=int(r["sid"]),
        work_date=r["schedule_date"],
        start=parse_time_of_day(r["work_schedule_start"]),
        end=parse_time_of_day(r["work_schedule_end"]),
    )


class MySQLScheduleRepository(ScheduleRepository, UserProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_group(self, schedule_group_id: int) -> Optional[ScheduleGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, created_at FROM schedule_groups WHERE id=%s", (int(schedule_group_id),))
            r = fetchone(cur)
            return _to_group(r) if r else None

    def create_group(self, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute("INSERT INTO schedule_groups(name) VALUES(%s)", (name,))
            except mysql.connector.IntegrityError as exc:
                if exc.errno == errorcode.ER_DUP_ENTRY:
                    raise ConflictError(f"schedule group {name!r} already exists") from exc
                raise
            return int(cur.lastrowid)

    def list_groups(self, *, limit: int, offset: int) -> Sequence[ScheduleGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, created_at FROM schedule_groups ORDER BY id DESC LIMIT %s OFFSET %s",
                (int(limit), int(offset)),
            )
            return [_to_group(r) for r in fetchall(cur)]

    def count_groups(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM schedule_groups")
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def delete_group(self, schedule_group_id: int) -> bool:
        # Overrides go with the group (ON DELETE CASCADE); members lose their sid.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedule_groups WHERE id=%s", (int(schedule_group_id),))
            return cur.rowcount > 0

    def get_default_schedule(self, user_key: str) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT zk_id, work_schedule_start, work_schedule_end, sid
                FROM users
                WHERE zk_id=%s AND is_deleted=0
                """,
                (user_key,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Schedule(
                user_key=str(r["zk_id"]),
                start=parse_time_of_day(r["work_schedule_start"]) if r.get("work_schedule_start") is not None else None,
                end=parse_time_of_day(r["work_schedule_end"]) if r.get("work_schedule_end") is not None else None,
                schedule_group_id=int(r["sid"]) if r.get("sid") is not None else None,
            )

    def get_schedule_override(self, schedule_group_id: int, work_date: date) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, sid, schedule_date, work_schedule_start, work_schedule_end
                FROM schedule_assoc
                WHERE sid=%s AND schedule_date=%s
                """,
                (int(schedule_group_id), work_date),
            )
            r = fetchone(cur)
            return _to_override(r) if r else None

    def upsert_override(self, *, schedule_group_id: int, work_date: date, start: time, end: time) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_assoc(sid, schedule_date, work_schedule_start, work_schedule_end)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    work_schedule_start=VALUES(work_schedule_start),
                    work_schedule_end=VALUES(work_schedule_end)
                """,
                (int(schedule_group_id), work_date, start, end),
            )

            # If it was an update, lastrowid can be 0; fetch the id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT id FROM schedule_assoc WHERE sid=%s AND schedule_date=%s",
                (int(schedule_group_id), work_date),
            )
            r = fetchone(cur)
            return int(r["id"]) if r else 0

    def list_overrides(self, *, schedule_group_id: int, start: date, end: date) -> Sequence[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, sid, schedule_date, work_schedule_start, work_schedule_end
                FROM schedule_assoc
                WHERE sid=%s AND schedule_date BETWEEN %s AND %s
                ORDER BY schedule_date
                """,
                (int(schedule_group_id), start, end),
            )
            return [_to_override(r) for r in fetchall(cur)]

    def get_rest_day(self, user_key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT rest_day FROM users WHERE zk_id=%s", (user_key,))
            r = fetchone(cur)
            if not r or r.get("rest_day") is None:
                return None
            return str(r["rest_day"])
