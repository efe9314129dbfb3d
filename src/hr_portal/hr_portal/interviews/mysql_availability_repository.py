from __future__ import annotations

from datetime import time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import InterviewAvailability
from .repository import AvailabilityRepository


def _row_to_slot(r: dict) -> InterviewAvailability:
    return InterviewAvailability(
        slot_id=int(r["slot_id"]),
        interviewer_id=int(r["interviewer_id"]),
        day_of_week=int(r["day_of_week"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        is_active=bool(r["is_active"]),
    )


class MySQLAvailabilityRepository(AvailabilityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_interviewer(self, interviewer_id: int) -> Sequence[InterviewAvailability]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT slot_id, interviewer_id, day_of_week, start_time, end_time, is_active
                FROM interview_availability
                WHERE interviewer_id=%s
                ORDER BY day_of_week, start_time
                """,
                (int(interviewer_id),),
            )
            return [_row_to_slot(r) for r in fetchall(cur)]

    def get_by_id(self, slot_id: int) -> Optional[InterviewAvailability]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT slot_id, interviewer_id, day_of_week, start_time, end_time, is_active
                FROM interview_availability
                WHERE slot_id=%s
                """,
                (int(slot_id),),
            )
            r = fetchone(cur)
            return _row_to_slot(r) if r else None

    def create(self, *, interviewer_id: int, day_of_week: int, start_time: time, end_time: time, is_active: bool = True) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO interview_availability(interviewer_id, day_of_week, start_time, end_time, is_active)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(interviewer_id), int(day_of_week), start_time, end_time, 1 if is_active else 0),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        slot_id: int,
        day_of_week: int,
        start_time: time,
        end_time: time,
        is_active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE interview_availability
                SET day_of_week=%s, start_time=%s, end_time=%s, is_active=%s
                WHERE slot_id=%s
                """,
                (int(day_of_week), start_time, end_time, 1 if is_active else 0, int(slot_id)),
            )
            return cur.rowcount > 0

    def delete(self, slot_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM interview_availability WHERE slot_id=%s", (int(slot_id),))
            return cur.rowcount > 0
