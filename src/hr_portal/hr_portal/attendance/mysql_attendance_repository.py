from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceSession, CheckIn
from .repository import AttendanceRepository

_SESSION_COLUMNS = """
    session_id, name, location, status, qr_token, starts_at, expires_at,
    notes, created_by, created_at, closed_at
"""


def _row_to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        name=r["name"],
        location=r["location"],
        status=SessionStatus(r["status"]),
        qr_token=r["qr_token"],
        starts_at=r["starts_at"],
        expires_at=r["expires_at"],
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        closed_at=r.get("closed_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Sessions --------
    def create_session(
        self,
        *,
        name: str,
        location: str,
        qr_token: str,
        starts_at: datetime,
        expires_at: datetime,
        notes: Optional[str],
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    name, location, status, qr_token, starts_at, expires_at, notes, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, location, SessionStatus.ACTIVE.value, qr_token, starts_at, expires_at, notes, created_by),
            )
            return int(cur.lastrowid)

    def get_session(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s",
                (int(session_id),),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def list_sessions(self, *, active_only: bool = False, limit: int = 200) -> Sequence[AttendanceSession]:
        where = "status=%s" if active_only else "1=1"
        params: list[object] = [SessionStatus.ACTIVE.value] if active_only else []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE {where}
                ORDER BY starts_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def update_token(self, *, session_id: int, qr_token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_sessions SET qr_token=%s WHERE session_id=%s",
                (qr_token, int(session_id)),
            )
            return cur.rowcount > 0

    def close_session(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET status=%s, closed_at=NOW()
                WHERE session_id=%s AND status=%s
                """,
                (SessionStatus.CLOSED.value, int(session_id), SessionStatus.ACTIVE.value),
            )
            return cur.rowcount > 0

    # -------- Check-ins --------
    def has_checked_in(self, *, session_id: int, user_id: Optional[int], name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if user_id is not None:
                cur.execute(
                    "SELECT 1 AS found FROM attendance_checkins WHERE session_id=%s AND user_id=%s LIMIT 1",
                    (int(session_id), int(user_id)),
                )
            else:
                cur.execute(
                    """
                    SELECT 1 AS found FROM attendance_checkins
                    WHERE session_id=%s AND user_id IS NULL AND LOWER(name)=LOWER(%s)
                    LIMIT 1
                    """,
                    (int(session_id), name),
                )
            return fetchone(cur) is not None

    def create_checkin(
        self,
        *,
        session_id: int,
        user_id: Optional[int],
        name: str,
        email: Optional[str],
        location: str,
        user_agent: Optional[str],
        ip_hash: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_checkins(
                    session_id, user_id, name, email, location, user_agent, ip_hash
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(session_id), user_id, name, email, location, user_agent, ip_hash),
            )
            return int(cur.lastrowid)

    def list_checkins(self, session_id: int) -> Sequence[CheckIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT checkin_id, session_id, user_id, name, email, location,
                       checked_in_at, user_agent, ip_hash
                FROM attendance_checkins
                WHERE session_id=%s
                ORDER BY checked_in_at
                """,
                (int(session_id),),
            )
            return [
                CheckIn(
                    checkin_id=int(r["checkin_id"]),
                    session_id=int(r["session_id"]),
                    user_id=r.get("user_id"),
                    name=r["name"],
                    email=r.get("email"),
                    location=r["location"],
                    checked_in_at=r["checked_in_at"],
                    user_agent=r.get("user_agent"),
                    ip_hash=r.get("ip_hash"),
                )
                for r in fetchall(cur)
            ]
