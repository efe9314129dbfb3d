from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import InterviewStatus, InterviewType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where_clause
from .model import Interview
from .repository import InterviewRepository

_SELECT = """
    SELECT i.interview_id, i.candidate_id, i.interviewer_id, i.custom_interviewer_name,
           i.scheduled_at, i.duration_minutes, i.interview_type, i.status,
           i.location, i.meeting_link, i.notes, i.created_by, i.created_at, i.updated_at,
           c.full_name AS candidate_name, u.full_name AS interviewer_name
    FROM interviews i
    JOIN candidates c ON c.candidate_id = i.candidate_id
    LEFT JOIN users u ON u.user_id = i.interviewer_id
"""


def _row_to_interview(r: dict) -> Interview:
    return Interview(
        interview_id=int(r["interview_id"]),
        candidate_id=int(r["candidate_id"]),
        interviewer_id=int(r["interviewer_id"]) if r.get("interviewer_id") is not None else None,
        custom_interviewer_name=r.get("custom_interviewer_name"),
        scheduled_at=r["scheduled_at"],
        duration_minutes=int(r["duration_minutes"]),
        interview_type=InterviewType(r["interview_type"]),
        status=InterviewStatus(r["status"]),
        location=r.get("location"),
        meeting_link=r.get("meeting_link"),
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        candidate_name=r.get("candidate_name"),
        interviewer_name=r.get("interviewer_name"),
    )


class MySQLInterviewRepository(InterviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        candidate_id: int,
        interviewer_id: Optional[int],
        custom_interviewer_name: Optional[str],
        scheduled_at: datetime,
        duration_minutes: int,
        interview_type: InterviewType,
        location: Optional[str],
        meeting_link: Optional[str],
        notes: Optional[str],
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO interviews(
                    candidate_id, interviewer_id, custom_interviewer_name, scheduled_at,
                    duration_minutes, interview_type, status, location, meeting_link, notes, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(candidate_id),
                    interviewer_id,
                    custom_interviewer_name,
                    scheduled_at,
                    int(duration_minutes),
                    interview_type.value,
                    InterviewStatus.SCHEDULED.value,
                    location,
                    meeting_link,
                    notes,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, interview_id: int) -> Optional[Interview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE i.interview_id=%s", (int(interview_id),))
            r = fetchone(cur)
            return _row_to_interview(r) if r else None

    def list_all(
        self,
        *,
        status: Optional[InterviewStatus] = None,
        interviewer_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Interview]:
        where, params = where_clause({"i.status=%s": status, "i.interviewer_id=%s": interviewer_id})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY i.scheduled_at DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_interview(r) for r in fetchall(cur)]

    def list_by_candidate(self, candidate_id: int) -> Sequence[Interview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE i.candidate_id=%s ORDER BY i.scheduled_at", (int(candidate_id),))
            return [_row_to_interview(r) for r in fetchall(cur)]

    def list_scheduled(
        self,
        *,
        start: datetime,
        end: datetime,
        interviewer_id: Optional[int] = None,
        candidate_id: Optional[int] = None,
    ) -> Sequence[Interview]:
        where, params = where_clause(
            {
                "i.status=%s": InterviewStatus.SCHEDULED,
                "i.interviewer_id=%s": interviewer_id,
                "i.candidate_id=%s": candidate_id,
                "i.scheduled_at < %s": end,
                "DATE_ADD(i.scheduled_at, INTERVAL i.duration_minutes MINUTE) > %s": start,
            }
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY i.scheduled_at", tuple(params))
            return [_row_to_interview(r) for r in fetchall(cur)]

    def update_status(self, *, interview_id: int, status: InterviewStatus, notes: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE interviews
                SET status=%s, notes=COALESCE(%s, notes), updated_at=NOW()
                WHERE interview_id=%s AND status=%s
                """,
                (status.value, notes, int(interview_id), InterviewStatus.SCHEDULED.value),
            )
            return cur.rowcount > 0

    def update_time(self, *, interview_id: int, scheduled_at: datetime, duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE interviews
                SET scheduled_at=%s, duration_minutes=%s, updated_at=NOW()
                WHERE interview_id=%s AND status=%s
                """,
                (scheduled_at, int(duration_minutes), int(interview_id), InterviewStatus.SCHEDULED.value),
            )
            return cur.rowcount > 0
