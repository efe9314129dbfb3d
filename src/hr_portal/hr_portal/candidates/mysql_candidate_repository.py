from __future__ import annotations

from typing import Optional

from ..core.enums import CandidateStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Candidate
from .repository import CandidateRepository


class MySQLCandidateRepository(CandidateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, candidate_id: int) -> Optional[Candidate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT candidate_id, full_name, email, position, status
                FROM candidates
                WHERE candidate_id=%s
                """,
                (int(candidate_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Candidate(
                candidate_id=int(row["candidate_id"]),
                full_name=row["full_name"],
                email=row.get("email"),
                position=row.get("position"),
                status=CandidateStatus(row["status"]),
            )

    def update_status(self, candidate_id: int, status: CandidateStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE candidates SET status=%s, updated_at=NOW() WHERE candidate_id=%s",
                (status.value, int(candidate_id)),
            )
            return cur.rowcount > 0
