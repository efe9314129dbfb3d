from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PtoPolicy
from .repository import PtoPolicyRepository

_SELECT = """
    SELECT employee_id, base_days, additional_days, used_days, notes, customized_by, customized_at
    FROM pto_policies
"""


def _row_to_policy(r: dict) -> PtoPolicy:
    return PtoPolicy(
        employee_id=int(r["employee_id"]),
        base_days=float(r["base_days"]),
        additional_days=float(r["additional_days"] or 0),
        used_days=float(r["used_days"] or 0),
        notes=r.get("notes"),
        customized_by=r.get("customized_by"),
        customized_at=r.get("customized_at"),
    )


class MySQLPtoPolicyRepository(PtoPolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int) -> Optional[PtoPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _row_to_policy(r) if r else None

    def list_all(self) -> Sequence[PtoPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY employee_id")
            return [_row_to_policy(r) for r in fetchall(cur)]

    def create(self, *, employee_id: int, base_days: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE: two first reads racing must not fail.
            cur.execute(
                """
                INSERT IGNORE INTO pto_policies(employee_id, base_days, additional_days, used_days)
                VALUES(%s,%s,0,0)
                """,
                (int(employee_id), base_days),
            )

    def update_custom(
        self,
        *,
        employee_id: int,
        additional_days: float,
        notes: Optional[str],
        customized_by: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pto_policies
                SET additional_days=%s, notes=%s, customized_by=%s, customized_at=NOW()
                WHERE employee_id=%s
                """,
                (additional_days, notes, int(customized_by), int(employee_id)),
            )
            return cur.rowcount > 0

    def department_base_days(self, dept_id: Optional[int]) -> Optional[float]:
        if dept_id is None:
            return None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT pto_base_days FROM departments WHERE dept_id=%s", (int(dept_id),))
            r = fetchone(cur)
            if not r or r.get("pto_base_days") is None:
                return None
            return float(r["pto_base_days"])
