from __future__ import annotations

import json
from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import PtoStatus, PtoType
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, where_clause
from .model import PtoOverlapRow, PtoRequest
from .repository import PtoRequestRepository

_SELECT = """
    SELECT r.request_id, r.employee_id, r.start_date, r.end_date, r.days, r.pto_type,
           r.reason, r.status, r.half_day, r.department_overlap_warning, r.overlapping_employees,
           r.created_at, r.reviewed_by, r.reviewed_at, r.review_notes,
           u.full_name AS employee_name
    FROM pto_requests r
    JOIN users u ON u.user_id = r.employee_id
"""


def _row_to_request(r: dict) -> PtoRequest:
    overlapping = r.get("overlapping_employees")
    return PtoRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        start_date=normalize_mysql_date(r["start_date"]),
        end_date=normalize_mysql_date(r["end_date"]),
        days=float(r["days"]),
        pto_type=PtoType(r["pto_type"]),
        reason=r["reason"],
        status=PtoStatus(r["status"]),
        created_at=r.get("created_at"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        review_notes=r.get("review_notes"),
        half_day=bool(r.get("half_day")),
        department_overlap_warning=bool(r.get("department_overlap_warning")),
        overlapping_employees=tuple(json.loads(overlapping)) if overlapping else (),
        employee_name=r.get("employee_name"),
    )


def _status_list(statuses: Iterable[PtoStatus]) -> tuple[str, list[str]]:
    values = [s.value for s in statuses]
    return ",".join(["%s"] * len(values)), values


class MySQLPtoRequestRepository(PtoRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        days: float,
        pto_type: PtoType,
        reason: str,
        half_day: bool,
        department_overlap_warning: bool,
        overlapping_employees: Sequence[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pto_requests(
                    employee_id, start_date, end_date, days, pto_type, reason, status,
                    half_day, department_overlap_warning, overlapping_employees
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    start_date,
                    end_date,
                    days,
                    pto_type.value,
                    reason,
                    PtoStatus.PENDING.value,
                    1 if half_day else 0,
                    1 if department_overlap_warning else 0,
                    json.dumps(list(overlapping_employees)) if overlapping_employees else None,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[PtoRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PtoStatus] = None,
        limit: int = 200,
    ) -> Sequence[PtoRequest]:
        where, params = where_clause({"r.employee_id=%s": employee_id, "r.status=%s": status})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY r.created_at DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_for_employee_in_range(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[PtoStatus],
    ) -> Sequence[PtoRequest]:
        marks, values = _status_list(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + f"""
                WHERE r.employee_id=%s AND r.status IN ({marks})
                  AND r.start_date <= %s AND r.end_date >= %s
                ORDER BY r.start_date
                """,
                tuple([int(employee_id)] + values + [end_date, start_date]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_department_overlaps(
        self,
        *,
        dept_id: int,
        start_date: date,
        end_date: date,
        exclude_employee_id: int,
        statuses: Iterable[PtoStatus],
    ) -> Sequence[PtoOverlapRow]:
        marks, values = _status_list(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT r.request_id, r.employee_id, u.full_name, r.start_date, r.end_date, r.status
                FROM pto_requests r
                JOIN users u ON u.user_id = r.employee_id
                WHERE u.dept_id=%s AND r.employee_id<>%s AND r.status IN ({marks})
                  AND r.start_date <= %s AND r.end_date >= %s
                ORDER BY r.start_date
                """,
                tuple([int(dept_id), int(exclude_employee_id)] + values + [end_date, start_date]),
            )
            return [
                PtoOverlapRow(
                    request_id=int(r["request_id"]),
                    employee_id=int(r["employee_id"]),
                    employee_name=r["full_name"],
                    start_date=normalize_mysql_date(r["start_date"]),
                    end_date=normalize_mysql_date(r["end_date"]),
                    status=PtoStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def decide(
        self,
        *,
        request_id: int,
        status: PtoStatus,
        reviewed_by: int,
        review_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pto_requests
                SET status=%s, reviewed_by=%s, reviewed_at=NOW(), review_notes=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(reviewed_by), review_notes, int(request_id), PtoStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def approve(
        self,
        *,
        request_id: int,
        employee_id: int,
        days: float,
        reviewed_by: int,
        review_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pto_requests
                SET status=%s, reviewed_by=%s, reviewed_at=NOW(), review_notes=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    PtoStatus.APPROVED.value,
                    int(reviewed_by),
                    review_notes,
                    int(request_id),
                    PtoStatus.PENDING.value,
                ),
            )
            if cur.rowcount == 0:
                return False

            cur.execute(
                """
                UPDATE pto_policies
                SET used_days = used_days + %s
                WHERE employee_id=%s AND used_days + %s <= base_days + additional_days
                """,
                (days, int(employee_id), days),
            )
            if cur.rowcount == 0:
                # raising inside db_cursor rolls the status change back
                raise ValidationError("Insufficient PTO days available")
            return True
