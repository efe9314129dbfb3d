from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import PtoStatus, PtoType
from .model import PtoOverlapRow, PtoPolicy, PtoRequest


class PtoRequestRepository(Protocol):
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
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[PtoRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PtoStatus] = None,
        limit: int = 200,
    ) -> Sequence[PtoRequest]:
        raise NotImplementedError

    def list_for_employee_in_range(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[PtoStatus],
    ) -> Sequence[PtoRequest]:
        """Requests of one employee whose inclusive date range touches ``[start_date, end_date]``."""

        raise NotImplementedError

    def list_department_overlaps(
        self,
        *,
        dept_id: int,
        start_date: date,
        end_date: date,
        exclude_employee_id: int,
        statuses: Iterable[PtoStatus],
    ) -> Sequence[PtoOverlapRow]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: PtoStatus,
        reviewed_by: int,
        review_notes: Optional[str] = None,
    ) -> bool:
        """Move a PENDING request to ``status``. False when it was already decided."""

        raise NotImplementedError

    def approve(
        self,
        *,
        request_id: int,
        employee_id: int,
        days: float,
        reviewed_by: int,
        review_notes: Optional[str] = None,
    ) -> bool:
        """Approve a PENDING request and charge ``days`` to the employee's policy in one transaction.

        False when the request was already decided. Raises ``ValidationError`` and changes
        nothing when the charge would push used days past the total allowance.
        """

        raise NotImplementedError


class PtoPolicyRepository(Protocol):
    def get(self, employee_id: int) -> Optional[PtoPolicy]:
        raise NotImplementedError

    def list_all(self) -> Sequence[PtoPolicy]:
        raise NotImplementedError

    def create(self, *, employee_id: int, base_days: float) -> None:
        raise NotImplementedError

    def update_custom(
        self,
        *,
        employee_id: int,
        additional_days: float,
        notes: Optional[str],
        customized_by: int,
    ) -> bool:
        raise NotImplementedError

    def department_base_days(self, dept_id: Optional[int]) -> Optional[float]:
        """Department-level override of the default base days, if any."""

        raise NotImplementedError
