from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import PtoStatus, PtoType


@dataclass(frozen=True)
class PtoRequest:
    request_id: int
    employee_id: int
    start_date: date
    end_date: date
    days: float
    pto_type: PtoType
    reason: str
    status: PtoStatus
    created_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    half_day: bool = False
    department_overlap_warning: bool = False
    overlapping_employees: Tuple[str, ...] = ()
    employee_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "days": self.days,
            "halfDay": self.half_day,
            "type": self.pto_type.value,
            "reason": self.reason,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "reviewedBy": self.reviewed_by,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewNotes": self.review_notes,
            "departmentOverlapWarning": self.department_overlap_warning,
            "overlappingEmployees": list(self.overlapping_employees),
        }


@dataclass(frozen=True)
class PtoPolicy:
    """Per-employee PTO allocation. Remaining days are always derived."""

    employee_id: int
    base_days: float
    additional_days: float = 0
    used_days: float = 0
    notes: Optional[str] = None
    customized_by: Optional[int] = None
    customized_at: Optional[datetime] = None

    @property
    def total_days(self) -> float:
        return self.base_days + self.additional_days

    @property
    def remaining_days(self) -> float:
        return self.total_days - self.used_days

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "baseDays": self.base_days,
            "additionalDays": self.additional_days,
            "totalDays": self.total_days,
            "usedDays": self.used_days,
            "remainingDays": self.remaining_days,
            "notes": self.notes,
            "customizedBy": self.customized_by,
            "customizedAt": self.customized_at.isoformat() if self.customized_at else None,
        }


@dataclass(frozen=True)
class PtoOverlapRow:
    """Read-model: another employee's PTO that intersects a date range."""

    request_id: int
    employee_id: int
    employee_name: str
    start_date: date
    end_date: date
    status: PtoStatus
