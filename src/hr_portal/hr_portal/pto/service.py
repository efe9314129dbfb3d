from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import optional_str, require_enum, require_non_empty
from ..conflicts.detector import ConflictDetector
from ..conflicts.model import ConflictReport
from ..core import constants
from ..core.enums import ConflictType, PtoStatus, PtoType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, SchedulingConflictError, ValidationError
from ..users.repository import UserRepository
from .model import PtoPolicy, PtoRequest
from .repository import PtoPolicyRepository, PtoRequestRepository

logger = logging.getLogger(__name__)


def count_days(start_date: date, end_date: date, *, half_day: bool = False) -> float:
    """Inclusive calendar days; a half-day request counts 0.5."""

    if end_date < start_date:
        raise ValidationError("End date must be on or after start date")
    if half_day:
        if start_date != end_date:
            raise ValidationError("A half-day request must start and end on the same day")
        return 0.5
    return float((end_date - start_date).days + 1)


class PtoPolicyService:
    def __init__(
        self,
        policies: PtoPolicyRepository,
        users: UserRepository,
        *,
        default_base_days: float = constants.DEFAULT_PTO_BASE_DAYS,
    ):
        self._policies = policies
        self._users = users
        self._default_base_days = float(default_base_days)

    def get_policy(self, *, current_role: Role, current_user_id: int, employee_id: int) -> PtoPolicy:
        if not current_role.is_manager and int(employee_id) != int(current_user_id):
            raise AuthorizationError("You can only view your own PTO policy")
        return self.ensure_policy(int(employee_id))

    def ensure_policy(self, employee_id: int) -> PtoPolicy:
        """Return the policy, creating the default one on first access."""

        policy = self._policies.get(employee_id)
        if policy:
            return policy

        employee = self._users.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        base = self._policies.department_base_days(employee.dept_id)
        self._policies.create(employee_id=employee_id, base_days=base if base is not None else self._default_base_days)
        logger.info("created default PTO policy for employee %s", employee_id)

        policy = self._policies.get(employee_id)
        if not policy:
            raise NotFoundError("PTO policy not found")
        return policy

    def set_policy(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        employee_id: int,
        additional_days,
        notes: Optional[str] = None,
    ) -> PtoPolicy:
        if not current_role.is_manager:
            raise AuthorizationError("Only managers can customize PTO policies")
        try:
            extra = float(additional_days)
        except (TypeError, ValueError):
            raise ValidationError("Additional days must be a number")

        policy = self.ensure_policy(int(employee_id))
        if policy.base_days + extra < 0:
            raise ValidationError("Total PTO days cannot be negative")

        self._policies.update_custom(
            employee_id=policy.employee_id,
            additional_days=extra,
            notes=optional_str(notes),
            customized_by=int(current_user_id),
        )
        return self.ensure_policy(policy.employee_id)

    def list_policies(self, *, current_role: Role) -> Sequence[PtoPolicy]:
        if not current_role.is_manager:
            raise AuthorizationError("Only managers can list PTO policies")
        return self._policies.list_all()


class PtoService:
    """PTO requests: submission with overlap checks, and one-time manager decisions."""

    def __init__(
        self,
        requests: PtoRequestRepository,
        policies: PtoPolicyService,
        users: UserRepository,
        detector: ConflictDetector,
    ):
        self._requests = requests
        self._policies = policies
        self._users = users
        self._detector = detector

    def check_overlap(self, *, employee_id: int, start_date: date, end_date: date) -> ConflictReport:
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        employee = self._users.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return self._detector.check_pto(
            employee_id=employee.user_id,
            dept_id=employee.dept_id,
            start_date=start_date,
            end_date=end_date,
        )

    def create_request(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        pto_type,
        reason: str,
        half_day: bool = False,
    ) -> tuple[PtoRequest, ConflictReport]:
        pto_type = pto_type if isinstance(pto_type, PtoType) else require_enum(PtoType, pto_type, "PTO type")
        reason = require_non_empty(reason, "Reason")
        days = count_days(start_date, end_date, half_day=half_day)

        policy = self._policies.ensure_policy(int(employee_id))
        if days > policy.remaining_days:
            raise ValidationError(
                f"Insufficient PTO balance: requested {days:g} day(s), {policy.remaining_days:g} remaining"
            )

        report = self.check_overlap(employee_id=employee_id, start_date=start_date, end_date=end_date)
        if report.has_hard_conflicts:
            raise SchedulingConflictError("PTO request overlaps an existing request", report)

        overlapping: tuple[str, ...] = ()
        for c in report.soft_conflicts:
            if c.type == ConflictType.DEPARTMENT_PTO:
                overlapping = c.participants
        if overlapping:
            logger.warning("department PTO overlap for employee %s: %s", employee_id, ", ".join(overlapping))

        request_id = self._requests.create(
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            days=days,
            pto_type=pto_type,
            reason=reason,
            half_day=bool(half_day),
            department_overlap_warning=bool(overlapping),
            overlapping_employees=overlapping,
        )
        return self.get(request_id), report

    def get(self, request_id: int) -> PtoRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("PTO request not found")
        return req

    def list_my_requests(self, employee_id: int) -> Sequence[PtoRequest]:
        return self._requests.list_requests(employee_id=int(employee_id))

    def list_pending(self, *, current_role: Role) -> Sequence[PtoRequest]:
        if not current_role.is_manager:
            raise AuthorizationError("Only managers can review PTO requests")
        return self._requests.list_requests(status=PtoStatus.PENDING)

    def approve(self, *, current_role: Role, reviewer_id: int, request_id: int, notes: Optional[str] = None) -> PtoRequest:
        req = self._reviewable(current_role=current_role, request_id=request_id)

        policy = self._policies.ensure_policy(req.employee_id)
        if req.days > policy.remaining_days:
            raise ValidationError(
                f"Insufficient PTO days available: request needs {req.days:g}, {policy.remaining_days:g} remaining"
            )

        # status change and balance charge commit together
        approved = self._requests.approve(
            request_id=req.request_id,
            employee_id=req.employee_id,
            days=req.days,
            reviewed_by=int(reviewer_id),
            review_notes=optional_str(notes),
        )
        if not approved:
            raise ValidationError("PTO request has already been decided")

        logger.info("PTO request %s approved by %s (%g day(s))", req.request_id, reviewer_id, req.days)
        return self.get(req.request_id)

    def deny(self, *, current_role: Role, reviewer_id: int, request_id: int, notes: Optional[str] = None) -> PtoRequest:
        req = self._reviewable(current_role=current_role, request_id=request_id)

        denied = self._requests.decide(
            request_id=req.request_id,
            status=PtoStatus.DENIED,
            reviewed_by=int(reviewer_id),
            review_notes=optional_str(notes),
        )
        if not denied:
            raise ValidationError("PTO request has already been decided")
        return self.get(req.request_id)

    def _reviewable(self, *, current_role: Role, request_id: int) -> PtoRequest:
        if not current_role.is_manager:
            raise AuthorizationError("Only managers can review PTO requests")

        req = self.get(request_id)
        if req.status != PtoStatus.PENDING:
            raise ValidationError(f"PTO request has already been {req.status.value.lower()}")
        return req
