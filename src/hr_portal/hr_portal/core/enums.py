from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used by the route guards."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @property
    def is_manager(self) -> bool:
        return self in {Role.ADMIN, Role.MANAGER}


class InterviewType(str, Enum):
    PHONE = "PHONE"
    VIDEO = "VIDEO"
    IN_PERSON = "IN_PERSON"
    TECHNICAL = "TECHNICAL"
    PANEL = "PANEL"


class InterviewStatus(str, Enum):
    """Interview lifecycle. Only SCHEDULED interviews occupy the calendar."""

    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    RESCHEDULED = "RESCHEDULED"


class CandidateStatus(str, Enum):
    APPLIED = "APPLIED"
    SCREENING = "SCREENING"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    HIRED = "HIRED"
    REJECTED = "REJECTED"
    DEAD_BY_CANDIDATE = "DEAD_BY_CANDIDATE"


class PtoType(str, Enum):
    VACATION = "VACATION"
    SICK = "SICK"
    PERSONAL = "PERSONAL"


class PtoStatus(str, Enum):
    """PTO approval flow. A request is decided once, from PENDING."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class ConflictSeverity(str, Enum):
    HARD = "hard"
    SOFT = "soft"


class ConflictType(str, Enum):
    INTERVIEW = "INTERVIEW"
    PTO = "PTO"
    DEPARTMENT_PTO = "DEPARTMENT_PTO"
    AVAILABILITY = "AVAILABILITY"
    PROXIMITY = "PROXIMITY"


class SessionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
