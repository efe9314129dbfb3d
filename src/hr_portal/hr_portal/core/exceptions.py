from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..conflicts.model import ConflictReport


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 500


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when there is no valid session, credentials or token."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class SchedulingConflictError(DomainError):
    """A booking collides with existing commitments (hard conflicts)."""

    status_code = 409

    def __init__(self, message: str, report: "ConflictReport"):
        super().__init__(message)
        self.report = report
