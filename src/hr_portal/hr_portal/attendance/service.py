from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence, Tuple
from urllib.parse import urlencode

from ..common.datetime_utils import now_local
from ..common.validators import optional_str, require_non_empty
from ..core import constants
from ..core.enums import Role, SessionStatus
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import AttendanceSession, CheckIn
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def new_token() -> str:
    return secrets.token_urlsafe(24)


def hash_ip(ip: Optional[str]) -> str:
    return hashlib.sha256((ip or "").encode("utf-8")).hexdigest()


class AttendanceService:
    """QR check-in sessions.

    Managers open a session and print its QR code. Anyone holding the
    current token can check in while the session is ACTIVE and unexpired.
    """

    def __init__(
        self,
        repo: AttendanceRepository,
        *,
        public_base_url: str = "",
        session_hours: int = constants.DEFAULT_ATTENDANCE_SESSION_HOURS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._repo = repo
        self._base_url = (public_base_url or "").rstrip("/")
        self._session_hours = int(session_hours)
        self._clock = clock

    @staticmethod
    def _require_manager(current_role: Role) -> None:
        if not current_role.is_manager:
            raise AuthorizationError("Only managers can manage attendance sessions")

    def check_in_url(self, session: AttendanceSession, *, base_url: Optional[str] = None) -> str:
        base = (base_url or self._base_url).rstrip("/")
        query = urlencode({"sid": session.session_id, "t": session.qr_token})
        return f"{base}/attendance/check-in?{query}"

    def create_session(
        self,
        *,
        current_role: Role,
        created_by: Optional[int],
        name: str,
        location: str,
        starts_at: Optional[datetime] = None,
        expires_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceSession:
        self._require_manager(current_role)
        name = require_non_empty(name, "Session name")
        location = require_non_empty(location, "Location")

        starts = starts_at or self._clock()
        expires = expires_at or starts + timedelta(hours=self._session_hours)
        if expires <= starts:
            raise ValidationError("Expiry must be after the start time")

        session_id = self._repo.create_session(
            name=name,
            location=location,
            qr_token=new_token(),
            starts_at=starts,
            expires_at=expires,
            notes=optional_str(notes),
            created_by=created_by,
        )
        logger.info("attendance session %s opened at %s until %s", session_id, location, expires.isoformat())
        return self._get(session_id)

    def list_sessions(self, *, current_role: Role, active_only: bool = False) -> Sequence[AttendanceSession]:
        self._require_manager(current_role)
        return self._repo.list_sessions(active_only=active_only)

    def get_session(self, *, current_role: Role, session_id: int) -> Tuple[AttendanceSession, Sequence[CheckIn]]:
        self._require_manager(current_role)
        session = self._get(session_id)
        return session, self._repo.list_checkins(session.session_id)

    def rotate_token(self, *, current_role: Role, session_id: int) -> AttendanceSession:
        self._require_manager(current_role)
        session = self._get(session_id)
        self._repo.update_token(session_id=session.session_id, qr_token=new_token())
        logger.info("attendance session %s token rotated", session.session_id)
        return self._get(session.session_id)

    def close_session(self, *, current_role: Role, session_id: int) -> AttendanceSession:
        self._require_manager(current_role)
        session = self._get(session_id)
        if session.status == SessionStatus.CLOSED:
            raise ValidationError("Session is already closed")
        self._repo.close_session(session.session_id)
        return self._get(session.session_id)

    def get_public_session(self, *, session_id: int, token: Optional[str]) -> AttendanceSession:
        if not token:
            raise AuthenticationError("Token required")
        session = self._get(session_id)
        self._verify_token(session, token)
        return session

    def check_in(
        self,
        *,
        session_id: int,
        token: Optional[str],
        name: str,
        email: Optional[str] = None,
        user_id: Optional[int] = None,
        user_agent: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> CheckIn:
        session = self._get(session_id)
        self._verify_token(session, token)

        if session.status != SessionStatus.ACTIVE:
            raise ValidationError("Session is closed")
        now = self._clock()
        if now < session.starts_at:
            raise ValidationError("Session has not started yet")
        if session.is_expired(now):
            raise ValidationError("Session has expired")

        name = require_non_empty(name, "Name")
        if self._repo.has_checked_in(session_id=session.session_id, user_id=user_id, name=name):
            raise ValidationError("Already checked in to this session")

        checkin_id = self._repo.create_checkin(
            session_id=session.session_id,
            user_id=user_id,
            name=name,
            email=optional_str(email),
            location=session.location,
            user_agent=optional_str(user_agent),
            ip_hash=hash_ip(ip),
        )
        for row in self._repo.list_checkins(session.session_id):
            if row.checkin_id == checkin_id:
                return row
        raise NotFoundError("Check-in not found after creation")

    def _get(self, session_id: int) -> AttendanceSession:
        session = self._repo.get_session(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return session

    @staticmethod
    def _verify_token(session: AttendanceSession, token: Optional[str]) -> None:
        if not token or not hmac.compare_digest(str(token), session.qr_token):
            raise AuthenticationError("Invalid session token")
