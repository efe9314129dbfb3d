from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceSession, CheckIn


class AttendanceRepository(Protocol):
    # Sessions
    def create_session(
        self,
        *,
        name: str,
        location: str,
        qr_token: str,
        starts_at: datetime,
        expires_at: datetime,
        notes: Optional[str],
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_sessions(self, *, active_only: bool = False, limit: int = 200) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def update_token(self, *, session_id: int, qr_token: str) -> bool:
        raise NotImplementedError

    def close_session(self, session_id: int) -> bool:
        raise NotImplementedError

    # Check-ins
    def has_checked_in(self, *, session_id: int, user_id: Optional[int], name: str) -> bool:
        """Members are unique per (session, user); guests per (session, name)."""

        raise NotImplementedError

    def create_checkin(
        self,
        *,
        session_id: int,
        user_id: Optional[int],
        name: str,
        email: Optional[str],
        location: str,
        user_agent: Optional[str],
        ip_hash: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_checkins(self, session_id: int) -> Sequence[CheckIn]:
        raise NotImplementedError
