from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import SessionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """A QR check-in session. ``qr_token`` is the shared secret printed in the QR code."""

    session_id: int
    name: str
    location: str
    status: SessionStatus
    qr_token: str
    starts_at: datetime
    expires_at: datetime
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now

    def to_public_dict(self) -> dict:
        return {
            "id": self.session_id,
            "name": self.name,
            "location": self.location,
            "status": self.status.value,
            "startsAt": self.starts_at.isoformat(),
            "expiresAt": self.expires_at.isoformat(),
            "notes": self.notes,
        }

    def to_dict(self) -> dict:
        data = self.to_public_dict()
        data.update(
            {
                "qrToken": self.qr_token,
                "createdBy": self.created_by,
                "createdAt": self.created_at.isoformat() if self.created_at else None,
                "closedAt": self.closed_at.isoformat() if self.closed_at else None,
            }
        )
        return data


@dataclass(frozen=True)
class CheckIn:
    checkin_id: int
    session_id: int
    name: str
    location: str
    checked_in_at: datetime
    user_id: Optional[int] = None
    email: Optional[str] = None
    user_agent: Optional[str] = None
    ip_hash: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.checkin_id,
            "sessionId": self.session_id,
            "userId": self.user_id,
            "name": self.name,
            "email": self.email,
            "location": self.location,
            "checkedInAt": self.checked_in_at.isoformat(),
            "userAgent": self.user_agent,
        }
