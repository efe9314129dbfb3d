from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from ..core.enums import InterviewStatus, InterviewType

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class Interview:
    """Domain entity: a scheduled interview. Never hard-deleted."""

    interview_id: int
    candidate_id: int
    interviewer_id: Optional[int]
    scheduled_at: datetime
    duration_minutes: int
    interview_type: InterviewType
    status: InterviewStatus
    custom_interviewer_name: Optional[str] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Joined display fields (read-model only)
    candidate_name: Optional[str] = None
    interviewer_name: Optional[str] = None

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=int(self.duration_minutes))

    @property
    def display_interviewer(self) -> str:
        return self.interviewer_name or self.custom_interviewer_name or "Interviewer"

    def to_dict(self) -> dict:
        return {
            "id": self.interview_id,
            "candidateId": self.candidate_id,
            "candidateName": self.candidate_name,
            "interviewerId": self.interviewer_id,
            "interviewerName": self.interviewer_name,
            "customInterviewerName": self.custom_interviewer_name,
            "scheduledDate": self.scheduled_at.isoformat(),
            "endsAt": self.ends_at.isoformat(),
            "durationMinutes": self.duration_minutes,
            "type": self.interview_type.value,
            "status": self.status.value,
            "location": self.location,
            "meetingLink": self.meeting_link,
            "notes": self.notes,
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class InterviewAvailability:
    """Weekly availability window of an interviewer (day_of_week: 0=Monday)."""

    slot_id: int
    interviewer_id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_active: bool = True

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    def to_dict(self) -> dict:
        return {
            "id": self.slot_id,
            "interviewerId": self.interviewer_id,
            "dayOfWeek": self.day_of_week,
            "dayName": self.day_name,
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "isActive": self.is_active,
        }
