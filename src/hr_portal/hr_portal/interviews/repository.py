from __future__ import annotations

from datetime import datetime, time
from typing import Optional, Protocol, Sequence

from ..core.enums import InterviewStatus, InterviewType
from .model import Interview, InterviewAvailability


class InterviewRepository(Protocol):
    def create(
        self,
        *,
        candidate_id: int,
        interviewer_id: Optional[int],
        custom_interviewer_name: Optional[str],
        scheduled_at: datetime,
        duration_minutes: int,
        interview_type: InterviewType,
        location: Optional[str],
        meeting_link: Optional[str],
        notes: Optional[str],
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, interview_id: int) -> Optional[Interview]:
        raise NotImplementedError

    def list_all(
        self,
        *,
        status: Optional[InterviewStatus] = None,
        interviewer_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Interview]:
        raise NotImplementedError

    def list_by_candidate(self, candidate_id: int) -> Sequence[Interview]:
        raise NotImplementedError

    def list_scheduled(
        self,
        *,
        start: datetime,
        end: datetime,
        interviewer_id: Optional[int] = None,
        candidate_id: Optional[int] = None,
    ) -> Sequence[Interview]:
        """SCHEDULED interviews intersecting ``[start, end)`` for one interviewer or candidate."""

        raise NotImplementedError

    def update_status(self, *, interview_id: int, status: InterviewStatus, notes: Optional[str] = None) -> bool:
        raise NotImplementedError

    def update_time(self, *, interview_id: int, scheduled_at: datetime, duration_minutes: int) -> bool:
        raise NotImplementedError


class AvailabilityRepository(Protocol):
    def list_for_interviewer(self, interviewer_id: int) -> Sequence[InterviewAvailability]:
        raise NotImplementedError

    def get_by_id(self, slot_id: int) -> Optional[InterviewAvailability]:
        raise NotImplementedError

    def create(self, *, interviewer_id: int, day_of_week: int, start_time: time, end_time: time, is_active: bool = True) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        slot_id: int,
        day_of_week: int,
        start_time: time,
        end_time: time,
        is_active: bool,
    ) -> bool:
        raise NotImplementedError

    def delete(self, slot_id: int) -> bool:
        raise NotImplementedError
