from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional, Sequence

from ..candidates.repository import CandidateRepository
from ..common.validators import optional_str, require_enum, require_int
from ..conflicts.detector import ConflictDetector
from ..conflicts.model import ConflictReport
from ..core import constants
from ..core.enums import CandidateStatus, InterviewStatus, InterviewType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, SchedulingConflictError, ValidationError
from ..users.repository import UserRepository
from .model import Interview, InterviewAvailability
from .repository import AvailabilityRepository, InterviewRepository

logger = logging.getLogger(__name__)


def _require_manager(current_role: Role) -> None:
    if not current_role.is_manager:
        raise AuthorizationError("Only managers can manage interviews")


def validate_duration(value) -> int:
    return require_int(
        value,
        "Duration (minutes)",
        min_value=constants.MIN_INTERVIEW_MINUTES,
        max_value=constants.MAX_INTERVIEW_MINUTES,
    )


@dataclass(frozen=True)
class ScheduleResult:
    interview: Interview
    report: ConflictReport
    forced: bool = False

    def to_dict(self) -> dict:
        return {
            "interview": self.interview.to_dict(),
            "forced": self.forced,
            "conflicts": [c.to_dict() for c in self.report.conflicts],
            "warnings": list(self.report.warnings),
        }


class InterviewService:
    """Use cases around the interview pipeline.

    Every booking is re-checked against the interviewer's and candidate's
    commitments. Hard conflicts block it unless ``force_schedule`` is set.
    """

    def __init__(
        self,
        interviews: InterviewRepository,
        candidates: CandidateRepository,
        users: UserRepository,
        detector: ConflictDetector,
    ):
        self._interviews = interviews
        self._candidates = candidates
        self._users = users
        self._detector = detector

    def check_conflicts(
        self,
        *,
        current_role: Role,
        interviewer_id: int,
        proposed_start: datetime,
        duration_minutes,
        candidate_id: Optional[int] = None,
    ) -> ConflictReport:
        _require_manager(current_role)
        duration = validate_duration(duration_minutes)
        return self._detector.check_interview(
            interviewer_id=require_int(interviewer_id, "Interviewer"),
            start=proposed_start,
            duration_minutes=duration,
            candidate_id=require_int(candidate_id, "Candidate") if candidate_id not in (None, "") else None,
        )

    def schedule(
        self,
        *,
        current_role: Role,
        created_by: Optional[int],
        candidate_id,
        scheduled_at: datetime,
        duration_minutes,
        interview_type,
        interviewer_id=None,
        custom_interviewer_name: Optional[str] = None,
        location: Optional[str] = None,
        meeting_link: Optional[str] = None,
        notes: Optional[str] = None,
        force_schedule: bool = False,
    ) -> ScheduleResult:
        _require_manager(current_role)

        candidate_id = require_int(candidate_id, "Candidate")
        candidate = self._candidates.get_by_id(candidate_id)
        if not candidate:
            raise NotFoundError("Candidate not found")

        duration = validate_duration(duration_minutes)
        if not isinstance(interview_type, InterviewType):
            interview_type = require_enum(InterviewType, interview_type, "Interview type")

        custom_name = optional_str(custom_interviewer_name)
        if interviewer_id in (None, ""):
            interviewer_id = None
            if not custom_name:
                raise ValidationError("Either an interviewer or a custom interviewer name is required")
        else:
            interviewer_id = require_int(interviewer_id, "Interviewer")
            interviewer = self._users.get_by_id(interviewer_id)
            if not interviewer or not interviewer.is_active:
                raise NotFoundError("Interviewer not found")
            custom_name = None

        report = self._detector.check_interview(
            interviewer_id=interviewer_id,
            start=scheduled_at,
            duration_minutes=duration,
            candidate_id=candidate_id,
        )
        self._guard(report, force_schedule=force_schedule, what=f"candidate {candidate_id}")

        interview_id = self._interviews.create(
            candidate_id=candidate_id,
            interviewer_id=interviewer_id,
            custom_interviewer_name=custom_name,
            scheduled_at=scheduled_at,
            duration_minutes=duration,
            interview_type=interview_type,
            location=optional_str(location),
            meeting_link=optional_str(meeting_link),
            notes=optional_str(notes),
            created_by=created_by,
        )
        if candidate.status != CandidateStatus.INTERVIEW:
            self._candidates.update_status(candidate_id, CandidateStatus.INTERVIEW)

        interview = self._interviews.get_by_id(interview_id)
        if not interview:
            raise NotFoundError("Interview not found after creation")
        return ScheduleResult(interview=interview, report=report, forced=report.has_hard_conflicts)

    def reschedule(
        self,
        *,
        current_role: Role,
        interview_id: int,
        new_start: datetime,
        duration_minutes=None,
        force_schedule: bool = False,
    ) -> ScheduleResult:
        _require_manager(current_role)
        interview = self.get(interview_id)
        if interview.status != InterviewStatus.SCHEDULED:
            raise ValidationError(f"Only scheduled interviews can be rescheduled (current: {interview.status.value})")

        duration = interview.duration_minutes if duration_minutes in (None, "") else validate_duration(duration_minutes)
        report = self._detector.check_interview(
            interviewer_id=interview.interviewer_id,
            start=new_start,
            duration_minutes=duration,
            candidate_id=interview.candidate_id,
            exclude_interview_id=interview.interview_id,
        )
        self._guard(report, force_schedule=force_schedule, what=f"interview {interview.interview_id}")

        if not self._interviews.update_time(
            interview_id=interview.interview_id,
            scheduled_at=new_start,
            duration_minutes=duration,
        ):
            raise ValidationError("Interview could not be rescheduled")
        return ScheduleResult(interview=self.get(interview.interview_id), report=report, forced=report.has_hard_conflicts)

    def update_status(
        self,
        *,
        current_role: Role,
        interview_id: int,
        status,
        notes: Optional[str] = None,
    ) -> Interview:
        _require_manager(current_role)
        new_status = status if isinstance(status, InterviewStatus) else require_enum(InterviewStatus, status, "Status")
        if new_status == InterviewStatus.SCHEDULED:
            raise ValidationError("An interview cannot be moved back to SCHEDULED")

        interview = self.get(interview_id)
        if interview.status != InterviewStatus.SCHEDULED:
            raise ValidationError(f"Interview is already {interview.status.value}")

        if not self._interviews.update_status(
            interview_id=interview.interview_id,
            status=new_status,
            notes=optional_str(notes),
        ):
            raise ValidationError(f"Interview is already {interview.status.value}")

        if new_status == InterviewStatus.NO_SHOW:
            self._candidates.update_status(interview.candidate_id, CandidateStatus.DEAD_BY_CANDIDATE)
            logger.info("candidate %s marked %s after no-show", interview.candidate_id, CandidateStatus.DEAD_BY_CANDIDATE.value)

        return self.get(interview.interview_id)

    def get(self, interview_id: int) -> Interview:
        interview = self._interviews.get_by_id(int(interview_id))
        if not interview:
            raise NotFoundError("Interview not found")
        return interview

    def list_all(self, *, status: Optional[str] = None, limit: int = constants.DEFAULT_LIST_LIMIT) -> Sequence[Interview]:
        status_enum = require_enum(InterviewStatus, status, "Status") if status else None
        return self._interviews.list_all(status=status_enum, limit=limit)

    def list_by_candidate(self, candidate_id: int) -> Sequence[Interview]:
        return self._interviews.list_by_candidate(int(candidate_id))

    def list_by_interviewer(self, interviewer_id: int, *, limit: int = constants.DEFAULT_LIST_LIMIT) -> Sequence[Interview]:
        return self._interviews.list_all(interviewer_id=int(interviewer_id), limit=limit)

    @staticmethod
    def _guard(report: ConflictReport, *, force_schedule: bool, what: str) -> None:
        if report.has_hard_conflicts and not force_schedule:
            raise SchedulingConflictError("Scheduling conflict detected", report)
        if report.has_hard_conflicts:
            logger.warning("forced schedule for %s over %d hard conflict(s)", what, len(report.hard_conflicts))
        elif report.soft_conflicts:
            logger.info("scheduling %s with %d soft conflict(s)", what, len(report.soft_conflicts))


class AvailabilityService:
    """Weekly interviewer availability windows (day 0=Monday)."""

    def __init__(self, availability: AvailabilityRepository, users: UserRepository):
        self._availability = availability
        self._users = users

    def list_for_interviewer(self, interviewer_id: int) -> Sequence[InterviewAvailability]:
        return self._availability.list_for_interviewer(int(interviewer_id))

    @staticmethod
    def _validate_window(day_of_week, start_time: time, end_time: time) -> int:
        day = require_int(day_of_week, "Day of week", min_value=0, max_value=6)
        if start_time >= end_time:
            raise ValidationError("Start time must be before end time")
        return day

    def create_slot(
        self,
        *,
        current_role: Role,
        interviewer_id,
        day_of_week,
        start_time: time,
        end_time: time,
        is_active: bool = True,
    ) -> InterviewAvailability:
        _require_manager(current_role)
        interviewer_id = require_int(interviewer_id, "Interviewer")
        if not self._users.get_by_id(interviewer_id):
            raise NotFoundError("Interviewer not found")
        day = self._validate_window(day_of_week, start_time, end_time)

        slot_id = self._availability.create(
            interviewer_id=interviewer_id,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            is_active=bool(is_active),
        )
        return self._get(slot_id)

    def update_slot(
        self,
        *,
        current_role: Role,
        slot_id: int,
        day_of_week=None,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        is_active: Optional[bool] = None,
    ) -> InterviewAvailability:
        _require_manager(current_role)
        slot = self._get(slot_id)

        day = slot.day_of_week if day_of_week is None else day_of_week
        start = start_time or slot.start_time
        end = end_time or slot.end_time
        day = self._validate_window(day, start, end)

        self._availability.update(
            slot_id=slot.slot_id,
            day_of_week=day,
            start_time=start,
            end_time=end,
            is_active=slot.is_active if is_active is None else bool(is_active),
        )
        return self._get(slot.slot_id)

    def delete_slot(self, *, current_role: Role, slot_id: int) -> None:
        _require_manager(current_role)
        if not self._availability.delete(int(slot_id)):
            raise NotFoundError("Availability slot not found")

    def _get(self, slot_id: int) -> InterviewAvailability:
        slot = self._availability.get_by_id(int(slot_id))
        if not slot:
            raise NotFoundError("Availability slot not found")
        return slot
