from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import ConflictSeverity, ConflictType, PtoStatus
from ..interviews.model import Interview
from ..interviews.repository import AvailabilityRepository, InterviewRepository
from ..pto.model import PtoRequest
from ..pto.repository import PtoRequestRepository
from .model import Conflict, ConflictPolicy, ConflictReport, Interval
from .overlap import TimeWindow, fits_windows, iter_slots, overlaps

logger = logging.getLogger(__name__)

_FMT = "%Y-%m-%d %H:%M"

AVAILABILITY_UNVERIFIED = "Unable to verify interviewer availability, please check manually"
INTERVIEWS_UNVERIFIED = "Unable to verify existing interviews, please check manually"
PTO_UNVERIFIED = "Unable to verify time off, please check manually"
DEPARTMENT_UNVERIFIED = "Unable to verify department time off, please check manually"
CUSTOM_INTERVIEWER = "Custom interviewer availability cannot be verified automatically"


@dataclass
class _Commitments:
    """Everything a slot is checked against, loaded once per request."""

    interviewer_interviews: List[Interview] = field(default_factory=list)
    candidate_interviews: List[Interview] = field(default_factory=list)
    interviewer_pto: List[PtoRequest] = field(default_factory=list)
    windows: Dict[int, List[TimeWindow]] = field(default_factory=dict)
    availability_known: bool = True
    warnings: List[str] = field(default_factory=list)


def business_hour_warnings(slot: Interval) -> List[str]:
    start_hour = slot.start.hour
    end_hour = slot.end.hour
    weekday = slot.start.weekday()
    out: List[str] = []
    if start_hour == 12 or (start_hour < 12 and end_hour > 12):
        out.append("Interview scheduled during typical lunch hours (12pm-1pm)")
    if start_hour < 9:
        out.append("Interview scheduled before typical business hours (before 9am)")
    if start_hour >= 17:
        out.append("Interview scheduled after typical business hours (after 5pm)")
    if weekday == 4 and start_hour >= 15:
        out.append("Interview scheduled on Friday afternoon")
    if weekday == 0 and start_hour < 10:
        out.append("Interview scheduled early Monday morning")
    return out


def _dedupe(conflicts: Iterable[Conflict]) -> List[Conflict]:
    seen = set()
    out: List[Conflict] = []
    for c in conflicts:
        if c.key in seen:
            continue
        seen.add(c.key)
        out.append(c)
    return out


class ConflictDetector:
    """Classifies a proposed interview or PTO range against existing commitments.

    Lookups go through the repositories. A failing lookup is logged and
    reported as a warning, it never blocks the caller.
    """

    def __init__(
        self,
        interviews: InterviewRepository,
        availability: AvailabilityRepository,
        pto: PtoRequestRepository,
        *,
        policy: Optional[ConflictPolicy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._interviews = interviews
        self._availability = availability
        self._pto = pto
        self._policy = policy or ConflictPolicy()
        self._clock = clock

    @property
    def policy(self) -> ConflictPolicy:
        return self._policy

    # -------- Interviews --------
    def check_interview(
        self,
        *,
        interviewer_id: Optional[int],
        start: datetime,
        duration_minutes: int,
        candidate_id: Optional[int] = None,
        exclude_interview_id: Optional[int] = None,
    ) -> ConflictReport:
        proposed = Interval.from_duration(start, duration_minutes)
        horizon_end = start + timedelta(days=self._policy.search_horizon_days)
        buffer = timedelta(minutes=self._policy.buffer_minutes)
        lookup = Interval(start=start - buffer, end=horizon_end + proposed.duration + buffer)

        found = self._load_commitments(
            interviewer_id=interviewer_id,
            candidate_id=candidate_id,
            lookup=lookup,
            exclude_interview_id=exclude_interview_id,
        )

        conflicts = self._hard_conflicts(proposed, found)
        conflicts.extend(self._soft_conflicts(proposed, found))
        conflicts = _dedupe(conflicts)

        warnings = list(found.warnings)
        if interviewer_id is None:
            warnings.append(CUSTOM_INTERVIEWER)
        warnings.extend(business_hour_warnings(proposed))

        suggestions: List[datetime] = []
        if any(c.is_hard for c in conflicts):
            suggestions = self._suggest(proposed, found, until=horizon_end)

        return ConflictReport(
            conflicts=tuple(conflicts),
            suggested_times=tuple(suggestions),
            warnings=tuple(warnings),
        )

    def _load_commitments(
        self,
        *,
        interviewer_id: Optional[int],
        candidate_id: Optional[int],
        lookup: Interval,
        exclude_interview_id: Optional[int],
    ) -> _Commitments:
        found = _Commitments()

        def keep(rows: Sequence[Interview]) -> List[Interview]:
            return [r for r in rows if r.interview_id != exclude_interview_id]

        if interviewer_id is not None:
            try:
                found.interviewer_interviews = keep(
                    self._interviews.list_scheduled(start=lookup.start, end=lookup.end, interviewer_id=interviewer_id)
                )
            except Exception:
                logger.exception("interview lookup failed for interviewer %s", interviewer_id)
                found.warnings.append(INTERVIEWS_UNVERIFIED)

            try:
                found.interviewer_pto = list(
                    self._pto.list_for_employee_in_range(
                        employee_id=interviewer_id,
                        start_date=lookup.start.date(),
                        end_date=lookup.end.date(),
                        statuses=(PtoStatus.APPROVED,),
                    )
                )
            except Exception:
                logger.exception("PTO lookup failed for interviewer %s", interviewer_id)
                found.warnings.append(PTO_UNVERIFIED)

            try:
                for slot in self._availability.list_for_interviewer(interviewer_id):
                    if slot.is_active:
                        found.windows.setdefault(slot.day_of_week, []).append((slot.start_time, slot.end_time))
            except Exception:
                logger.exception("availability lookup failed for interviewer %s", interviewer_id)
                found.warnings.append(AVAILABILITY_UNVERIFIED)
                found.availability_known = False
                found.windows = {}

        if candidate_id is not None:
            try:
                found.candidate_interviews = keep(
                    self._interviews.list_scheduled(start=lookup.start, end=lookup.end, candidate_id=candidate_id)
                )
            except Exception:
                logger.exception("interview lookup failed for candidate %s", candidate_id)
                if INTERVIEWS_UNVERIFIED not in found.warnings:
                    found.warnings.append(INTERVIEWS_UNVERIFIED)

        return found

    def _hard_conflicts(self, slot: Interval, found: _Commitments) -> List[Conflict]:
        out: List[Conflict] = []
        for iv in found.interviewer_interviews:
            other = Interval(iv.scheduled_at, iv.ends_at)
            if overlaps(slot, other):
                who = iv.candidate_name or f"candidate #{iv.candidate_id}"
                out.append(
                    Conflict(
                        severity=ConflictSeverity.HARD,
                        type=ConflictType.INTERVIEW,
                        message=(
                            f"Interviewer already has an interview with {who} "
                            f"from {other.start.strftime(_FMT)} to {other.end.strftime(_FMT)}"
                        ),
                        start=other.start,
                        end=other.end,
                        reference_id=iv.interview_id,
                    )
                )
        for iv in found.candidate_interviews:
            other = Interval(iv.scheduled_at, iv.ends_at)
            if overlaps(slot, other):
                out.append(
                    Conflict(
                        severity=ConflictSeverity.HARD,
                        type=ConflictType.INTERVIEW,
                        message=(
                            f"Candidate already has an interview with {iv.display_interviewer} "
                            f"from {other.start.strftime(_FMT)} to {other.end.strftime(_FMT)}"
                        ),
                        start=other.start,
                        end=other.end,
                        reference_id=iv.interview_id,
                    )
                )
        for req in found.interviewer_pto:
            other = Interval.from_dates(req.start_date, req.end_date)
            if overlaps(slot, other):
                out.append(
                    Conflict(
                        severity=ConflictSeverity.HARD,
                        type=ConflictType.PTO,
                        message=(
                            f"Interviewer is on approved {req.pto_type.value.lower()} time off "
                            f"from {req.start_date.isoformat()} to {req.end_date.isoformat()}"
                        ),
                        start=other.start,
                        end=other.end,
                        reference_id=req.request_id,
                    )
                )
        return out

    def _soft_conflicts(self, slot: Interval, found: _Commitments) -> List[Conflict]:
        out: List[Conflict] = []
        buffer = timedelta(minutes=self._policy.buffer_minutes)
        if buffer > timedelta(0):
            for iv in found.interviewer_interviews:
                other = Interval(iv.scheduled_at, iv.ends_at)
                if overlaps(slot, other):
                    continue
                gap = slot.gap_to(other)
                if gap < buffer:
                    minutes = int(gap.total_seconds() // 60)
                    out.append(
                        Conflict(
                            severity=ConflictSeverity.SOFT,
                            type=ConflictType.PROXIMITY,
                            message=(
                                f"Only {minutes} minutes from another interview "
                                f"({other.start.strftime(_FMT)} - {other.end.strftime(_FMT)})"
                            ),
                            start=other.start,
                            end=other.end,
                            reference_id=iv.interview_id,
                        )
                    )

        if found.windows and not fits_windows(slot, found.windows):
            out.append(
                Conflict(
                    severity=ConflictSeverity.SOFT,
                    type=ConflictType.AVAILABILITY,
                    message="Proposed time is outside the interviewer's availability",
                    start=slot.start,
                    end=slot.end,
                )
            )
        return out

    def _default_windows(self) -> Dict[int, List[TimeWindow]]:
        window = (self._policy.default_day_start, self._policy.default_day_end)
        return {day: [window] for day in self._policy.default_work_days}

    def _suggest(self, proposed: Interval, found: _Commitments, *, until: datetime) -> List[datetime]:
        windows = found.windows or self._default_windows()
        duration_minutes = int(proposed.duration.total_seconds() // 60)
        begin = max(proposed.start, self._clock())

        out: List[datetime] = []
        for slot in iter_slots(
            begin,
            until,
            duration_minutes=duration_minutes,
            step_minutes=self._policy.slot_step_minutes,
        ):
            if not fits_windows(slot, windows):
                continue
            if self._hard_conflicts(slot, found):
                continue
            out.append(slot.start)
            if len(out) >= self._policy.max_suggestions:
                break
        return out

    # -------- PTO --------
    def check_pto(
        self,
        *,
        employee_id: int,
        dept_id: Optional[int],
        start_date: date,
        end_date: date,
        exclude_request_id: Optional[int] = None,
    ) -> ConflictReport:
        conflicts: List[Conflict] = []
        warnings: List[str] = []
        active = (PtoStatus.PENDING, PtoStatus.APPROVED)

        try:
            own = self._pto.list_for_employee_in_range(
                employee_id=employee_id,
                start_date=start_date,
                end_date=end_date,
                statuses=active,
            )
        except Exception:
            logger.exception("PTO lookup failed for employee %s", employee_id)
            warnings.append(PTO_UNVERIFIED)
            own = []

        requested = Interval.from_dates(start_date, end_date)
        for req in own:
            if req.request_id == exclude_request_id:
                continue
            other = Interval.from_dates(req.start_date, req.end_date)
            if overlaps(requested, other):
                conflicts.append(
                    Conflict(
                        severity=ConflictSeverity.HARD,
                        type=ConflictType.PTO,
                        message=(
                            f"You already have a {req.status.value.lower()} {req.pto_type.value.lower()} request "
                            f"from {req.start_date.isoformat()} to {req.end_date.isoformat()}"
                        ),
                        start=other.start,
                        end=other.end,
                        reference_id=req.request_id,
                    )
                )

        if dept_id is not None:
            try:
                rows = self._pto.list_department_overlaps(
                    dept_id=dept_id,
                    start_date=start_date,
                    end_date=end_date,
                    exclude_employee_id=employee_id,
                    statuses=active,
                )
            except Exception:
                logger.exception("department PTO lookup failed for department %s", dept_id)
                warnings.append(DEPARTMENT_UNVERIFIED)
                rows = []

            names: Dict[int, str] = {}
            for row in rows:
                if row.employee_id == employee_id:
                    continue
                if overlaps(requested, Interval.from_dates(row.start_date, row.end_date)):
                    names.setdefault(row.employee_id, row.employee_name)

            if names and len(names) >= self._policy.department_pto_threshold:
                people = tuple(sorted(names.values()))
                conflicts.append(
                    Conflict(
                        severity=ConflictSeverity.SOFT,
                        type=ConflictType.DEPARTMENT_PTO,
                        message=(
                            f"{len(people)} other employees in your department have time off "
                            f"during this period: {', '.join(people)}"
                        ),
                        start=requested.start,
                        end=requested.end,
                        participants=people,
                    )
                )

        return ConflictReport(conflicts=tuple(_dedupe(conflicts)), warnings=tuple(warnings))
