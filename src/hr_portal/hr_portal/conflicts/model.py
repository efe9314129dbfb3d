from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from ..core import constants
from ..core.enums import ConflictSeverity, ConflictType


@dataclass(frozen=True)
class Interval:
    """Half-open time range ``[start, end)``."""

    start: datetime
    end: datetime

    @classmethod
    def from_duration(cls, start: datetime, duration_minutes: int) -> "Interval":
        return cls(start=start, end=start + timedelta(minutes=int(duration_minutes)))

    @classmethod
    def from_dates(cls, start_date: date, end_date: date) -> "Interval":
        """Whole days, ``end_date`` inclusive."""
        return cls(
            start=datetime.combine(start_date, time.min),
            end=datetime.combine(end_date + timedelta(days=1), time.min),
        )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def gap_to(self, other: "Interval") -> timedelta:
        """Distance between two non-overlapping intervals (zero when adjacent)."""
        if self.end <= other.start:
            return other.start - self.end
        if other.end <= self.start:
            return self.start - other.end
        return timedelta(0)


@dataclass(frozen=True)
class Conflict:
    severity: ConflictSeverity
    type: ConflictType
    message: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    reference_id: Optional[int] = None
    participants: Tuple[str, ...] = ()

    @property
    def is_hard(self) -> bool:
        return self.severity == ConflictSeverity.HARD

    @property
    def key(self) -> Tuple[str, Optional[int], Optional[datetime], Optional[datetime]]:
        return (self.type.value, self.reference_id, self.start, self.end)

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "type": self.type.value,
            "message": self.message,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "referenceId": self.reference_id,
            "participants": list(self.participants),
        }


@dataclass(frozen=True)
class ConflictReport:
    conflicts: Tuple[Conflict, ...] = ()
    suggested_times: Tuple[datetime, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def hard_conflicts(self) -> Tuple[Conflict, ...]:
        return tuple(c for c in self.conflicts if c.is_hard)

    @property
    def soft_conflicts(self) -> Tuple[Conflict, ...]:
        return tuple(c for c in self.conflicts if not c.is_hard)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def has_hard_conflicts(self) -> bool:
        return bool(self.hard_conflicts)

    def to_dict(self) -> dict:
        return {
            "hasConflicts": self.has_conflicts,
            "hasHardConflicts": self.has_hard_conflicts,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "suggestedTimes": [t.isoformat() for t in self.suggested_times],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ConflictPolicy:
    """Tunable scheduling policy; loaded from settings by the container."""

    slot_step_minutes: int = constants.DEFAULT_SLOT_STEP_MINUTES
    search_horizon_days: int = constants.DEFAULT_SEARCH_HORIZON_DAYS
    max_suggestions: int = constants.DEFAULT_MAX_SUGGESTIONS
    buffer_minutes: int = constants.DEFAULT_BUFFER_MINUTES
    department_pto_threshold: int = constants.DEFAULT_DEPARTMENT_PTO_THRESHOLD
    default_day_start: time = time(9, 0)
    default_day_end: time = time(17, 0)
    default_work_days: Tuple[int, ...] = field(default=(0, 1, 2, 3, 4))

    @classmethod
    def from_settings(cls, settings) -> "ConflictPolicy":
        return cls(
            slot_step_minutes=int(getattr(settings, "INTERVIEW_SLOT_STEP_MINUTES", constants.DEFAULT_SLOT_STEP_MINUTES)),
            search_horizon_days=int(getattr(settings, "INTERVIEW_SEARCH_HORIZON_DAYS", constants.DEFAULT_SEARCH_HORIZON_DAYS)),
            max_suggestions=int(getattr(settings, "INTERVIEW_MAX_SUGGESTIONS", constants.DEFAULT_MAX_SUGGESTIONS)),
            buffer_minutes=int(getattr(settings, "INTERVIEW_BUFFER_MINUTES", constants.DEFAULT_BUFFER_MINUTES)),
            department_pto_threshold=int(
                getattr(settings, "PTO_DEPARTMENT_OVERLAP_THRESHOLD", constants.DEFAULT_DEPARTMENT_PTO_THRESHOLD)
            ),
        )
