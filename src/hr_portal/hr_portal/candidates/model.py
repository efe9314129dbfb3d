from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import CandidateStatus


@dataclass(frozen=True)
class Candidate:
    candidate_id: int
    full_name: str
    email: Optional[str]
    position: Optional[str]
    status: CandidateStatus
