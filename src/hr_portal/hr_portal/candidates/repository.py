from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import CandidateStatus
from .model import Candidate


class CandidateRepository(Protocol):
    def get_by_id(self, candidate_id: int) -> Optional[Candidate]:
        raise NotImplementedError

    def update_status(self, candidate_id: int, status: CandidateStatus) -> bool:
        raise NotImplementedError
