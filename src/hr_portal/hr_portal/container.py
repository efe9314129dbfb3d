from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .candidates.mysql_candidate_repository import MySQLCandidateRepository
from .candidates.repository import CandidateRepository
from .conflicts.detector import ConflictDetector
from .conflicts.model import ConflictPolicy
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .interviews.mysql_availability_repository import MySQLAvailabilityRepository
from .interviews.mysql_interview_repository import MySQLInterviewRepository
from .interviews.repository import AvailabilityRepository, InterviewRepository
from .interviews.service import AvailabilityService, InterviewService
from .pto.mysql_pto_policy_repository import MySQLPtoPolicyRepository
from .pto.mysql_pto_request_repository import MySQLPtoRequestRepository
from .pto.repository import PtoPolicyRepository, PtoRequestRepository
from .pto.service import PtoPolicyService, PtoService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    candidates_repo: CandidateRepository
    interviews_repo: InterviewRepository
    availability_repo: AvailabilityRepository
    pto_requests_repo: PtoRequestRepository
    pto_policies_repo: PtoPolicyRepository
    attendance_repo: AttendanceRepository

    detector: ConflictDetector
    auth_service: AuthService
    interview_service: InterviewService
    availability_service: AvailabilityService
    pto_policy_service: PtoPolicyService
    pto_service: PtoService
    attendance_service: AttendanceService

    public_base_url: str = ""


def wire(
    *,
    users_repo: UserRepository,
    candidates_repo: CandidateRepository,
    interviews_repo: InterviewRepository,
    availability_repo: AvailabilityRepository,
    pto_requests_repo: PtoRequestRepository,
    pto_policies_repo: PtoPolicyRepository,
    attendance_repo: AttendanceRepository,
    settings=None,
    conn: Optional[DatabaseConnection] = None,
    detector: Optional[ConflictDetector] = None,
) -> Container:
    """Build services on top of any set of repositories (MySQL or in-memory)."""

    policy = ConflictPolicy.from_settings(settings)
    detector = detector or ConflictDetector(interviews_repo, availability_repo, pto_requests_repo, policy=policy)
    public_base_url = str(getattr(settings, "PUBLIC_BASE_URL", "") or "")

    pto_policy_service = PtoPolicyService(
        pto_policies_repo,
        users_repo,
        default_base_days=float(getattr(settings, "PTO_DEFAULT_BASE_DAYS", constants.DEFAULT_PTO_BASE_DAYS)),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        candidates_repo=candidates_repo,
        interviews_repo=interviews_repo,
        availability_repo=availability_repo,
        pto_requests_repo=pto_requests_repo,
        pto_policies_repo=pto_policies_repo,
        attendance_repo=attendance_repo,
        detector=detector,
        auth_service=AuthService(users_repo),
        interview_service=InterviewService(interviews_repo, candidates_repo, users_repo, detector),
        availability_service=AvailabilityService(availability_repo, users_repo),
        pto_policy_service=pto_policy_service,
        pto_service=PtoService(pto_requests_repo, pto_policy_service, users_repo, detector),
        attendance_service=AttendanceService(
            attendance_repo,
            public_base_url=public_base_url,
            session_hours=int(
                getattr(settings, "ATTENDANCE_SESSION_HOURS", constants.DEFAULT_ATTENDANCE_SESSION_HOURS)
            ),
        ),
        public_base_url=public_base_url,
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        candidates_repo=MySQLCandidateRepository(conn),
        interviews_repo=MySQLInterviewRepository(conn),
        availability_repo=MySQLAvailabilityRepository(conn),
        pto_requests_repo=MySQLPtoRequestRepository(conn),
        pto_policies_repo=MySQLPtoPolicyRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        settings=settings,
        conn=conn,
    )
