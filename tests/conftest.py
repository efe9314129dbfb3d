from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.hr_portal.hr_portal.attendance.model import AttendanceSession, CheckIn
from src.hr_portal.hr_portal.candidates.model import Candidate
from src.hr_portal.hr_portal.conflicts.detector import ConflictDetector
from src.hr_portal.hr_portal.conflicts.model import ConflictPolicy
from src.hr_portal.hr_portal.container import wire
from src.hr_portal.hr_portal.core.enums import (
    CandidateStatus,
    InterviewStatus,
    InterviewType,
    PtoStatus,
    PtoType,
    Role,
    SessionStatus,
)
from src.hr_portal.hr_portal.core.exceptions import ValidationError
from src.hr_portal.hr_portal.interviews.model import Interview, InterviewAvailability
from src.hr_portal.hr_portal.pto.model import PtoOverlapRow, PtoPolicy, PtoRequest
from src.hr_portal.hr_portal.users.model import User

PASSWORD = "secret123"
_PASSWORD_HASH = generate_password_hash(PASSWORD)

# Wednesday; every fixed-clock test schedules after this instant
NOW = datetime(2025, 9, 29, 8, 0)

ADMIN_ID, MANAGER_ID, RILEY_ID, SAM_ID, JAMIE_ID, TAYLOR_ID = 1, 2, 3, 4, 5, 6
HR_DEPT, OPS_DEPT = 1, 2
JORDAN_ID, CASEY_ID = 10, 11


class InMemoryUsers:
    def __init__(self):
        self.rows: dict[int, User] = {}

    def add(self, user_id, full_name, role, dept_id, *, username=None, is_active=True):
        self.rows[user_id] = User(
            user_id=user_id,
            full_name=full_name,
            username=username or full_name.split()[0].lower(),
            password_hash=_PASSWORD_HASH,
            role=role,
            dept_id=dept_id,
            is_active=is_active,
        )

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def get_by_username(self, username):
        for u in self.rows.values():
            if u.username == username:
                return u
        return None


class InMemoryCandidates:
    def __init__(self):
        self.rows: dict[int, Candidate] = {}

    def add(self, candidate_id, full_name, status=CandidateStatus.APPLIED):
        self.rows[candidate_id] = Candidate(
            candidate_id=candidate_id,
            full_name=full_name,
            email=None,
            position="Support Specialist",
            status=status,
        )

    def get_by_id(self, candidate_id):
        return self.rows.get(int(candidate_id))

    def update_status(self, candidate_id, status):
        c = self.rows.get(int(candidate_id))
        if not c:
            return False
        self.rows[c.candidate_id] = replace(c, status=status)
        return True


class InMemoryInterviews:
    def __init__(self, users: InMemoryUsers, candidates: InMemoryCandidates):
        self._users = users
        self._candidates = candidates
        self._next_id = 100
        self.rows: dict[int, Interview] = {}

    def _decorate(self, iv: Interview) -> Interview:
        cand = self._candidates.get_by_id(iv.candidate_id)
        user = self._users.get_by_id(iv.interviewer_id) if iv.interviewer_id else None
        return replace(
            iv,
            candidate_name=cand.full_name if cand else None,
            interviewer_name=user.full_name if user else None,
        )

    def add(self, *, interviewer_id, start, minutes=30, candidate_id=JORDAN_ID, status=InterviewStatus.SCHEDULED):
        iid = self.create(
            candidate_id=candidate_id,
            interviewer_id=interviewer_id,
            custom_interviewer_name=None,
            scheduled_at=start,
            duration_minutes=minutes,
            interview_type=InterviewType.VIDEO,
            location=None,
            meeting_link=None,
            notes=None,
            created_by=MANAGER_ID,
        )
        if status != InterviewStatus.SCHEDULED:
            self.rows[iid] = replace(self.rows[iid], status=status)
        return iid

    def create(
        self,
        *,
        candidate_id,
        interviewer_id,
        custom_interviewer_name,
        scheduled_at,
        duration_minutes,
        interview_type,
        location,
        meeting_link,
        notes,
        created_by,
    ):
        iid = self._next_id
        self._next_id += 1
        self.rows[iid] = Interview(
            interview_id=iid,
            candidate_id=int(candidate_id),
            interviewer_id=interviewer_id,
            custom_interviewer_name=custom_interviewer_name,
            scheduled_at=scheduled_at,
            duration_minutes=int(duration_minutes),
            interview_type=interview_type,
            status=InterviewStatus.SCHEDULED,
            location=location,
            meeting_link=meeting_link,
            notes=notes,
            created_by=created_by,
            created_at=NOW,
        )
        return iid

    def get_by_id(self, interview_id):
        iv = self.rows.get(int(interview_id))
        return self._decorate(iv) if iv else None

    def list_all(self, *, status=None, interviewer_id=None, limit=200):
        out = [
            self._decorate(iv)
            for iv in self.rows.values()
            if (status is None or iv.status == status)
            and (interviewer_id is None or iv.interviewer_id == interviewer_id)
        ]
        return sorted(out, key=lambda iv: iv.scheduled_at, reverse=True)[:limit]

    def list_by_candidate(self, candidate_id):
        return [self._decorate(iv) for iv in self.rows.values() if iv.candidate_id == int(candidate_id)]

    def list_scheduled(self, *, start, end, interviewer_id=None, candidate_id=None):
        out = []
        for iv in self.rows.values():
            if iv.status != InterviewStatus.SCHEDULED:
                continue
            if interviewer_id is not None and iv.interviewer_id != interviewer_id:
                continue
            if candidate_id is not None and iv.candidate_id != candidate_id:
                continue
            if iv.scheduled_at < end and iv.ends_at > start:
                out.append(self._decorate(iv))
        return out

    def update_status(self, *, interview_id, status, notes=None):
        iv = self.rows.get(int(interview_id))
        if not iv or iv.status != InterviewStatus.SCHEDULED:
            return False
        self.rows[iv.interview_id] = replace(iv, status=status, notes=notes or iv.notes)
        return True

    def update_time(self, *, interview_id, scheduled_at, duration_minutes):
        iv = self.rows.get(int(interview_id))
        if not iv or iv.status != InterviewStatus.SCHEDULED:
            return False
        self.rows[iv.interview_id] = replace(iv, scheduled_at=scheduled_at, duration_minutes=int(duration_minutes))
        return True


class InMemoryAvailability:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, InterviewAvailability] = {}

    def list_for_interviewer(self, interviewer_id):
        return [s for s in self.rows.values() if s.interviewer_id == int(interviewer_id)]

    def get_by_id(self, slot_id):
        return self.rows.get(int(slot_id))

    def create(self, *, interviewer_id, day_of_week, start_time, end_time, is_active=True):
        sid = self._next_id
        self._next_id += 1
        self.rows[sid] = InterviewAvailability(
            slot_id=sid,
            interviewer_id=int(interviewer_id),
            day_of_week=int(day_of_week),
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        )
        return sid

    def update(self, *, slot_id, day_of_week, start_time, end_time, is_active):
        slot = self.rows.get(int(slot_id))
        if not slot:
            return False
        self.rows[slot.slot_id] = replace(
            slot, day_of_week=day_of_week, start_time=start_time, end_time=end_time, is_active=is_active
        )
        return True

    def delete(self, slot_id):
        return self.rows.pop(int(slot_id), None) is not None


class InMemoryPtoRequests:
    def __init__(self, users: InMemoryUsers, policies: InMemoryPtoPolicies | None = None):
        self._users = users
        self._policies = policies
        self._next_id = 1
        self.rows: dict[int, PtoRequest] = {}

    def add(self, employee_id, start_date, end_date, status=PtoStatus.APPROVED, pto_type=PtoType.VACATION):
        rid = self.create(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            days=float((end_date - start_date).days + 1),
            pto_type=pto_type,
            reason="Trip",
            half_day=False,
            department_overlap_warning=False,
            overlapping_employees=(),
        )
        self.rows[rid] = replace(self.rows[rid], status=status)
        return rid

    def create(
        self,
        *,
        employee_id,
        start_date,
        end_date,
        days,
        pto_type,
        reason,
        half_day,
        department_overlap_warning,
        overlapping_employees,
    ):
        rid = self._next_id
        self._next_id += 1
        user = self._users.get_by_id(employee_id)
        self.rows[rid] = PtoRequest(
            request_id=rid,
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            days=days,
            pto_type=pto_type,
            reason=reason,
            status=PtoStatus.PENDING,
            created_at=NOW,
            half_day=half_day,
            department_overlap_warning=department_overlap_warning,
            overlapping_employees=tuple(overlapping_employees),
            employee_name=user.full_name if user else None,
        )
        return rid

    def get_by_id(self, request_id):
        return self.rows.get(int(request_id))

    def list_requests(self, *, employee_id=None, status=None, limit=200):
        return [
            r
            for r in self.rows.values()
            if (employee_id is None or r.employee_id == employee_id) and (status is None or r.status == status)
        ][:limit]

    def list_for_employee_in_range(self, *, employee_id, start_date, end_date, statuses):
        statuses = set(statuses)
        return [
            r
            for r in self.rows.values()
            if r.employee_id == employee_id
            and r.status in statuses
            and r.start_date <= end_date
            and r.end_date >= start_date
        ]

    def list_department_overlaps(self, *, dept_id, start_date, end_date, exclude_employee_id, statuses):
        statuses = set(statuses)
        out = []
        for r in self.rows.values():
            user = self._users.get_by_id(r.employee_id)
            if not user or user.dept_id != dept_id or r.employee_id == exclude_employee_id:
                continue
            if r.status in statuses and r.start_date <= end_date and r.end_date >= start_date:
                out.append(
                    PtoOverlapRow(
                        request_id=r.request_id,
                        employee_id=r.employee_id,
                        employee_name=user.full_name,
                        start_date=r.start_date,
                        end_date=r.end_date,
                        status=r.status,
                    )
                )
        return out

    def decide(self, *, request_id, status, reviewed_by, review_notes=None):
        r = self.rows.get(int(request_id))
        if not r or r.status != PtoStatus.PENDING:
            return False
        self.rows[r.request_id] = replace(
            r, status=status, reviewed_by=reviewed_by, reviewed_at=NOW, review_notes=review_notes
        )
        return True

    def approve(self, *, request_id, employee_id, days, reviewed_by, review_notes=None):
        r = self.rows.get(int(request_id))
        if not r or r.status != PtoStatus.PENDING:
            return False
        p = self._policies.get(employee_id) if self._policies else None
        if p is None or p.used_days + days > p.total_days:
            raise ValidationError("Insufficient PTO days available")
        self._policies.rows[p.employee_id] = replace(p, used_days=p.used_days + days)
        return self.decide(
            request_id=request_id, status=PtoStatus.APPROVED, reviewed_by=reviewed_by, review_notes=review_notes
        )


class InMemoryPtoPolicies:
    def __init__(self, department_base_days=None):
        self.rows: dict[int, PtoPolicy] = {}
        self._dept_base = dict(department_base_days or {})

    def get(self, employee_id):
        return self.rows.get(int(employee_id))

    def list_all(self):
        return list(self.rows.values())

    def create(self, *, employee_id, base_days):
        self.rows.setdefault(int(employee_id), PtoPolicy(employee_id=int(employee_id), base_days=float(base_days)))

    def update_custom(self, *, employee_id, additional_days, notes, customized_by):
        p = self.rows.get(int(employee_id))
        if not p:
            return False
        self.rows[p.employee_id] = replace(
            p, additional_days=additional_days, notes=notes, customized_by=customized_by, customized_at=NOW
        )
        return True

    def department_base_days(self, dept_id):
        return self._dept_base.get(dept_id)


class InMemoryAttendance:
    def __init__(self):
        self._next_session = 1
        self._next_checkin = 1
        self.sessions: dict[int, AttendanceSession] = {}
        self.checkins: dict[int, CheckIn] = {}

    def create_session(self, *, name, location, qr_token, starts_at, expires_at, notes, created_by):
        sid = self._next_session
        self._next_session += 1
        self.sessions[sid] = AttendanceSession(
            session_id=sid,
            name=name,
            location=location,
            status=SessionStatus.ACTIVE,
            qr_token=qr_token,
            starts_at=starts_at,
            expires_at=expires_at,
            notes=notes,
            created_by=created_by,
            created_at=NOW,
        )
        return sid

    def get_session(self, session_id):
        return self.sessions.get(int(session_id))

    def list_sessions(self, *, active_only=False, limit=200):
        return [s for s in self.sessions.values() if not active_only or s.status == SessionStatus.ACTIVE][:limit]

    def update_token(self, *, session_id, qr_token):
        s = self.sessions.get(int(session_id))
        if not s:
            return False
        self.sessions[s.session_id] = replace(s, qr_token=qr_token)
        return True

    def close_session(self, session_id):
        s = self.sessions.get(int(session_id))
        if not s or s.status != SessionStatus.ACTIVE:
            return False
        self.sessions[s.session_id] = replace(s, status=SessionStatus.CLOSED, closed_at=NOW)
        return True

    def has_checked_in(self, *, session_id, user_id, name):
        for c in self.checkins.values():
            if c.session_id != session_id:
                continue
            if user_id is not None and c.user_id == user_id:
                return True
            if user_id is None and c.user_id is None and c.name.lower() == name.lower():
                return True
        return False

    def create_checkin(self, *, session_id, user_id, name, email, location, user_agent, ip_hash):
        cid = self._next_checkin
        self._next_checkin += 1
        self.checkins[cid] = CheckIn(
            checkin_id=cid,
            session_id=session_id,
            user_id=user_id,
            name=name,
            email=email,
            location=location,
            checked_in_at=NOW,
            user_agent=user_agent,
            ip_hash=ip_hash,
        )
        return cid

    def list_checkins(self, session_id):
        return [c for c in self.checkins.values() if c.session_id == int(session_id)]


class Broken:
    """Repository stand-in whose every call fails, like a lost database connection."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise RuntimeError(f"{name}: connection lost")

        return fail


def weekday_window(repo: InMemoryAvailability, interviewer_id: int, start=time(9, 0), end=time(17, 0)) -> None:
    for day in range(5):
        repo.create(interviewer_id=interviewer_id, day_of_week=day, start_time=start, end_time=end)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def users():
    repo = InMemoryUsers()
    repo.add(ADMIN_ID, "Admin Demo", Role.ADMIN, HR_DEPT, username="admin")
    repo.add(MANAGER_ID, "Morgan Manager", Role.MANAGER, OPS_DEPT, username="manager")
    repo.add(RILEY_ID, "Riley Recruiter", Role.EMPLOYEE, HR_DEPT, username="riley")
    repo.add(SAM_ID, "Sam Support", Role.EMPLOYEE, OPS_DEPT, username="sam")
    repo.add(JAMIE_ID, "Jamie Park", Role.EMPLOYEE, HR_DEPT, username="jamie")
    repo.add(TAYLOR_ID, "Taylor Quinn", Role.EMPLOYEE, HR_DEPT, username="taylor")
    return repo


@pytest.fixture
def candidates():
    repo = InMemoryCandidates()
    repo.add(JORDAN_ID, "Jordan Lee")
    repo.add(CASEY_ID, "Casey Morgan", CandidateStatus.SCREENING)
    return repo


@pytest.fixture
def interviews(users, candidates):
    return InMemoryInterviews(users, candidates)


@pytest.fixture
def availability():
    return InMemoryAvailability()


@pytest.fixture
def pto_requests(users, pto_policies):
    return InMemoryPtoRequests(users, pto_policies)


@pytest.fixture
def pto_policies():
    return InMemoryPtoPolicies({HR_DEPT: 15.0})


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def policy():
    return ConflictPolicy()


@pytest.fixture
def detector(interviews, availability, pto_requests, policy, clock):
    return ConflictDetector(interviews, availability, pto_requests, policy=policy, clock=clock)


@pytest.fixture
def container(users, candidates, interviews, availability, pto_requests, pto_policies, attendance_repo, detector):
    return wire(
        users_repo=users,
        candidates_repo=candidates,
        interviews_repo=interviews,
        availability_repo=availability,
        pto_requests_repo=pto_requests,
        pto_policies_repo=pto_policies,
        attendance_repo=attendance_repo,
        detector=detector,
    )


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.hr_portal.hr_portal.main import create_app

    flask_app = create_app(container=container)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client, users):
    """Put a user into the Flask session without going through the login form."""

    def _login(user_id: int):
        user = users.get_by_id(user_id)
        with client.session_transaction() as sess:
            sess["user_id"] = user.user_id
            sess["name"] = user.full_name
            sess["role"] = user.role.value
            sess["dept_id"] = user.dept_id
        return user

    return _login


def at(day: int, hour: int, minute: int = 0) -> datetime:
    """A moment in the week of Monday 2025-09-29 (day 0) .. Sunday (day 6)."""

    return datetime(2025, 9, 29, hour, minute) + timedelta(days=day)


def d(month: int, day: int) -> date:
    return date(2025, month, day)
