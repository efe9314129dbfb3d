from __future__ import annotations

from conftest import CASEY_ID, JAMIE_ID, JORDAN_ID, MANAGER_ID, PASSWORD, RILEY_ID, SAM_ID, TAYLOR_ID, at, d
from src.hr_portal.hr_portal.core.enums import PtoStatus


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


# -------- auth --------
def test_login_and_me(client):
    resp = client.post("/api/auth/login", json={"username": "riley", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["role"] == "employee"

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.get_json()["data"]["userId"] == RILEY_ID

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_login_with_bad_password(client):
    resp = client.post("/api/auth/login", json={"username": "riley", "password": "wrong-password"})

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Invalid username or password"}


def test_guards(client, login):
    assert client.get("/api/interviews").status_code == 401

    login(RILEY_ID)
    resp = client.post("/api/interviews", json={})
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Manager access required"


# -------- interviews --------
def test_check_conflicts_endpoint(client, login, interviews):
    interviews.add(interviewer_id=RILEY_ID, start=at(2, 9), minutes=30)
    login(MANAGER_ID)

    clash = client.post(
        "/api/interviews/check-conflicts",
        json={"actorId": RILEY_ID, "proposedStart": "2025-10-01T09:15:00", "durationMinutes": 30},
    )
    assert clash.status_code == 200
    body = clash.get_json()
    assert body["hasConflicts"] is True
    assert body["hasHardConflicts"] is True
    assert len(body["conflicts"]) == 1
    assert body["conflicts"][0]["severity"] == "hard"
    assert body["suggestedTimes"][0] == "2025-10-01T09:30:00"

    free = client.post(
        "/api/interviews/check-conflicts",
        json={"actorId": RILEY_ID, "proposedStart": "2025-10-01T09:30:00", "durationMinutes": 30},
    )
    assert free.get_json()["hasConflicts"] is False
    assert free.get_json()["suggestedTimes"] == []


def test_check_conflicts_validation(client, login):
    login(MANAGER_ID)

    missing = client.post("/api/interviews/check-conflicts", json={"proposedStart": "2025-10-01T09:15:00"})
    assert missing.status_code == 400

    bad_time = client.post(
        "/api/interviews/check-conflicts",
        json={"actorId": RILEY_ID, "proposedStart": "tomorrow", "durationMinutes": 30},
    )
    assert bad_time.status_code == 400

    epoch = client.post(
        "/api/interviews/check-conflicts",
        json={"actorId": RILEY_ID, "proposedStart": 1759309200, "durationMinutes": 30},
    )
    assert epoch.status_code == 400
    assert epoch.get_json()["success"] is False

    bad_candidate = client.post(
        "/api/interviews/check-conflicts",
        json={
            "actorId": RILEY_ID,
            "proposedStart": "2025-10-01T09:15:00",
            "durationMinutes": 30,
            "candidateId": "abc",
        },
    )
    assert bad_candidate.status_code == 400
    assert bad_candidate.get_json()["error"] == "Candidate must be an integer"


def test_schedule_conflict_returns_409_unless_forced(client, login, interviews):
    interviews.add(interviewer_id=RILEY_ID, start=at(2, 9), minutes=30, candidate_id=CASEY_ID)
    login(MANAGER_ID)
    payload = {
        "candidateId": JORDAN_ID,
        "interviewerId": RILEY_ID,
        "scheduledDate": "2025-10-01T09:15:00",
        "duration": 30,
        "type": "VIDEO",
    }

    blocked = client.post("/api/interviews", json=payload)
    assert blocked.status_code == 409
    body = blocked.get_json()
    assert body["success"] is False
    assert body["error"] == "Scheduling conflict detected"
    assert body["hasHardConflicts"] is True
    assert body["suggestedTimes"]

    forced = client.post("/api/interviews", json={**payload, "forceSchedule": True})
    assert forced.status_code == 201
    data = forced.get_json()["data"]
    assert data["forced"] is True
    assert data["interview"]["candidateName"] == "Jordan Lee"
    assert data["interview"]["endsAt"] == "2025-10-01T09:45:00"


def test_interview_lifecycle_over_http(client, login, candidates):
    login(MANAGER_ID)
    created = client.post(
        "/api/interviews",
        json={
            "candidateId": JORDAN_ID,
            "interviewerId": SAM_ID,
            "scheduledDate": "2025-10-01T10:00:00",
            "durationMinutes": 45,
            "type": "PHONE",
        },
    )
    assert created.status_code == 201
    interview_id = created.get_json()["data"]["interview"]["id"]

    listed = client.get(f"/api/interviews?interviewerId={SAM_ID}").get_json()["data"]
    assert [i["id"] for i in listed] == [interview_id]
    assert client.get(f"/api/interviews/candidate/{JORDAN_ID}").get_json()["data"][0]["id"] == interview_id

    moved = client.post(f"/api/interviews/{interview_id}/reschedule", json={"scheduledDate": "2025-10-02T10:00:00"})
    assert moved.status_code == 200
    assert moved.get_json()["data"]["interview"]["scheduledDate"] == "2025-10-02T10:00:00"

    status = client.patch(f"/api/interviews/{interview_id}/status", json={"status": "NO_SHOW"})
    assert status.status_code == 200
    assert candidates.get_by_id(JORDAN_ID).status.value == "DEAD_BY_CANDIDATE"

    again = client.patch(f"/api/interviews/{interview_id}/status", json={"status": "COMPLETED"})
    assert again.status_code == 400

    assert client.get("/api/interviews/999").status_code == 404


def test_availability_endpoints(client, login):
    login(MANAGER_ID)

    created = client.post(
        "/api/interview-availability",
        json={"interviewerId": SAM_ID, "dayOfWeek": 0, "startTime": "09:00", "endTime": "12:00"},
    )
    assert created.status_code == 201
    slot = created.get_json()["data"]

    listed = client.get(f"/api/interview-availability/{SAM_ID}").get_json()["data"]
    assert [s["id"] for s in listed] == [slot["id"]]

    bad = client.patch(f"/api/interview-availability/slots/{slot['id']}", json={"endTime": "08:00"})
    assert bad.status_code == 400

    numeric = client.post(
        "/api/interview-availability",
        json={"interviewerId": SAM_ID, "dayOfWeek": 1, "startTime": 900, "endTime": "12:00"},
    )
    assert numeric.status_code == 400

    assert client.delete(f"/api/interview-availability/slots/{slot['id']}").status_code == 200
    assert client.delete(f"/api/interview-availability/slots/{slot['id']}").status_code == 404


# -------- PTO --------
def test_pto_request_with_department_warning(client, login, pto_requests):
    pto_requests.add(JAMIE_ID, d(10, 6), d(10, 8), status=PtoStatus.APPROVED)
    pto_requests.add(TAYLOR_ID, d(10, 7), d(10, 7), status=PtoStatus.APPROVED)
    login(RILEY_ID)

    resp = client.post(
        "/api/pto",
        json={"startDate": "2025-10-07", "endDate": "2025-10-08", "type": "VACATION", "reason": "Family trip"},
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["data"]["status"] == "PENDING"
    assert body["data"]["departmentOverlapWarning"] is True
    assert body["warnings"] == [
        "2 other employees in your department have time off during this period: Jamie Park, Taylor Quinn"
    ]

    overlap = client.post(
        "/api/pto",
        json={"startDate": "2025-10-08", "endDate": "2025-10-08", "type": "VACATION", "reason": "Again"},
    )
    assert overlap.status_code == 409
    assert overlap.get_json()["hasHardConflicts"] is True


def test_pto_review_flow(client, login):
    login(SAM_ID)
    created = client.post(
        "/api/pto",
        json={"startDate": "2025-10-06", "endDate": "2025-10-07", "type": "PERSONAL", "reason": "Moving"},
    )
    request_id = created.get_json()["data"]["id"]

    assert client.post(f"/api/pto/{request_id}/approve").status_code == 403
    assert client.get(f"/api/pto-policies/employee/{RILEY_ID}").status_code == 403
    assert client.post("/api/pto", json={"employeeId": RILEY_ID}).status_code == 403

    login(MANAGER_ID)
    pending = client.get("/api/pto/pending").get_json()["data"]
    assert [r["id"] for r in pending] == [request_id]

    approved = client.post(f"/api/pto/{request_id}/approve", json={"notes": "Enjoy"})
    assert approved.status_code == 200
    assert approved.get_json()["data"]["status"] == "APPROVED"
    assert client.post(f"/api/pto/{request_id}/deny").status_code == 400

    policy = client.get(f"/api/pto-policies/employee/{SAM_ID}").get_json()["data"]
    assert policy["usedDays"] == 2.0
    assert policy["remainingDays"] == 8.0


def test_pto_half_day_flag_accepts_string_false(client, login):
    login(SAM_ID)

    resp = client.post(
        "/api/pto",
        json={"startDate": "2025-10-06", "endDate": "2025-10-07", "type": "PERSONAL", "halfDay": "false", "reason": "Moving"},
    )

    assert resp.status_code == 201
    assert resp.get_json()["data"]["halfDay"] is False
    assert resp.get_json()["data"]["days"] == 2.0


def test_pto_check_overlap_endpoint(client, login, pto_requests):
    pto_requests.add(RILEY_ID, d(10, 6), d(10, 6), status=PtoStatus.PENDING)
    login(RILEY_ID)

    resp = client.post("/api/pto/check-overlap", json={"startDate": "2025-10-06", "endDate": "2025-10-06"})

    assert resp.status_code == 200
    assert resp.get_json()["hasHardConflicts"] is True

    bad = client.post("/api/pto/check-overlap", json={"startDate": "06/10/2025", "endDate": "2025-10-06"})
    assert bad.status_code == 400

    numeric = client.post("/api/pto", json={"startDate": 20251006, "endDate": "2025-10-06", "reason": "Trip"})
    assert numeric.status_code == 400
    assert numeric.get_json()["success"] is False


# -------- attendance --------
def test_attendance_qr_flow(client, login):
    login(MANAGER_ID)
    created = client.post("/api/attendance/sessions", json={"name": "Town hall", "location": "Floor 3"})
    assert created.status_code == 201
    body = created.get_json()
    session_id = body["data"]["id"]
    token = body["data"]["qrToken"]
    assert body["qrUrl"].startswith("http://localhost/attendance/check-in?")

    png = client.get(f"/api/attendance/sessions/{session_id}/qr.png")
    assert png.status_code == 200
    assert png.mimetype == "image/png"
    assert png.data[:8] == b"\x89PNG\r\n\x1a\n"

    client.post("/api/auth/logout")

    assert client.get(f"/api/attendance/sessions/{session_id}/public").status_code == 401
    assert client.get(f"/api/attendance/sessions/{session_id}/public?t=wrong").status_code == 401
    public = client.get(f"/api/attendance/sessions/{session_id}/public?t={token}")
    assert public.status_code == 200
    assert "qrToken" not in public.get_json()

    checked = client.post(f"/api/attendance/sessions/{session_id}/check-in?t={token}", json={"name": "Visitor"})
    assert checked.status_code == 201
    assert checked.get_json()["data"]["location"] == "Floor 3"

    dup = client.post(f"/api/attendance/sessions/{session_id}/check-in?t={token}", json={"name": "visitor"})
    assert dup.status_code == 400
    assert dup.get_json()["error"] == "Already checked in to this session"

    assert client.post(f"/api/attendance/sessions/999/check-in?t={token}", json={"name": "x"}).status_code == 404
