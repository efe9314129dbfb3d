from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_hhmm, parse_iso_datetime
from ..common.guards import current_user, login_required, manager_required
from ..common.http import json_body, ok
from ..common.validators import as_flag, require_int
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.interview_service
    availability = container.availability_service

    @app.route("/api/interviews/check-conflicts", methods=["POST"], endpoint="api_interviews_check_conflicts")
    @manager_required
    def check_conflicts():
        body = json_body()
        if body.get("actorId") in (None, ""):
            raise ValidationError("actorId is required")
        report = service.check_conflicts(
            current_role=current_user().role,
            interviewer_id=body.get("actorId"),
            proposed_start=parse_iso_datetime(body.get("proposedStart")),
            duration_minutes=body.get("durationMinutes"),
            candidate_id=body.get("candidateId"),
        )
        return jsonify(report.to_dict())

    @app.route("/api/interviews", methods=["POST"], endpoint="api_interviews_create")
    @manager_required
    def create_interview():
        body = json_body()
        user = current_user()
        result = service.schedule(
            current_role=user.role,
            created_by=user.user_id,
            candidate_id=body.get("candidateId"),
            interviewer_id=body.get("interviewerId"),
            custom_interviewer_name=body.get("customInterviewerName"),
            scheduled_at=parse_iso_datetime(body.get("scheduledDate")),
            duration_minutes=body.get("duration", body.get("durationMinutes")),
            interview_type=body.get("type"),
            location=body.get("location"),
            meeting_link=body.get("meetingLink"),
            notes=body.get("notes"),
            force_schedule=as_flag(body.get("forceSchedule", False)),
        )
        return ok(result.to_dict(), 201)

    @app.route("/api/interviews", methods=["GET"], endpoint="api_interviews_list")
    @manager_required
    def list_interviews():
        interviewer_id = request.args.get("interviewerId")
        if interviewer_id:
            rows = service.list_by_interviewer(require_int(interviewer_id, "interviewerId"))
        else:
            rows = service.list_all(status=request.args.get("status"))
        return ok([i.to_dict() for i in rows])

    @app.route("/api/interviews/<int:interview_id>", methods=["GET"], endpoint="api_interviews_get")
    @login_required
    def get_interview(interview_id: int):
        return ok(service.get(interview_id).to_dict())

    @app.route("/api/interviews/candidate/<int:candidate_id>", methods=["GET"], endpoint="api_interviews_by_candidate")
    @login_required
    def interviews_for_candidate(candidate_id: int):
        return ok([i.to_dict() for i in service.list_by_candidate(candidate_id)])

    @app.route("/api/interviews/<int:interview_id>/status", methods=["PATCH"], endpoint="api_interviews_status")
    @manager_required
    def update_status(interview_id: int):
        body = json_body()
        interview = service.update_status(
            current_role=current_user().role,
            interview_id=interview_id,
            status=body.get("status"),
            notes=body.get("notes"),
        )
        return ok(interview.to_dict())

    @app.route("/api/interviews/<int:interview_id>/reschedule", methods=["POST"], endpoint="api_interviews_reschedule")
    @manager_required
    def reschedule(interview_id: int):
        body = json_body()
        result = service.reschedule(
            current_role=current_user().role,
            interview_id=interview_id,
            new_start=parse_iso_datetime(body.get("scheduledDate")),
            duration_minutes=body.get("duration", body.get("durationMinutes")),
            force_schedule=as_flag(body.get("forceSchedule", False)),
        )
        return ok(result.to_dict())

    # -------- Interviewer availability --------
    @app.route("/api/interview-availability", methods=["GET"], endpoint="api_availability_mine")
    @login_required
    def my_availability():
        slots = availability.list_for_interviewer(current_user().user_id)
        return ok([s.to_dict() for s in slots])

    @app.route("/api/interview-availability/<int:interviewer_id>", methods=["GET"], endpoint="api_availability_list")
    @login_required
    def list_availability(interviewer_id: int):
        return ok([s.to_dict() for s in availability.list_for_interviewer(interviewer_id)])

    @app.route("/api/interview-availability", methods=["POST"], endpoint="api_availability_create")
    @manager_required
    def create_availability():
        body = json_body()
        slot = availability.create_slot(
            current_role=current_user().role,
            interviewer_id=body.get("interviewerId"),
            day_of_week=body.get("dayOfWeek"),
            start_time=parse_hhmm(body.get("startTime")),
            end_time=parse_hhmm(body.get("endTime")),
            is_active=as_flag(body.get("isActive", True)),
        )
        return ok(slot.to_dict(), 201)

    @app.route("/api/interview-availability/slots/<int:slot_id>", methods=["PATCH"], endpoint="api_availability_update")
    @manager_required
    def update_availability(slot_id: int):
        body = json_body()
        slot = availability.update_slot(
            current_role=current_user().role,
            slot_id=slot_id,
            day_of_week=body.get("dayOfWeek"),
            start_time=parse_hhmm(body["startTime"]) if body.get("startTime") else None,
            end_time=parse_hhmm(body["endTime"]) if body.get("endTime") else None,
            is_active=as_flag(body["isActive"]) if "isActive" in body else None,
        )
        return ok(slot.to_dict())

    @app.route("/api/interview-availability/slots/<int:slot_id>", methods=["DELETE"], endpoint="api_availability_delete")
    @manager_required
    def delete_availability(slot_id: int):
        availability.delete_slot(current_role=current_user().role, slot_id=slot_id)
        return ok()
