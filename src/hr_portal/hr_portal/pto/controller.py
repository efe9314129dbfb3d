from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.guards import current_user, login_required, manager_required
from ..common.http import json_body, ok
from ..common.validators import as_flag, require_int
from ..container import Container
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    service = container.pto_service
    policies = container.pto_policy_service

    def _target_employee(body: dict) -> int:
        """Employees file for themselves; managers may file on behalf of someone."""

        user = current_user()
        raw = body.get("employeeId")
        if raw in (None, ""):
            return user.user_id
        employee_id = require_int(raw, "employeeId")
        if employee_id != user.user_id and not user.role.is_manager:
            raise AuthorizationError("You can only file PTO for yourself")
        return employee_id

    @app.route("/api/pto", methods=["GET"], endpoint="api_pto_mine")
    @login_required
    def my_requests():
        return ok([r.to_dict() for r in service.list_my_requests(current_user().user_id)])

    @app.route("/api/pto", methods=["POST"], endpoint="api_pto_create")
    @login_required
    def create_request():
        body = json_body()
        req, report = service.create_request(
            employee_id=_target_employee(body),
            start_date=parse_iso_date(body.get("startDate")),
            end_date=parse_iso_date(body.get("endDate")),
            pto_type=body.get("type"),
            reason=body.get("reason"),
            half_day=as_flag(body.get("halfDay", False)),
        )
        return ok(
            req.to_dict(),
            201,
            conflicts=[c.to_dict() for c in report.conflicts],
            warnings=[c.message for c in report.soft_conflicts] + list(report.warnings),
        )

    @app.route("/api/pto/check-overlap", methods=["POST"], endpoint="api_pto_check_overlap")
    @login_required
    def check_overlap():
        body = json_body()
        report = service.check_overlap(
            employee_id=_target_employee(body),
            start_date=parse_iso_date(body.get("startDate")),
            end_date=parse_iso_date(body.get("endDate")),
        )
        return jsonify(report.to_dict())

    @app.route("/api/pto/pending", methods=["GET"], endpoint="api_pto_pending")
    @manager_required
    def pending():
        return ok([r.to_dict() for r in service.list_pending(current_role=current_user().role)])

    @app.route("/api/pto/<int:request_id>/approve", methods=["POST"], endpoint="api_pto_approve")
    @manager_required
    def approve(request_id: int):
        user = current_user()
        req = service.approve(
            current_role=user.role,
            reviewer_id=user.user_id,
            request_id=request_id,
            notes=json_body().get("notes"),
        )
        return ok(req.to_dict())

    @app.route("/api/pto/<int:request_id>/deny", methods=["POST"], endpoint="api_pto_deny")
    @manager_required
    def deny(request_id: int):
        user = current_user()
        req = service.deny(
            current_role=user.role,
            reviewer_id=user.user_id,
            request_id=request_id,
            notes=json_body().get("notes"),
        )
        return ok(req.to_dict())

    # -------- Policies --------
    @app.route("/api/pto-policies", methods=["GET"], endpoint="api_pto_policies")
    @manager_required
    def list_policies():
        return ok([p.to_dict() for p in policies.list_policies(current_role=current_user().role)])

    @app.route("/api/pto-policies/employee/<int:employee_id>", methods=["GET"], endpoint="api_pto_policy_get")
    @login_required
    def get_policy(employee_id: int):
        user = current_user()
        policy = policies.get_policy(current_role=user.role, current_user_id=user.user_id, employee_id=employee_id)
        return ok(policy.to_dict())

    @app.route("/api/pto-policies/employee/<int:employee_id>", methods=["PUT"], endpoint="api_pto_policy_set")
    @manager_required
    def set_policy(employee_id: int):
        body = json_body()
        user = current_user()
        policy = policies.set_policy(
            current_role=user.role,
            current_user_id=user.user_id,
            employee_id=employee_id,
            additional_days=body.get("additionalDays", 0),
            notes=body.get("notes"),
        )
        return ok(policy.to_dict())
