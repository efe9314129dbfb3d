from __future__ import annotations

import io

import qrcode
from flask import Flask, jsonify, request, send_file, session

from ..common.datetime_utils import parse_iso_datetime
from ..common.guards import current_user, manager_required
from ..common.http import json_body, ok
from ..container import Container


def _qr_png(data: str) -> io.BytesIO:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or ""


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _url_for(s) -> str:
        return service.check_in_url(s, base_url=container.public_base_url or request.host_url)

    @app.route("/api/attendance/sessions", methods=["POST"], endpoint="api_attendance_create")
    @manager_required
    def create_session():
        body = json_body()
        user = current_user()
        s = service.create_session(
            current_role=user.role,
            created_by=user.user_id,
            name=body.get("name"),
            location=body.get("location"),
            starts_at=parse_iso_datetime(body["startsAt"]) if body.get("startsAt") else None,
            expires_at=parse_iso_datetime(body["expiresAt"]) if body.get("expiresAt") else None,
            notes=body.get("notes"),
        )
        return ok(s.to_dict(), 201, qrUrl=_url_for(s))

    @app.route("/api/attendance/sessions", methods=["GET"], endpoint="api_attendance_list")
    @manager_required
    def list_sessions():
        active_only = request.args.get("active", "").lower() in ("1", "true", "yes")
        rows = service.list_sessions(current_role=current_user().role, active_only=active_only)
        return ok([s.to_dict() for s in rows])

    @app.route("/api/attendance/sessions/<int:session_id>", methods=["GET"], endpoint="api_attendance_get")
    @manager_required
    def get_session(session_id: int):
        s, checkins = service.get_session(current_role=current_user().role, session_id=session_id)
        data = s.to_dict()
        data["checkIns"] = [c.to_dict() for c in checkins]
        return ok(data, qrUrl=_url_for(s))

    @app.route("/api/attendance/sessions/<int:session_id>/rotate-token", methods=["POST"], endpoint="api_attendance_rotate")
    @manager_required
    def rotate_token(session_id: int):
        s = service.rotate_token(current_role=current_user().role, session_id=session_id)
        return ok(s.to_dict(), qrUrl=_url_for(s))

    @app.route("/api/attendance/sessions/<int:session_id>/close", methods=["POST"], endpoint="api_attendance_close")
    @manager_required
    def close_session(session_id: int):
        s = service.close_session(current_role=current_user().role, session_id=session_id)
        return ok(s.to_dict())

    @app.route("/api/attendance/sessions/<int:session_id>/qr.png", methods=["GET"], endpoint="api_attendance_qr")
    @manager_required
    def session_qr(session_id: int):
        s, _ = service.get_session(current_role=current_user().role, session_id=session_id)
        return send_file(_qr_png(_url_for(s)), mimetype="image/png")

    # Public: reachable by anyone holding the QR token
    @app.route("/api/attendance/sessions/<int:session_id>/public", methods=["GET"], endpoint="api_attendance_public")
    def public_session(session_id: int):
        s = service.get_public_session(session_id=session_id, token=request.args.get("t"))
        return jsonify(s.to_public_dict())

    @app.route("/api/attendance/sessions/<int:session_id>/check-in", methods=["POST"], endpoint="api_attendance_check_in")
    def check_in(session_id: int):
        body = json_body()
        user_id = session.get("user_id")
        checkin = service.check_in(
            session_id=session_id,
            token=request.args.get("t"),
            name=body.get("name") or session.get("name"),
            email=body.get("email"),
            user_id=int(user_id) if user_id is not None else None,
            user_agent=request.headers.get("User-Agent"),
            ip=_client_ip(),
        )
        return ok(checkin.to_dict(), 201)
