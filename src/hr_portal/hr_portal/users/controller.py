from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.guards import current_user, login_required, store_user
from ..common.http import json_body, ok
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_auth_login")
    def login():
        body = json_body()
        s_user = container.auth_service.authenticate(body.get("username", ""), body.get("password", ""))

        session.clear()
        session.permanent = bool(body.get("rememberMe"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        store_user(s_user)
        return ok(s_user.to_dict())

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_auth_logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_auth_me")
    @login_required
    def me():
        return ok(current_user().to_dict())
