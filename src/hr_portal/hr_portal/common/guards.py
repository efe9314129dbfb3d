from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..users.service import SessionUser


def store_user(user: SessionUser) -> None:
    session["user_id"] = user.user_id
    session["name"] = user.full_name
    session["role"] = user.role.value
    session["dept_id"] = user.dept_id


def current_user() -> SessionUser:
    return SessionUser(
        user_id=int(session["user_id"]),
        full_name=session.get("name") or "",
        role=Role(session.get("role")),
        dept_id=session.get("dept_id"),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def manager_required(view):
    """Allow managers and admins only."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Authentication required"}), 401
        try:
            role = Role(session.get("role"))
        except ValueError:
            role = None
        if role is None or not role.is_manager:
            return jsonify({"success": False, "error": "Manager access required"}), 403
        return view(*args, **kwargs)

    return wrapper
