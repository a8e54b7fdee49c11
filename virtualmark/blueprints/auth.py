from __future__ import annotations

from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from pydantic import ValidationError

from virtualmark.extensions import limiter
from virtualmark.schemas.auth import LoginRequest
from virtualmark.services import auth as auth_svc

bp = Blueprint("auth", __name__)


def _user_json(user) -> dict:
    return {"id": user.public_id, "username": user.username, "isAdmin": bool(user.is_admin)}


@bp.get("/csrf")
def csrf_token():
    """Token the admin client sends back in the X-CSRFToken header."""
    return jsonify({"csrfToken": generate_csrf()})


@bp.post("/login")
@limiter.limit("5 per minute; 20 per hour")
def login():
    data = request.get_json(silent=True) or {}
    try:
        payload = LoginRequest.model_validate(data)
    except ValidationError:
        return jsonify({"error": "bad_request", "message": "username and password are required"}), 400

    user, error_message = auth_svc.authenticate(payload.username, payload.password)
    if not user:
        current_app.logger.warning(f"Failed login for {payload.username!r}")
        return jsonify({"error": "unauthorized", "message": error_message or "Invalid credentials"}), 401

    if not user.is_admin:
        return jsonify({"error": "forbidden", "message": "admin required"}), 403

    duration = timedelta(days=current_app.config.get("REMEMBER_COOKIE_DAYS", 14))
    login_user(user, remember=payload.remember_me, duration=duration)
    current_app.logger.info(f"Admin {user.username!r} logged in")
    return jsonify({"status": "ok", "user": _user_json(user)}), 200


@bp.post("/logout")
def logout():
    logout_user()
    return jsonify({"status": "ok"}), 200


@bp.get("/session")
def session_info():
    if not current_user.is_authenticated:
        return jsonify({"authenticated": False}), 200
    return jsonify({"authenticated": True, "user": _user_json(current_user)}), 200
