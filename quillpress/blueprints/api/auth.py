from __future__ import annotations

from datetime import datetime, timezone

from flask import jsonify, request, session
from flask_login import current_user, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from quillpress.decorators import protect
from quillpress.errors import Unauthenticated
from quillpress.extensions import limiter
from quillpress.schemas import LoginRequest, RegisterRequest, validate_payload
from quillpress.services import auth as auth_svc
from quillpress.utils.serializers import user_to_dict

from quillpress.blueprints.api import bp


def _start_session(user) -> None:
    login_user(user, remember=False)
    session.permanent = True
    session["_login_time"] = int(datetime.now(timezone.utc).timestamp())


@bp.get("/auth/csrf")
def csrf_token():
    """Issue a CSRF token for the X-CSRFToken header"""
    return jsonify({"success": True, "data": {"csrfToken": generate_csrf()}})


@bp.post("/auth/register")
@limiter.limit("5 per minute; 20 per hour")
def register():
    payload = validate_payload(RegisterRequest, request.get_json(silent=True))
    user = auth_svc.register_user(name=payload.name, email=payload.email, password=payload.password)
    _start_session(user)
    return jsonify({"success": True, "data": user_to_dict(user)}), 201


@bp.post("/auth/login")
@limiter.limit("5 per minute; 20 per hour")
def login():
    payload = validate_payload(LoginRequest, request.get_json(silent=True))
    user, error_message = auth_svc.authenticate(payload.email, payload.password)
    if not user:
        raise Unauthenticated(error_message or "Invalid credentials")
    _start_session(user)
    return jsonify({"success": True, "data": user_to_dict(user)})


@bp.post("/auth/logout")
@protect
def logout():
    logout_user()
    session.pop("_login_time", None)
    return jsonify({"success": True, "data": {}})


@bp.get("/auth/me")
@protect
def me():
    return jsonify({"success": True, "data": user_to_dict(current_user)})
