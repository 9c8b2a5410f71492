from __future__ import annotations

import os
from datetime import timedelta, datetime, timezone
from typing import Any, Dict

import click
from flask import Flask, jsonify, g, request, session
from flask_login import current_user
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from quillpress.config import Config
from quillpress.errors import ApiError
from quillpress.extensions import (
    db,
    migrate,
    login_manager,
    csrf,
    limiter,
)
from quillpress.logging_config import configure_logging
from quillpress.security import apply_security_headers
from quillpress.models.user import User, ROLE_ADMIN  # ensure models imported for migrations


def create_app(config_overrides: Dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    # Load config
    app.config.from_object(Config())
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging()

    app.permanent_session_lifetime = timedelta(minutes=int(app.config.get("SESSION_LIFETIME_MINUTES", 30)))

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Report a missing admin account at startup
    with app.app_context():
        from quillpress.utils.admin_setup import ensure_admin_user
        ensure_admin_user()

    # User loader for Flask-Login
    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        from quillpress.utils.db_retry import safe_db_operation
        try:
            return safe_db_operation(db.session.get, User, int(user_id))
        except (ValueError, SQLAlchemyError) as e:
            app.logger.error(f"Error loading user {user_id}: {str(e)}")
            return None

    # Request context enrichment for logging and absolute session timeout enforcement
    @app.before_request
    def add_request_context() -> None:
        g.request_id = request.headers.get("X-Request-ID") or os.urandom(8).hex()
        abs_max = app.config.get("ABSOLUTE_SESSION_MAX_AGE_SECONDS")
        if abs_max:
            now = int(datetime.now(timezone.utc).timestamp())
            start = session.get("_login_time")
            if start is None and current_user.is_authenticated:
                session["_login_time"] = now
            elif isinstance(start, int) and now - start > int(abs_max):
                session.clear()

    # Security headers
    @app.after_request
    def set_headers(resp):
        resp.headers.setdefault("X-Request-ID", getattr(g, "request_id", ""))
        return apply_security_headers(resp)

    # Blueprints
    from quillpress.blueprints.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Health route
    @app.get("/health")
    def health():
        try:
            db.session.execute(db.text("SELECT 1"))
            db_ok = "connected"
        except SQLAlchemyError:
            db.session.rollback()
            db_ok = "error"
        return jsonify({"status": "ok", "db": db_ok}), 200

    # Error handlers: every failure uses the response envelope
    @app.errorhandler(ApiError)
    def api_error(e: ApiError):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(CSRFError)
    def csrf_error(e: CSRFError):
        return jsonify({"success": False, "error": e.description}), 400

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        messages = {
            404: "Resource not found",
            405: "Method not allowed",
            413: "Request body too large",
            429: "Too many requests",
        }
        return jsonify({"success": False, "error": messages.get(e.code, e.name)}), e.code

    @app.errorhandler(Exception)
    def server_error(e: Exception):
        db.session.rollback()
        app.logger.exception(f"Unhandled error on {request.method} {request.path}: {e}")
        return jsonify({"success": False, "error": "Server Error"}), 500

    # CLI: create admin user
    @app.cli.command("create-admin")
    @click.option("--name", prompt=True)
    @click.option("--email", prompt=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(name: str, email: str, password: str) -> None:
        from quillpress.errors import Conflict
        from quillpress.services.auth import register_user

        try:
            register_user(name=name, email=email, password=password, role=ROLE_ADMIN)
        except Conflict:
            click.echo("User already exists")
            return
        click.echo("Admin user created")

    # CLI: rebuild denormalized post counts
    @app.cli.command("recount-posts")
    def recount_posts() -> None:
        from quillpress.services.blog import recount_post_counts

        drifted = recount_post_counts()
        if not drifted:
            click.echo("All category post counts are consistent")
            return
        for cat, stored, actual in drifted:
            click.echo(f"{cat.slug}: {stored} -> {actual}")
        click.echo(f"Fixed {len(drifted)} categories")

    return app
