from __future__ import annotations

import logging
import os
from datetime import timedelta
from typing import Any, Dict

import click
from flask import Flask, g, jsonify, request

from virtualmark.config import Config
from virtualmark.extensions import (
    db,
    migrate,
    login_manager,
    csrf,
    limiter,
)
from virtualmark.logging_config import configure_logging
from virtualmark.models.user import User  # ensure models imported for migrations
from virtualmark.security import apply_security_headers
from virtualmark.store.base import ContentStore


def create_app(config_overrides: Dict[str, Any] | None = None, store: ContentStore | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    # Load config
    app.config.from_object(Config())
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(logging.DEBUG if app.config.get("DEBUG") else logging.INFO)

    app.permanent_session_lifetime = timedelta(minutes=app.config.get("SESSION_LIFETIME_MINUTES", 30))
    app.config["REMEMBER_COOKIE_DURATION"] = timedelta(days=app.config.get("REMEMBER_COOKIE_DAYS", 14))
    app.config["REMEMBER_COOKIE_HTTPONLY"] = True
    app.config["REMEMBER_COOKIE_SAMESITE"] = app.config.get("SESSION_COOKIE_SAMESITE", "Strict")

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    with app.app_context():
        from virtualmark.utils.admin_setup import ensure_admin_user
        ensure_admin_user()

    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        from virtualmark.repositories.user import get_user_by_id
        try:
            return get_user_by_id(int(user_id))
        except ValueError:
            return None

    # Content repositories, one per content kind, shared by every request
    from virtualmark.content import init_content
    from virtualmark.store.sql import SQLContentStore
    init_content(app, store or SQLContentStore())

    @app.before_request
    def add_request_context() -> None:
        g.request_id = request.headers.get("X-Request-ID") or os.urandom(8).hex()

    # Security headers
    @app.after_request
    def set_headers(resp):
        return apply_security_headers(resp)

    # Blueprints
    from virtualmark.blueprints.admin import bp as admin_bp
    from virtualmark.blueprints.auth import bp as auth_bp
    from virtualmark.blueprints.errors import register_error_handlers
    from virtualmark.blueprints.public import bp as public_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(public_bp, url_prefix="/api")
    register_error_handlers(app)

    # Health route
    @app.get("/health")
    def health():
        try:
            db.session.execute(db.text("SELECT 1"))
            db_ok = "connected"
        except Exception:
            db_ok = "error"
        return jsonify({"status": "ok", "db": db_ok}), 200

    register_cli(app)
    return app


def register_cli(app: Flask) -> None:
    @app.cli.command("create-admin")
    @click.option("--username", prompt=True)
    @click.option("--email", default="")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(username: str, email: str, password: str) -> None:
        from virtualmark.repositories.user import create_user, get_user_by_username
        from virtualmark.utils.crypto import hash_password

        if get_user_by_username(username):
            click.echo("User already exists")
            return
        create_user(username, hash_password(password), email=email, is_admin=True)
        click.echo("Admin user created")

    @app.cli.command("content-stats")
    def content_stats() -> None:
        """Print dashboard counts for posts and case studies."""
        from virtualmark.content import get_content

        for kind, stats in get_content().dashboard().items():
            click.echo(
                f"{kind}: {stats['total']} total, {stats['published']} published, "
                f"{stats['draft']} draft, {stats['featured']} featured"
            )
