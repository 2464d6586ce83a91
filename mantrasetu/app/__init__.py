"""Application factory for the MantraSetu web client."""
from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Mapping

from flask import Flask, flash, redirect, render_template, request, url_for
from flask_cors import CORS

from mantrasetu.config import get_config
from mantrasetu.extensions import backend, db, migrate
from mantrasetu.app.i18n import LANGUAGES, active_language, translate
from mantrasetu.app.middleware import register_activity_middleware
from mantrasetu.app.services.api_client import SessionExpiredError
from mantrasetu.app.session import (
    ADMIN_ROLES,
    current_role,
    current_user,
    end_session,
    register_session_hooks,
)
from mantrasetu.app.theme import THEME, status_color


def create_app(config_name: str | None = None, overrides: Mapping[str, Any] | None = None) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)
    config_cls = get_config(config_name or app.config.get("ENV"))
    app.config.from_object(config_cls)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    register_extensions(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_template_context(app)
    register_session_hooks(app)
    register_activity_middleware(app)

    CORS(app, resources={r"/api/*": {"origins": "*"}})
    return app


def register_extensions(app: Flask) -> None:
    """Initialize Flask extensions."""

    db.init_app(app)
    migrate.init_app(app, db)
    backend.init_app(app)


def register_blueprints(app: Flask) -> None:
    """Register application blueprints."""

    from mantrasetu.app.api import api_bp
    from mantrasetu.app.views.account import account_bp
    from mantrasetu.app.views.admin import admin_bp
    from mantrasetu.app.views.auth import auth_bp
    from mantrasetu.app.views.booking import booking_bp
    from mantrasetu.app.views.pandit import pandit_bp
    from mantrasetu.app.views.public import public_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(pandit_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")


def register_error_handlers(app: Flask) -> None:
    """Render friendly pages for common failures."""

    @app.errorhandler(SessionExpiredError)
    def _session_expired(exc: SessionExpiredError):
        end_session()
        flash(exc.message, "error")
        return redirect(url_for("auth.login", next=request.full_path.rstrip("?")))

    @app.errorhandler(HTTPStatus.FORBIDDEN)
    def _forbidden(_exc):
        return render_template("errors/403.html"), HTTPStatus.FORBIDDEN

    @app.errorhandler(HTTPStatus.NOT_FOUND)
    def _not_found(_exc):
        return render_template("errors/404.html"), HTTPStatus.NOT_FOUND


def register_template_context(app: Flask) -> None:
    @app.context_processor
    def _inject_globals() -> dict[str, Any]:
        role = current_role()
        return {
            "t": translate,
            "THEME": THEME,
            "LANGUAGES": LANGUAGES,
            "current_language": active_language(),
            "current_user": current_user(),
            "is_admin": role in ADMIN_ROLES,
            "is_pandit": role == "PANDIT",
        }

    app.jinja_env.filters["status_color"] = status_color
    app.jinja_env.filters["rupees"] = _format_rupees


def _format_rupees(value: Any) -> str:
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        return "₹0"
    if amount.is_integer():
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"
