"""Application middleware utilities such as activity logging."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any

from flask import Flask, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from mantrasetu.app.models import ActivityLog
from mantrasetu.app.session import current_user
from mantrasetu.extensions import db


@dataclass(slots=True)
class _ActivityConfig:
    action: str
    entity_type: str


SIGNIFICANT_ACTIONS: dict[tuple[str, str], _ActivityConfig] = {
    ("POST", "auth.login"): _ActivityConfig(action="auth.login", entity_type="user"),
    ("POST", "auth.register"): _ActivityConfig(action="auth.register", entity_type="user"),
    ("POST", "booking.details"): _ActivityConfig(action="booking.created", entity_type="booking"),
    ("POST", "booking.complete_payment"): _ActivityConfig(
        action="payment.completed",
        entity_type="payment",
    ),
    ("POST", "pandit.onboarding"): _ActivityConfig(
        action="pandit.onboarded",
        entity_type="pandit",
    ),
    ("POST", "account.enroll"): _ActivityConfig(
        action="enrollment.created",
        entity_type="enrollment",
    ),
}


def note_activity(entity_id: Any = None, description: str | None = None, **extra: Any) -> None:
    """Mark the current significant action as completed.

    Only requests whose view calls this are logged, so validation failures and
    backend rejections that still answer with a redirect are skipped.
    """

    context: dict[str, Any] | None = getattr(g, "activity_context", None)
    if not context:
        return
    context["completed"] = True
    if entity_id is not None:
        context["entity_id"] = str(entity_id)
    if description:
        context["description"] = description
    for key in ("email", "role"):
        if extra.get(key):
            context[key] = extra[key]


def register_activity_middleware(app: Flask) -> None:
    """Attach middleware that records significant visitor actions."""

    @app.before_request
    def _capture_activity_context() -> None:
        method = request.method.upper()
        config = SIGNIFICANT_ACTIONS.get((method, request.endpoint or ""))
        if not config:
            g.activity_context = None
            return

        g.activity_context = {
            "config": config,
            "method": method,
            "path": _normalize_path(request.path),
            "request_bytes": request.get_data(cache=True) or b"",
            "completed": False,
            "entity_id": None,
            "description": None,
        }

    @app.after_request
    def _persist_activity_log(response):
        context: dict[str, Any] | None = getattr(g, "activity_context", None)
        if not context or not context["completed"]:
            return response

        if response.status_code >= 400:
            return response

        config: _ActivityConfig = context["config"]
        user = current_user() or {}
        entity_id = context.get("entity_id")
        if entity_id is None and config.entity_type == "user" and user.get("id"):
            entity_id = str(user["id"])

        email = context.get("email") or user.get("email")
        activity = ActivityLog(
            user_ref=str(user["id"]) if user.get("id") else None,
            email=email,
            role=context.get("role") or user.get("role"),
            entity_type=config.entity_type,
            entity_id=entity_id,
            action=config.action,
            description=context.get("description")
            or _default_description(config.action, email, entity_id),
            method=context["method"],
            path=context["path"],
            request_hash=_hash_request(
                context["method"], context["path"], context["request_bytes"]
            ),
            response_hash=_hash_response(response),
        )

        db.session.add(activity)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Failed to persist activity log entry")

        return response


def _normalize_path(path: str) -> str:
    if path != "/" and path.endswith("/"):
        return path[:-1]
    return path


def _default_description(action: str, email: str | None, entity_id: str | None) -> str | None:
    if action == "auth.login" and email:
        return f"User {email} signed in."
    if action == "auth.register" and email:
        return f"User {email} registered."
    if action == "booking.created" and entity_id:
        return f"Booking {entity_id} created."
    if action == "payment.completed" and entity_id:
        return f"Payment {entity_id} completed."
    if action == "pandit.onboarded" and email:
        return f"Pandit application submitted for {email}."
    if action == "enrollment.created" and entity_id:
        return f"Enrolled in service {entity_id}."
    return None


def _hash_request(method: str, path: str, body: bytes) -> str:
    payload = f"{method}\n{path}\n".encode("utf-8") + body
    return hashlib.sha256(payload).hexdigest()


def _hash_response(response) -> str:
    body = b"" if response.direct_passthrough else response.get_data()
    payload = f"{response.status_code}\n".encode("utf-8") + body
    return hashlib.sha256(payload).hexdigest()
