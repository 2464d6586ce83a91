"""Visitor session state and access control."""
from __future__ import annotations

from functools import wraps
from http import HTTPStatus
from typing import Any, Callable, TypeVar
from urllib.parse import urlsplit

from flask import Flask, abort, current_app, redirect, request, session, url_for

from mantrasetu.app.services.api_client import (
    SESSION_REFRESH_KEY,
    SESSION_TOKEN_KEY,
    ApiError,
    SessionExpiredError,
    get_client,
    unwrap,
)

USER_KEY = "user"
LANGUAGE_KEY = "language"
BOOKING_DRAFT_KEY = "booking_draft"

ADMIN_ROLES = ("ADMIN", "SUPER_ADMIN")
PANDIT_ROLES = ("PANDIT",)
UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

F = TypeVar("F", bound=Callable[..., Any])


def current_user() -> dict[str, Any] | None:
    user = session.get(USER_KEY)
    if user and session.get(SESSION_TOKEN_KEY):
        return user
    return None


def current_role() -> str | None:
    user = current_user()
    if not user:
        return None
    return (user.get("role") or "USER").upper()


def start_session(payload: Any) -> dict[str, Any]:
    """Store the tokens and user from a login or registration response."""

    data = unwrap(payload) or {}
    if not isinstance(data, dict):
        raise ApiError("Unexpected response from the authentication service.")
    token = data.get("accessToken") or data.get("token")
    user = data.get("user")
    if not token or not isinstance(user, dict):
        raise ApiError("Unexpected response from the authentication service.")

    session[SESSION_TOKEN_KEY] = token
    if data.get("refreshToken"):
        session[SESSION_REFRESH_KEY] = data["refreshToken"]
    session[USER_KEY] = user
    session.permanent = True
    return user


def end_session() -> None:
    language = session.get(LANGUAGE_KEY)
    session.clear()
    if language:
        session[LANGUAGE_KEY] = language


def dashboard_endpoint(role: str | None) -> str:
    normalized = (role or "").upper()
    if normalized in ADMIN_ROLES:
        return "admin.dashboard"
    if normalized in PANDIT_ROLES:
        return "pandit.dashboard"
    return "account.dashboard"


def is_safe_next(target: str | None) -> bool:
    """Only allow redirects to local absolute paths."""

    if not target or not target.startswith("/") or target.startswith("//"):
        return False
    parts = urlsplit(target)
    return not parts.scheme and not parts.netloc


def login_required(view: F) -> F:
    @wraps(view)
    def wrapped(*args: Any, **kwargs: Any):
        if current_user() is None:
            return redirect(url_for("auth.login", next=request.full_path.rstrip("?")))
        return view(*args, **kwargs)

    return wrapped  # type: ignore[return-value]


def role_required(*roles: str) -> Callable[[F], F]:
    """Require an authenticated user holding one of ``roles``."""

    allowed = {role.upper() for role in roles}

    def decorator(view: F) -> F:
        @wraps(view)
        def wrapped(*args: Any, **kwargs: Any):
            if current_user() is None:
                return redirect(url_for("auth.login", next=request.full_path.rstrip("?")))
            if current_role() not in allowed:
                abort(403)
            return view(*args, **kwargs)

        return wrapped  # type: ignore[return-value]

    return decorator


def register_session_hooks(app: Flask) -> None:
    """Reject cross-site form posts and load the profile for token-only sessions."""

    @app.before_request
    def _reject_cross_site_posts() -> None:
        if request.method not in UNSAFE_METHODS or not session:
            return
        origin = request.headers.get("Origin") or request.headers.get("Referer")
        if origin and urlsplit(origin).netloc != request.host:
            current_app.logger.warning(
                "Rejected cross-site %s to %s from %s", request.method, request.path, origin
            )
            abort(HTTPStatus.FORBIDDEN)

    @app.before_request
    def _load_session_user() -> None:
        if request.endpoint in (None, "static"):
            return
        if not session.get(SESSION_TOKEN_KEY) or session.get(USER_KEY):
            return
        try:
            profile = unwrap(get_client().users.get_profile())
        except SessionExpiredError:
            end_session()
            return
        except ApiError as exc:
            current_app.logger.warning("Could not load the session user: %s", exc)
            return
        if isinstance(profile, dict) and profile.get("user"):
            profile = profile["user"]
        if isinstance(profile, dict):
            session[USER_KEY] = profile
