"""Login, registration and logout pages."""
from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from mantrasetu.app.forms import password_strength, validate_login, validate_registration
from mantrasetu.app.middleware import note_activity
from mantrasetu.app.services.api_client import ApiError, SessionExpiredError, get_client
from mantrasetu.app.session import (
    current_role,
    current_user,
    dashboard_endpoint,
    end_session,
    is_safe_next,
    start_session,
)
from mantrasetu.app.views import error_status

auth_bp = Blueprint("auth", __name__)


def _redirect_after_login(role: str | None):
    target = request.values.get("next")
    if is_safe_next(target):
        return redirect(target)
    return redirect(url_for(dashboard_endpoint(role)))


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user() is not None:
        return redirect(url_for(dashboard_endpoint(current_role())))

    form_data: dict = {}
    errors: dict = {}
    status = HTTPStatus.OK

    if request.method == "POST":
        result = validate_login(request.form)
        form_data = {"email": result.data["email"]}
        errors = result.errors
        if result.is_valid:
            try:
                user = start_session(
                    get_client().auth.login(result.data["email"], result.data["password"])
                )
            except ApiError as exc:
                current_app.logger.info("Login rejected for %s: %s", result.data["email"], exc)
                flash(exc.message, "error")
                status = error_status(exc)
            else:
                note_activity(user.get("id"), email=user.get("email"), role=user.get("role"))
                flash("Login successful!", "success")
                return _redirect_after_login(user.get("role"))
        else:
            status = HTTPStatus.BAD_REQUEST

    return (
        render_template(
            "auth/login.html",
            form=form_data,
            errors=errors,
            next=request.values.get("next", ""),
        ),
        status,
    )


@auth_bp.route("/register", methods=["GET", "POST"])
def register():
    if current_user() is not None:
        return redirect(url_for(dashboard_endpoint(current_role())))

    form_data: dict = {}
    errors: dict = {}
    strength = None
    status = HTTPStatus.OK

    if request.method == "POST":
        result = validate_registration(request.form)
        form_data = {key: value for key, value in result.data.items() if key != "password"}
        errors = result.errors
        strength = password_strength(result.data["password"]) if result.data["password"] else None
        if result.is_valid:
            try:
                user = start_session(get_client().auth.register(result.data))
            except ApiError as exc:
                flash(exc.message, "error")
                status = error_status(exc)
            else:
                note_activity(user.get("id"), email=user.get("email"), role=user.get("role"))
                flash("Registration successful! Welcome to MantraSetu!", "success")
                return redirect(url_for(dashboard_endpoint(user.get("role"))))
        else:
            status = HTTPStatus.BAD_REQUEST

    return (
        render_template("auth/register.html", form=form_data, errors=errors, strength=strength),
        status,
    )


@auth_bp.post("/logout")
def logout():
    if current_user() is not None:
        try:
            get_client().auth.logout()
        except (ApiError, SessionExpiredError) as exc:
            current_app.logger.info("Backend logout failed: %s", exc)
    end_session()
    flash("You have been logged out.", "info")
    return redirect(url_for("public.index"))
