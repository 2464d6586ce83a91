"""Pandit onboarding and the pandit's own dashboards."""
from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from werkzeug.datastructures import FileStorage

from mantrasetu.app.forms import password_strength, validate_pandit_onboarding
from mantrasetu.app.middleware import note_activity
from mantrasetu.app.services import catalog
from mantrasetu.app.services.api_client import ApiError, get_client
from mantrasetu.app.services.bookings import (
    BOOKING_STATUSES,
    EARNING_PERIODS,
    InvalidTransitionError,
    allowed_transitions,
    ensure_transition,
    filter_by_status,
    group_for_pandit,
    summarize_earnings,
)
from mantrasetu.app.session import PANDIT_ROLES, current_user, role_required
from mantrasetu.app.views import error_status, records

pandit_bp = Blueprint("pandit", __name__)

REGISTRATION_NOTICE = (
    "Registration successful! Please wait while we verify your details. "
    "You will receive an email confirmation once your profile is approved."
)
SINGLE_DOCUMENTS = ("certificate", "idProof", "photo")


def _upload(field_name: str, storage: FileStorage) -> tuple[str, tuple[str, bytes, str]]:
    return (
        field_name,
        (
            storage.filename or field_name,
            storage.read(),
            storage.mimetype or "application/octet-stream",
        ),
    )


def _collect_documents() -> list[tuple[str, tuple[str, bytes, str]]]:
    """Gather the optional verification documents in submission order."""

    files: list[tuple[str, tuple[str, bytes, str]]] = []
    for field_name in SINGLE_DOCUMENTS:
        storage = request.files.get(field_name)
        if storage is not None and storage.filename:
            files.append(_upload(field_name, storage))
    for storage in request.files.getlist("gallery"):
        if storage.filename:
            files.append(_upload("gallery", storage))
    return files


def _onboarding_context(form: dict[str, Any], errors: dict[str, str]) -> dict[str, Any]:
    return {
        "form": form,
        "errors": errors,
        "languages": catalog.PANDIT_LANGUAGES,
        "specializations": catalog.PANDIT_SPECIALIZATIONS,
        "service_areas": catalog.PANDIT_SERVICE_AREAS,
        "genders": catalog.GENDERS,
        "availability_modes": catalog.AVAILABILITY_MODES,
        "selected": {
            "languagesSpoken": request.form.getlist("languagesSpoken"),
            "specialization": request.form.getlist("specialization"),
            "serviceAreas": request.form.getlist("serviceAreas"),
            "achievements": [item for item in request.form.getlist("achievements") if item.strip()],
        },
    }


@pandit_bp.route("/pandit-onboarding", methods=["GET", "POST"])
def onboarding():
    if request.method == "GET":
        return render_template("pandit/onboarding.html", strength=None, **_onboarding_context({}, {}))

    result = validate_pandit_onboarding(request.form)
    visible = {key: value for key, value in result.data.items() if key != "password"}
    password = result.data.get("password") or ""
    strength = password_strength(password) if password else None

    if not result.is_valid:
        flash(result.first_error(), "error")
        return (
            render_template(
                "pandit/onboarding.html",
                strength=strength,
                **_onboarding_context(visible, result.errors),
            ),
            HTTPStatus.BAD_REQUEST,
        )

    try:
        get_client().pandits.register(result.data, _collect_documents())
    except ApiError as exc:
        current_app.logger.warning("Pandit registration failed for %s: %s", result.data["email"], exc)
        flash(exc.message, "error")
        return (
            render_template(
                "pandit/onboarding.html",
                strength=strength,
                **_onboarding_context(visible, {}),
            ),
            error_status(exc),
        )

    note_activity(
        description=f"Pandit application submitted for {result.data['email']}.",
        email=result.data["email"],
        role="PANDIT",
    )
    flash(REGISTRATION_NOTICE, "success")
    return redirect(url_for("auth.login"))


def _pandit_bookings() -> tuple[list[dict[str, Any]], ApiError | None]:
    try:
        return records(get_client().pandits.bookings(), "bookings"), None
    except ApiError as exc:
        current_app.logger.warning("Failed to fetch pandit bookings: %s", exc)
        return [], exc


@pandit_bp.get("/pandit/dashboard")
@role_required(*PANDIT_ROLES)
def dashboard():
    bookings, failure = _pandit_bookings()
    if failure is not None:
        flash(failure.message, "error")
    groups = group_for_pandit(bookings)
    return render_template("pandit/dashboard.html", groups=groups, user=current_user())


@pandit_bp.get("/pandit/bookings")
@role_required(*PANDIT_ROLES)
def bookings():
    selected = (request.args.get("status") or "all").lower()
    all_bookings, failure = _pandit_bookings()
    status = HTTPStatus.OK
    if failure is not None:
        flash(failure.message, "error")
        status = error_status(failure)
    return (
        render_template(
            "pandit/bookings.html",
            bookings=filter_by_status(all_bookings, selected),
            statuses=BOOKING_STATUSES,
            selected=selected,
            allowed_transitions=allowed_transitions,
        ),
        status,
    )


@pandit_bp.post("/pandit/bookings/<booking_id>/status")
@role_required(*PANDIT_ROLES)
def update_booking_status(booking_id: str):
    try:
        target = ensure_transition(request.form.get("currentStatus"), request.form.get("status"))
    except InvalidTransitionError as exc:
        flash(str(exc), "error")
        return redirect(url_for("pandit.bookings"))

    try:
        get_client().pandits.update_booking_status(booking_id, target)
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash(f"Booking marked as {target.replace('_', ' ').lower()}.", "success")
    return redirect(url_for("pandit.bookings"))


@pandit_bp.get("/pandit/earnings")
@role_required(*PANDIT_ROLES)
def earnings():
    period = request.args.get("period") or "month"
    status = HTTPStatus.OK
    if period not in {option["value"] for option in EARNING_PERIODS}:
        flash("Unknown period; showing this month.", "error")
        period = "month"
        status = HTTPStatus.BAD_REQUEST

    all_bookings, failure = _pandit_bookings()
    if failure is not None:
        flash(failure.message, "error")
        status = error_status(failure)

    return (
        render_template(
            "pandit/earnings.html",
            summary=summarize_earnings(all_bookings, period),
            periods=EARNING_PERIODS,
        ),
        status,
    )
