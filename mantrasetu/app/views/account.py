"""Signed-in user pages: dashboard, bookings, profile and enrollments."""
from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, flash, redirect, render_template, request, session, url_for

from mantrasetu.app.forms import (
    validate_cancellation,
    validate_password_change,
    validate_profile,
    validate_reschedule,
    validate_review,
)
from mantrasetu.app.middleware import note_activity
from mantrasetu.app.services import catalog
from mantrasetu.app.services.api_client import ApiError, get_client, pluck
from mantrasetu.app.services.bookings import (
    BOOKING_STATUSES,
    can_cancel,
    can_review,
    filter_by_status,
    recent_bookings,
    upcoming_bookings,
)
from mantrasetu.app.session import USER_KEY, current_user, login_required
from mantrasetu.app.views import error_status, record, records

account_bp = Blueprint("account", __name__)


def _user_bookings() -> tuple[list[dict[str, Any]], ApiError | None]:
    try:
        return records(get_client().users.get_bookings(), "bookings"), None
    except ApiError as exc:
        current_app.logger.warning("Failed to fetch bookings: %s", exc)
        return [], exc


@account_bp.get("/dashboard")
@login_required
def dashboard():
    bookings, failure = _user_bookings()
    if failure is not None:
        flash(failure.message, "error")
    return render_template(
        "account/dashboard.html",
        recent=recent_bookings(bookings),
        upcoming=upcoming_bookings(bookings),
        total=len(bookings),
    )


@account_bp.get("/bookings")
@login_required
def bookings():
    all_bookings, failure = _user_bookings()
    status = HTTPStatus.OK
    if failure is not None:
        flash(failure.message, "error")
        status = error_status(failure)

    selected = (request.args.get("status") or "all").lower()
    return (
        render_template(
            "account/bookings.html",
            bookings=filter_by_status(all_bookings, selected),
            statuses=BOOKING_STATUSES,
            selected=selected,
            can_cancel=can_cancel,
            can_review=can_review,
        ),
        status,
    )


def _fetch_booking(booking_id: str) -> dict[str, Any] | None:
    try:
        return record(get_client().bookings.get(booking_id), "booking")
    except ApiError as exc:
        flash(exc.message, "error")
        return None


@account_bp.post("/bookings/<booking_id>/cancel")
@login_required
def cancel_booking(booking_id: str):
    result = validate_cancellation(request.form)
    if not result.is_valid:
        flash(result.first_error(), "error")
        return redirect(url_for("account.bookings"))

    booking = _fetch_booking(booking_id)
    if booking is None:
        return redirect(url_for("account.bookings"))
    if not can_cancel(booking):
        flash("Only pending or confirmed bookings can be cancelled.", "error")
        return redirect(url_for("account.bookings"))

    try:
        get_client().bookings.cancel(booking_id, result.data["reason"])
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("Booking cancelled successfully.", "success")
    return redirect(url_for("account.bookings"))


@account_bp.post("/bookings/<booking_id>/reschedule")
@login_required
def reschedule_booking(booking_id: str):
    result = validate_reschedule(request.form)
    if not result.is_valid:
        flash(result.first_error(), "error")
        return redirect(url_for("account.bookings"))

    try:
        get_client().bookings.reschedule(booking_id, result.data["newDateTime"])
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("Booking rescheduled successfully.", "success")
    return redirect(url_for("account.bookings"))


@account_bp.post("/bookings/<booking_id>/review")
@login_required
def review_booking(booking_id: str):
    result = validate_review(request.form)
    if not result.is_valid:
        flash(result.first_error(), "error")
        return redirect(url_for("account.bookings"))

    try:
        get_client().bookings.add_review(booking_id, result.data["rating"], result.data["comment"])
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("Thank you for your review!", "success")
    return redirect(url_for("account.bookings"))


@account_bp.route("/profile", methods=["GET", "POST"])
@login_required
def profile():
    client = get_client()
    status = HTTPStatus.OK
    errors: dict = {}

    if request.method == "POST":
        result = validate_profile(request.form)
        errors = result.errors
        if result.is_valid:
            try:
                updated = record(client.users.update_profile(result.data), "user")
            except ApiError as exc:
                flash(exc.message, "error")
                status = error_status(exc)
            else:
                session[USER_KEY] = {**(current_user() or {}), **result.data, **(updated or {})}
                flash("Profile updated successfully.", "success")
                return redirect(url_for("account.profile"))
        else:
            status = HTTPStatus.BAD_REQUEST
        user = {**(current_user() or {}), **result.data}
    else:
        try:
            user = record(client.users.get_profile(), "user") or current_user()
        except ApiError as exc:
            flash(exc.message, "error")
            user = current_user()

    return render_template("account/profile.html", user=user or {}, errors=errors), status


@account_bp.post("/profile/password")
@login_required
def change_password():
    result = validate_password_change(request.form)
    if not result.is_valid:
        flash(result.first_error(), "error")
        return redirect(url_for("account.profile"))

    try:
        get_client().auth.change_password(
            result.data["currentPassword"], result.data["newPassword"]
        )
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("Password changed successfully.", "success")
    return redirect(url_for("account.profile"))


def _enrollment_state() -> tuple[list[dict[str, Any]], list[dict[str, Any]], str | None]:
    client = get_client()
    error = None
    try:
        services = records(client.services.list(), "services")
    except ApiError as exc:
        current_app.logger.warning("Failed to fetch services: %s", exc)
        services = []
        error = "Failed to load services"
    try:
        enrollments = records(client.users.get_enrolled_services(), "enrollments")
    except ApiError as exc:
        current_app.logger.info("No enrollments available: %s", exc)
        enrollments = []
    return services, enrollments, error


def _active_service_ids(enrollments: list[dict[str, Any]]) -> set[str]:
    return {
        str(item.get("serviceId"))
        for item in enrollments
        if (item.get("status") or "").lower() == "active"
    }


@account_bp.get("/service-enrollment")
@login_required
def enrollment():
    services, enrollments, error = _enrollment_state()
    if error:
        flash(error, "error")
    category = request.args.get("category") or "all"
    query = request.args.get("q") or ""
    available = catalog.filter_services(
        services, category, query, exclude_ids=_active_service_ids(enrollments)
    )
    return render_template(
        "account/enrollment.html",
        services=available,
        enrollments=enrollments,
        categories=catalog.CATEGORY_FILTERS,
        category=category,
        query=query,
    )


@account_bp.post("/service-enrollment/enroll")
@login_required
def enroll():
    service_id = (request.form.get("serviceId") or "").strip()
    if not service_id:
        flash("Please choose a service to enroll in.", "error")
        return redirect(url_for("account.enrollment"))

    services, enrollments, _ = _enrollment_state()
    if service_id in _active_service_ids(enrollments):
        flash("You are already enrolled in this service.", "info")
        return redirect(url_for("account.enrollment"))

    service = next((item for item in services if str(item.get("id")) == service_id), {})
    preferences = {
        "preferredLanguage": request.form.get("preferredLanguage") or "en",
        "virtualOrInPerson": request.form.get("virtualOrInPerson")
        or ("virtual" if service.get("isVirtual") else "in-person"),
    }
    for key in ("preferredTimeSlot", "specialRequirements"):
        value = (request.form.get(key) or "").strip()
        if value:
            preferences[key] = value

    try:
        response = get_client().users.enroll_in_service(service_id, preferences)
    except ApiError as exc:
        flash(exc.message, "error")
        return redirect(url_for("account.enrollment"))

    note_activity(
        pluck(response, "enrollmentId") or service_id,
        f"Enrolled in service {service_id}.",
    )
    flash(f"Successfully enrolled in {service.get('name') or 'the service'}!", "success")
    return redirect(url_for("account.enrollment"))


@account_bp.post("/service-enrollment/<enrollment_id>/unenroll")
@login_required
def unenroll(enrollment_id: str):
    name = request.form.get("serviceName") or "the service"
    try:
        get_client().users.unenroll_from_service(enrollment_id)
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash(f'Successfully unenrolled from "{name}"', "success")
    return redirect(url_for("account.enrollment"))
