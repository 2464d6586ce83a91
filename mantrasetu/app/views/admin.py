"""Administrator console backed by the ``/admin`` endpoints."""
from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from mantrasetu.app.forms import validate_service
from mantrasetu.app.services import catalog
from mantrasetu.app.services.api_client import ApiError, get_client
from mantrasetu.app.session import ADMIN_ROLES, is_safe_next, role_required
from mantrasetu.app.views import error_status, record, records

admin_bp = Blueprint("admin", __name__)

USER_ROLES = ("USER", "PANDIT", "ADMIN", "SUPER_ADMIN")
ACTIVITY_FILTERS = ("all", "active", "inactive")
VERIFICATION_FILTERS = ("all", "verified", "pending")


@admin_bp.before_request
@role_required(*ADMIN_ROLES)
def _require_admin():
    return None


def _filter_args(*names: str) -> dict[str, str]:
    return {name: (request.args.get(name) or "").strip() for name in names}


def _matches_activity(item: dict[str, Any], status: str) -> bool:
    if status == "active":
        return bool(item.get("isActive", True))
    if status == "inactive":
        return not item.get("isActive", True)
    return True


# ---------------------------------------------------------------------------
# Dashboard and analytics
# ---------------------------------------------------------------------------


@admin_bp.get("/dashboard")
def dashboard():
    client = get_client()
    try:
        stats = record(client.admin.dashboard_stats(), "stats") or {}
    except ApiError as exc:
        flash(exc.message, "error")
        return render_template("admin/dashboard.html", stats={}, service_stats={}), error_status(exc)

    try:
        service_stats = record(client.admin.service_stats(), "stats") or {}
    except ApiError as exc:
        current_app.logger.info("Service stats unavailable: %s", exc)
        service_stats = {}
    return render_template("admin/dashboard.html", stats=stats, service_stats=service_stats)


@admin_bp.get("/analytics")
def analytics():
    try:
        data = record(get_client().admin.analytics(), "analytics") or {}
    except ApiError as exc:
        flash(exc.message, "error")
        return render_template("admin/analytics.html", analytics={}), error_status(exc)
    return render_template("admin/analytics.html", analytics=data)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@admin_bp.get("/users")
def users():
    filters = _filter_args("search", "role", "status")
    params: dict[str, Any] = {"search": filters["search"] or None}
    if filters["role"] in USER_ROLES:
        params["role"] = filters["role"]
    if filters["status"] in ("active", "inactive"):
        params["isActive"] = filters["status"] == "active"

    status = HTTPStatus.OK
    try:
        listed = records(get_client().admin.users(params), "users")
    except ApiError as exc:
        flash(exc.message, "error")
        listed, status = [], error_status(exc)

    listed = [item for item in listed if _matches_activity(item, filters["status"])]
    return (
        render_template(
            "admin/users.html",
            users=listed,
            filters=filters,
            roles=USER_ROLES,
            statuses=ACTIVITY_FILTERS,
            protected_roles=ADMIN_ROLES,
        ),
        status,
    )


@admin_bp.get("/users/<user_id>")
def user_detail(user_id: str):
    try:
        user = record(get_client().admin.user(user_id), "user")
    except ApiError as exc:
        flash(exc.message, "error")
        return redirect(url_for("admin.users"))
    if user is None:
        flash("User not found", "error")
        return redirect(url_for("admin.users"))
    return render_template("admin/user_detail.html", user=user, protected_roles=ADMIN_ROLES)


def _modifiable_user(user_id: str) -> dict[str, Any] | None:
    """Fetch a user and refuse administrator accounts."""

    try:
        user = record(get_client().admin.user(user_id), "user")
    except ApiError as exc:
        flash(exc.message, "error")
        return None
    if user is None:
        flash("User not found", "error")
        return None
    if (user.get("role") or "").upper() in ADMIN_ROLES:
        flash("Administrator accounts cannot be modified here.", "error")
        return None
    return user


@admin_bp.post("/users/<user_id>/toggle")
def toggle_user(user_id: str):
    user = _modifiable_user(user_id)
    if user is None:
        return redirect(url_for("admin.users"))

    activate = not user.get("isActive", True)
    try:
        get_client().admin.update_user_status(user_id, activate)
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash(f"User {'activated' if activate else 'deactivated'} successfully.", "success")
    return redirect(url_for("admin.users"))


@admin_bp.post("/users/<user_id>/delete")
def delete_user(user_id: str):
    user = _modifiable_user(user_id)
    if user is None:
        return redirect(url_for("admin.users"))

    try:
        get_client().admin.delete_user(user_id)
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("User deleted successfully.", "success")
    return redirect(url_for("admin.users"))


# ---------------------------------------------------------------------------
# Pandits
# ---------------------------------------------------------------------------


@admin_bp.get("/pandits")
def pandits():
    filters = _filter_args("search", "verification", "status")
    params: dict[str, Any] = {"search": filters["search"] or None}
    if filters["verification"] in ("verified", "pending"):
        params["isVerified"] = filters["verification"] == "verified"

    status = HTTPStatus.OK
    try:
        listed = records(get_client().admin.pandits(params), "pandits")
    except ApiError as exc:
        flash(exc.message, "error")
        listed, status = [], error_status(exc)

    if filters["verification"] == "verified":
        listed = [item for item in listed if item.get("isVerified")]
    elif filters["verification"] == "pending":
        listed = [item for item in listed if not item.get("isVerified")]
    listed = [item for item in listed if _matches_activity(item, filters["status"])]

    return (
        render_template(
            "admin/pandits.html",
            pandits=listed,
            filters=filters,
            verifications=VERIFICATION_FILTERS,
            statuses=ACTIVITY_FILTERS,
        ),
        status,
    )


@admin_bp.get("/pandits/<pandit_id>")
def pandit_detail(pandit_id: str):
    client = get_client()
    try:
        pandit = record(client.admin.pandit(pandit_id), "pandit")
    except ApiError as exc:
        flash(exc.message, "error")
        return redirect(url_for("admin.pandits"))
    if pandit is None:
        flash("Pandit not found", "error")
        return redirect(url_for("admin.pandits"))

    try:
        performance = record(client.admin.pandit_performance(pandit_id), "performance") or {}
    except ApiError as exc:
        current_app.logger.info("Performance unavailable for pandit %s: %s", pandit_id, exc)
        performance = {}
    return render_template("admin/pandit_detail.html", pandit=pandit, performance=performance)


def _back_to_pandits():
    target = request.form.get("next")
    return redirect(target if is_safe_next(target) else url_for("admin.pandits"))


@admin_bp.post("/pandits/<pandit_id>/verify")
def verify_pandit(pandit_id: str):
    try:
        get_client().admin.verify_pandit(pandit_id)
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("Pandit verified successfully.", "success")
    return _back_to_pandits()


@admin_bp.post("/pandits/<pandit_id>/unverify")
def unverify_pandit(pandit_id: str):
    try:
        get_client().admin.unverify_pandit(pandit_id)
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("Pandit verification revoked.", "success")
    return _back_to_pandits()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@admin_bp.get("/services")
def services():
    filters = _filter_args("q", "category", "status")
    category = filters["category"] or "all"

    status = HTTPStatus.OK
    try:
        listed = records(get_client().admin.services(), "services")
    except ApiError as exc:
        flash(exc.message, "error")
        listed, status = [], error_status(exc)

    listed = catalog.filter_services(listed, category, filters["q"])
    listed = [item for item in listed if _matches_activity(item, filters["status"])]
    return (
        render_template(
            "admin/services.html",
            services=listed,
            filters=filters,
            categories=catalog.CATEGORY_FILTERS,
            statuses=ACTIVITY_FILTERS,
            category_label=catalog.category_label,
        ),
        status,
    )


def _service_form(service: dict[str, Any], errors: dict[str, str], service_id: str | None):
    return render_template(
        "admin/service_form.html",
        service=service,
        errors=errors,
        service_id=service_id,
        categories=catalog.SERVICE_CATEGORIES,
        category_label=catalog.category_label,
    )


@admin_bp.route("/services/new", methods=["GET", "POST"])
def create_service():
    if request.method == "GET":
        return _service_form({"category": "POOJA", "durationMinutes": 60, "isActive": True}, {}, None)

    result = validate_service(request.form)
    if not result.is_valid:
        flash(result.first_error(), "error")
        return _service_form(result.data, result.errors, None), HTTPStatus.BAD_REQUEST

    try:
        get_client().admin.create_service(result.data)
    except ApiError as exc:
        flash(exc.message, "error")
        return _service_form(result.data, {}, None), error_status(exc)

    flash(f"Service \"{result.data['name']}\" created.", "success")
    return redirect(url_for("admin.services"))


@admin_bp.route("/services/<service_id>/edit", methods=["GET", "POST"])
def edit_service(service_id: str):
    client = get_client()
    if request.method == "GET":
        try:
            service = record(client.admin.service(service_id), "service")
        except ApiError as exc:
            flash(exc.message, "error")
            return redirect(url_for("admin.services"))
        if service is None:
            flash("Service not found", "error")
            return redirect(url_for("admin.services"))
        return _service_form(service, {}, service_id)

    result = validate_service(request.form)
    if not result.is_valid:
        flash(result.first_error(), "error")
        return _service_form(result.data, result.errors, service_id), HTTPStatus.BAD_REQUEST

    try:
        client.admin.update_service(service_id, result.data)
    except ApiError as exc:
        flash(exc.message, "error")
        return _service_form(result.data, {}, service_id), error_status(exc)

    flash(f"Service \"{result.data['name']}\" updated.", "success")
    return redirect(url_for("admin.services"))


@admin_bp.post("/services/<service_id>/toggle")
def toggle_service(service_id: str):
    client = get_client()
    try:
        service = record(client.admin.service(service_id), "service")
        if service is None:
            flash("Service not found", "error")
            return redirect(url_for("admin.services"))
        activate = not service.get("isActive", True)
        client.admin.update_service(service_id, {"isActive": activate})
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash(f"Service {'activated' if activate else 'deactivated'}.", "success")
    return redirect(url_for("admin.services"))


@admin_bp.post("/services/<service_id>/delete")
def delete_service(service_id: str):
    try:
        get_client().admin.delete_service(service_id)
    except ApiError as exc:
        flash(exc.message, "error")
    else:
        flash("Service deleted successfully.", "success")
    return redirect(url_for("admin.services"))
