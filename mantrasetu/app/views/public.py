"""Public pages: homepage, catalog, pandit profiles, contact and almanac."""
from __future__ import annotations

from http import HTTPStatus

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from mantrasetu.app.forms import validate_contact
from mantrasetu.app.i18n import is_supported
from mantrasetu.app.services import catalog
from mantrasetu.app.services.almanac import (
    CEREMONY_TYPES,
    DAILY_MUHURATS,
    DEFAULT_LOCATION,
    UnknownCeremonyError,
    find_muhurats,
    panchang_for,
    parse_date,
)
from mantrasetu.app.services.api_client import ApiError, get_client
from mantrasetu.app.services.homepage import find_featured_pandit, load_homepage, transform_pandit
from mantrasetu.app.session import LANGUAGE_KEY, is_safe_next
from mantrasetu.app.views import error_status, record, records

public_bp = Blueprint("public", __name__)


@public_bp.get("/")
def index() -> str:
    result = load_homepage(get_client())
    special_pujas = [puja for puja in catalog.PUJA_CATALOG if puja.id.startswith("seed-puja")]
    return render_template(
        "public/home.html",
        content=result.content,
        error=result.error,
        special_pujas=special_pujas,
    )


@public_bp.get("/services")
def services() -> str:
    """List services from the backend, falling back to the local catalog."""

    client = get_client()
    services_error = None
    try:
        available = records(client.services.list(), "services")
    except ApiError as exc:
        current_app.logger.warning("Failed to fetch services: %s", exc)
        services_error = "Failed to load services"
        available = []
    if not available:
        available = catalog.fallback_services()

    category = request.args.get("category") or "all"
    query = request.args.get("q") or ""

    selected_pandit = None
    pandit_id = request.args.get("pandit")
    if pandit_id:
        selected_pandit = find_featured_pandit(load_homepage(client).content, pandit_id)

    return render_template(
        "public/services.html",
        services=catalog.filter_services(available, category, query),
        counts=catalog.service_counts(available),
        categories=catalog.CATEGORY_FILTERS,
        category=category,
        query=query,
        services_error=services_error,
        selected_pandit=selected_pandit,
        category_icon=catalog.category_icon,
    )


@public_bp.get("/services/<service_id>")
@public_bp.get("/puja/<service_id>")
def service_detail(service_id: str) -> str:
    service = None
    try:
        service = record(get_client().services.get(service_id), "service")
    except ApiError as exc:
        current_app.logger.info("Service %s not available from the backend: %s", service_id, exc)

    puja = catalog.get_puja(service_id)
    if service is None and puja is None:
        abort(HTTPStatus.NOT_FOUND)
    if service is None:
        service = puja.as_service()

    return render_template(
        "public/service_detail.html",
        service=service,
        puja=puja,
        category_label=catalog.category_label(service.get("category")),
        category_icon=catalog.category_icon(service.get("category")),
    )


@public_bp.get("/pandit/<pandit_id>")
def pandit_profile(pandit_id: str) -> str:
    client = get_client()
    pandit = None
    reviews: list[dict] = []
    try:
        raw = record(client.pandits.get(pandit_id), "pandit")
    except ApiError as exc:
        current_app.logger.info("Pandit %s not available from the backend: %s", pandit_id, exc)
        raw = None

    if raw is not None:
        pandit = transform_pandit(raw)
        reviews = raw.get("reviews") or []
        if not reviews:
            try:
                reviews = records(client.pandits.reviews(pandit_id), "reviews")
            except ApiError as exc:
                current_app.logger.info("Reviews for pandit %s unavailable: %s", pandit_id, exc)
    else:
        pandit = find_featured_pandit(load_homepage(client).content, pandit_id)

    if pandit is None:
        abort(HTTPStatus.NOT_FOUND)
    return render_template("public/pandit_profile.html", pandit=pandit, reviews=reviews)


@public_bp.route("/contact", methods=["GET", "POST"])
def contact():
    form_data: dict = {}
    errors: dict = {}
    status = HTTPStatus.OK

    if request.method == "POST":
        result = validate_contact(request.form)
        form_data = result.data
        errors = result.errors
        if result.is_valid:
            payload = {key: value for key, value in result.data.items() if value is not None}
            try:
                get_client().contact.create(payload)
            except ApiError as exc:
                flash(exc.message, "error")
                status = error_status(exc)
            else:
                flash("Thank you for your message! We will get back to you within 24 hours.", "success")
                return redirect(url_for("public.contact"))
        else:
            status = HTTPStatus.BAD_REQUEST

    return (
        render_template("public/contact.html", form=form_data, errors=errors, faq=catalog.CONTACT_FAQ),
        status,
    )


@public_bp.get("/panchang")
def panchang():
    status = HTTPStatus.OK
    try:
        day = parse_date(request.args.get("date"))
    except ValueError as exc:
        flash(str(exc), "error")
        day = parse_date(None)
        status = HTTPStatus.BAD_REQUEST
    location = (request.args.get("location") or "").strip() or DEFAULT_LOCATION
    return render_template("public/panchang.html", panchang=panchang_for(day, location)), status


@public_bp.get("/muhurat")
def muhurat():
    ceremony = (request.args.get("ceremony") or "").strip()
    location = (request.args.get("location") or "").strip() or DEFAULT_LOCATION
    results = None
    error = None
    status = HTTPStatus.OK

    if ceremony:
        try:
            results = find_muhurats(ceremony, location)
        except UnknownCeremonyError as exc:
            error = str(exc)
            status = HTTPStatus.BAD_REQUEST

    return (
        render_template(
            "public/muhurat.html",
            ceremonies=CEREMONY_TYPES,
            daily=DAILY_MUHURATS,
            ceremony=ceremony,
            location=location,
            results=results,
            error=error,
        ),
        status,
    )


@public_bp.get("/language/<code>")
def set_language(code: str):
    if is_supported(code):
        session[LANGUAGE_KEY] = code
    target = request.args.get("next")
    return redirect(target if is_safe_next(target) else url_for("public.index"))
