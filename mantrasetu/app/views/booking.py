"""Booking wizard: pandit, date, time and details, then Razorpay payment."""
from __future__ import annotations

from datetime import date
from http import HTTPStatus
from typing import Any

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

from mantrasetu.app.middleware import note_activity
from mantrasetu.app.services import catalog
from mantrasetu.app.services.api_client import ApiError, get_client, unwrap
from mantrasetu.app.services.homepage import transform_pandit
from mantrasetu.app.services.payment import (
    CHECKOUT_SCRIPT_URL,
    DEFAULT_SERVICE_HOURS,
    PaymentVerificationError,
    booking_window,
    calculate_total,
    checkout_options,
    is_bookable_date,
    payment_request,
    verify_signature,
)
from mantrasetu.app.session import BOOKING_DRAFT_KEY, current_user, login_required
from mantrasetu.app.views import error_status, record, records

booking_bp = Blueprint("booking", __name__)

PAYMENT_FAILED = "Payment processing failed. Please contact support."


def _draft(service_id: str | None = None) -> dict[str, Any]:
    draft = session.get(BOOKING_DRAFT_KEY) or {}
    if service_id is not None and draft.get("serviceId") != service_id:
        return {}
    return draft


def _save_draft(draft: dict[str, Any]) -> None:
    session[BOOKING_DRAFT_KEY] = draft


def _load_service(service_id: str) -> dict[str, Any]:
    try:
        service = record(get_client().services.get(service_id), "service")
    except ApiError as exc:
        current_app.logger.info("Service %s not available from the backend: %s", service_id, exc)
        service = None
    if service is None:
        puja = catalog.get_puja(service_id)
        if puja is None:
            abort(HTTPStatus.NOT_FOUND)
        service = puja.as_service()
    return service


def _start_draft(service: dict[str, Any]) -> dict[str, Any]:
    return {
        "serviceId": str(service.get("id")),
        "serviceName": service.get("name") or "",
        "servicePrice": service.get("basePrice") or 0,
        "timezone": current_app.config["DEFAULT_TIMEZONE"],
    }


def _total(draft: dict[str, Any]) -> float | int:
    pandit = draft.get("pandit")
    return calculate_total(
        draft.get("servicePrice"),
        pandit.get("hourlyRate") if pandit else None,
        has_pandit=bool(pandit),
    )


@booking_bp.route("/services/<service_id>/book", methods=["GET", "POST"])
@login_required
def select_pandit(service_id: str):
    """Step 1: choose one of the pandits offering the service."""

    service = _load_service(service_id)
    draft = _draft(service_id) or _start_draft(service)
    status = HTTPStatus.OK

    pandits: list[dict[str, Any]] = []
    try:
        pandits = records(
            get_client().pandits.available({"specialization": service.get("name")}), "pandits"
        )
    except ApiError as exc:
        flash(exc.message, "error")
        status = error_status(exc)

    if request.method == "POST":
        chosen_id = request.form.get("panditId") or ""
        chosen = next((item for item in pandits if str(item.get("id")) == chosen_id), None)
        if chosen is None:
            flash("Please select a pandit to continue.", "error")
            status = HTTPStatus.BAD_REQUEST
        else:
            card = transform_pandit(chosen)
            draft.update(
                {
                    "pandit": {"id": card.id, "name": card.name, "hourlyRate": card.hourly_rate},
                    "date": None,
                    "time": None,
                }
            )
            _save_draft(draft)
            return redirect(url_for("booking.schedule", service_id=service_id))

    _save_draft(draft)
    return (
        render_template(
            "booking/select_pandit.html",
            service=service,
            pandits=[(raw, transform_pandit(raw)) for raw in pandits],
            draft=draft,
            step=1,
        ),
        status,
    )


@booking_bp.get("/services/<service_id>/book/schedule")
@login_required
def schedule(service_id: str):
    """Step 2: pick a date inside the booking window and load its free slots."""

    draft = _draft(service_id)
    if not draft.get("pandit"):
        return redirect(url_for("booking.select_pandit", service_id=service_id))

    first_day, last_day = booking_window()
    selected = request.args.get("date") or draft.get("date")
    slots: list[dict[str, Any]] = []
    status = HTTPStatus.OK

    if selected:
        try:
            chosen_day = date.fromisoformat(selected)
        except ValueError:
            chosen_day = None
        if chosen_day is None or not is_bookable_date(chosen_day):
            flash(
                f"Please choose a date between {first_day.isoformat()} and {last_day.isoformat()}.",
                "error",
            )
            selected = None
            status = HTTPStatus.BAD_REQUEST
        else:
            draft["date"] = selected
            _save_draft(draft)
            try:
                slots = records(
                    get_client().pandits.availability(draft["pandit"]["id"], selected),
                    "availability",
                )
            except ApiError as exc:
                flash(exc.message, "error")
                status = error_status(exc)

    return (
        render_template(
            "booking/schedule.html",
            draft=draft,
            selected_date=selected,
            slots=slots,
            min_date=first_day.isoformat(),
            max_date=last_day.isoformat(),
            total=_total(draft),
            step=2,
        ),
        status,
    )


@booking_bp.route("/services/<service_id>/book/details", methods=["GET", "POST"])
@login_required
def details(service_id: str):
    """Step 3: confirm the time and instructions, then create the booking."""

    draft = _draft(service_id)
    if not draft:
        return redirect(url_for("booking.select_pandit", service_id=service_id))

    if request.method == "GET":
        if request.args.get("time"):
            draft["time"] = request.args["time"]
            _save_draft(draft)
        return render_template(
            "booking/details.html",
            draft=draft,
            total=_total(draft),
            hours=DEFAULT_SERVICE_HOURS,
            step=3,
        )

    draft["time"] = (request.form.get("bookingTime") or draft.get("time") or "").strip() or None
    draft["specialInstructions"] = (request.form.get("specialInstructions") or "").strip()
    draft["timezone"] = (
        request.form.get("timezone") or draft.get("timezone") or current_app.config["DEFAULT_TIMEZONE"]
    )
    _save_draft(draft)

    context = {"draft": draft, "total": _total(draft), "hours": DEFAULT_SERVICE_HOURS, "step": 3}
    if not draft.get("pandit") or not draft.get("date") or not draft.get("time"):
        flash("Please fill in all required fields", "error")
        return render_template("booking/details.html", **context), HTTPStatus.BAD_REQUEST

    try:
        response = get_client().bookings.create(
            {
                "panditId": draft["pandit"]["id"],
                "serviceId": draft["serviceId"],
                "bookingDate": draft["date"],
                "bookingTime": draft["time"],
                "timezone": draft["timezone"],
                "specialInstructions": draft["specialInstructions"],
            }
        )
    except ApiError as exc:
        flash(exc.message, "error")
        return render_template("booking/details.html", **context), error_status(exc)

    booking = record(response, "booking") or {}
    booking_id = str(booking.get("id") or "")
    if not booking_id:
        flash("Failed to create booking", "error")
        return render_template("booking/details.html", **context), HTTPStatus.BAD_GATEWAY

    draft["bookingId"] = booking_id
    draft["totalAmount"] = context["total"]
    _save_draft(draft)
    note_activity(booking_id)
    return redirect(url_for("booking.payment", booking_id=booking_id))


def _draft_for_booking(booking_id: str) -> dict[str, Any]:
    draft = _draft()
    if draft.get("bookingId") != booking_id:
        flash("Your booking session has expired. Please start again.", "error")
        abort(HTTPStatus.NOT_FOUND)
    return draft


@booking_bp.get("/bookings/<booking_id>/payment")
@login_required
def payment(booking_id: str):
    """Step 4: summary with the pay button."""

    draft = _draft_for_booking(booking_id)
    return render_template("booking/payment.html", draft=draft, total=draft.get("totalAmount"), step=4)


@booking_bp.post("/bookings/<booking_id>/payment")
@login_required
def start_payment(booking_id: str):
    draft = _draft_for_booking(booking_id)
    amount = draft.get("totalAmount")

    try:
        response = get_client().payments.create(payment_request(booking_id, amount))
    except ApiError as exc:
        flash("Payment failed. Please try again.", "error")
        current_app.logger.warning("Payment order for booking %s failed: %s", booking_id, exc)
        return (
            render_template("booking/payment.html", draft=draft, total=amount, step=4),
            error_status(exc),
        )

    order = unwrap(response) or {}
    draft["paymentId"] = str(order.get("id") or "")
    draft["orderId"] = order.get("razorpayOrderId") or ""
    _save_draft(draft)

    options = checkout_options(
        key_id=order.get("razorpayKeyId") or current_app.config["RAZORPAY_KEY_ID"],
        order_id=draft["orderId"],
        amount=amount,
        service_name=draft.get("serviceName") or "",
        user=current_user(),
    )
    return render_template(
        "booking/checkout.html",
        draft=draft,
        options=options,
        checkout_script=CHECKOUT_SCRIPT_URL,
        step=4,
    )


@booking_bp.post("/bookings/<booking_id>/payment/complete")
@login_required
def complete_payment(booking_id: str):
    """Checkout callback: verify the signature and tell the backend."""

    draft = _draft_for_booking(booking_id)
    gateway_response = {
        "razorpay_payment_id": request.form.get("razorpay_payment_id", ""),
        "razorpay_order_id": request.form.get("razorpay_order_id", ""),
        "razorpay_signature": request.form.get("razorpay_signature", ""),
    }

    try:
        verify_signature(
            gateway_response["razorpay_order_id"],
            gateway_response["razorpay_payment_id"],
            gateway_response["razorpay_signature"],
            current_app.config.get("RAZORPAY_KEY_SECRET"),
        )
        if draft.get("orderId") and gateway_response["razorpay_order_id"] != draft["orderId"]:
            raise PaymentVerificationError("Payment order does not match this booking.")
        get_client().payments.process(
            draft.get("paymentId") or "",
            {
                "gatewayTransactionId": gateway_response["razorpay_payment_id"],
                "gatewayResponse": gateway_response,
            },
        )
    except (PaymentVerificationError, ApiError) as exc:
        current_app.logger.warning("Payment for booking %s not completed: %s", booking_id, exc)
        flash(PAYMENT_FAILED, "error")
        return redirect(url_for("booking.payment", booking_id=booking_id))

    note_activity(draft.get("paymentId") or booking_id)
    draft["paid"] = True
    _save_draft(draft)
    return redirect(url_for("booking.confirmation", booking_id=booking_id))


@booking_bp.get("/bookings/<booking_id>/confirmation")
@login_required
def confirmation(booking_id: str):
    """Step 5: booking confirmed."""

    draft = _draft_for_booking(booking_id)
    if not draft.get("paid"):
        return redirect(url_for("booking.payment", booking_id=booking_id))
    session.pop(BOOKING_DRAFT_KEY, None)
    return render_template("booking/confirmation.html", draft=draft, step=5)
