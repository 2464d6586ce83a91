"""Pricing, booking date window and Razorpay checkout helpers."""
from __future__ import annotations

import hashlib
import hmac
import math
from datetime import date, timedelta
from typing import Any

DEFAULT_SERVICE_HOURS = 2.5
BOOKING_WINDOW_DAYS = 30
CURRENCY = "INR"
PAYMENT_METHOD = "ONLINE"
PAYMENT_GATEWAY = "razorpay"
CHECKOUT_NAME = "MantraSetu"
CHECKOUT_THEME_COLOR = "#ff6b35"
CHECKOUT_SCRIPT_URL = "https://checkout.razorpay.com/v1/checkout.js"


class PaymentVerificationError(ValueError):
    """Raised when a checkout callback does not carry a valid signature."""


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def calculate_total(service_price: Any, hourly_rate: Any = None, *, has_pandit: bool = True) -> float | int:
    """Service price plus the pandit's fee for a standard 2.5 hour ceremony.

    With a pandit selected the total is rounded half-up to whole rupees.
    """

    price = _number(service_price)
    if not has_pandit:
        return price
    total = price + _number(hourly_rate) * DEFAULT_SERVICE_HOURS
    return int(math.floor(total + 0.5))


def booking_window(today: date | None = None) -> tuple[date, date]:
    """Return the first and last dates a booking may be placed on."""

    today = today or date.today()
    return today + timedelta(days=1), today + timedelta(days=BOOKING_WINDOW_DAYS)


def is_bookable_date(value: date, today: date | None = None) -> bool:
    first, last = booking_window(today)
    return first <= value <= last


def payment_request(booking_id: str, amount: float | int) -> dict[str, Any]:
    return {
        "bookingId": booking_id,
        "amount": amount,
        "currency": CURRENCY,
        "paymentMethod": PAYMENT_METHOD,
        "paymentGateway": PAYMENT_GATEWAY,
    }


def checkout_options(
    *,
    key_id: str,
    order_id: str,
    amount: float | int,
    service_name: str,
    user: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the options object handed to Razorpay Checkout."""

    user = user or {}
    first_name = user.get("firstName")
    return {
        "key": key_id,
        "amount": int(round(_number(amount) * 100)),
        "currency": CURRENCY,
        "name": CHECKOUT_NAME,
        "description": f"Payment for {service_name}",
        "order_id": order_id,
        "prefill": {
            "name": f"{first_name} {user.get('lastName') or ''}".strip() if first_name else "",
            "email": user.get("email") or "",
            "contact": user.get("phone") or "",
        },
        "theme": {"color": CHECKOUT_THEME_COLOR},
    }


def expected_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str | None) -> None:
    """Check a checkout callback signature.

    Without a configured secret the check is left to the backend.
    """

    if not secret:
        return
    if not order_id or not payment_id or not signature:
        raise PaymentVerificationError("Payment response is incomplete.")
    if not hmac.compare_digest(expected_signature(order_id, payment_id, secret), signature):
        raise PaymentVerificationError("Payment signature verification failed.")
