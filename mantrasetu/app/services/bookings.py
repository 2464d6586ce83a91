"""Booking list helpers shared by the user and pandit dashboards."""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

BOOKING_STATUSES = ["PENDING", "CONFIRMED", "IN_PROGRESS", "COMPLETED", "CANCELLED", "NO_SHOW"]
PAYMENT_STATUSES = ["PENDING", "PAID", "FAILED", "REFUNDED"]

UPCOMING_STATUSES = {"PENDING", "CONFIRMED"}
CANCELLABLE_STATUSES = {"PENDING", "CONFIRMED"}
DASHBOARD_PREVIEW = 3

PANDIT_TRANSITIONS: dict[str, set[str]] = {
    "PENDING": {"CONFIRMED", "CANCELLED"},
    "CONFIRMED": {"IN_PROGRESS"},
    "IN_PROGRESS": {"COMPLETED"},
}

EARNING_PERIODS: list[dict[str, str]] = [
    {"value": "week", "label": "This Week"},
    {"value": "month", "label": "This Month"},
    {"value": "quarter", "label": "This Quarter"},
    {"value": "year", "label": "This Year"},
]


class InvalidTransitionError(ValueError):
    """Raised when a pandit tries to move a booking to a status it cannot reach."""


def filter_by_status(bookings: Iterable[dict[str, Any]], status: str | None) -> list[dict[str, Any]]:
    """Keep bookings matching ``status``; ``all`` or empty keeps everything."""

    wanted = (status or "all").upper()
    if wanted == "ALL":
        return list(bookings)
    return [booking for booking in bookings if (booking.get("status") or "").upper() == wanted]


def recent_bookings(bookings: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return bookings[:DASHBOARD_PREVIEW]


def upcoming_bookings(bookings: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    upcoming = [booking for booking in bookings if booking.get("status") in UPCOMING_STATUSES]
    return upcoming[:DASHBOARD_PREVIEW]


def can_cancel(booking: dict[str, Any]) -> bool:
    return booking.get("status") in CANCELLABLE_STATUSES


def can_review(booking: dict[str, Any]) -> bool:
    return booking.get("status") == "COMPLETED" and not booking.get("review")


def allowed_transitions(current: str | None) -> set[str]:
    return set(PANDIT_TRANSITIONS.get((current or "").upper(), set()))


def ensure_transition(current: str | None, target: str | None) -> str:
    """Return the normalized target status or raise if the move is not allowed."""

    normalized = (target or "").upper()
    if normalized not in allowed_transitions(current):
        raise InvalidTransitionError(
            f"Cannot change booking status from {current or 'UNKNOWN'} to {normalized or 'UNKNOWN'}."
        )
    return normalized


def group_for_pandit(bookings: Iterable[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    groups: dict[str, list[dict[str, Any]]] = {"PENDING": [], "CONFIRMED": [], "COMPLETED": []}
    for booking in bookings:
        status = booking.get("status")
        if status in groups:
            groups[status].append(booking)
    return groups


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the backend into an aware UTC datetime."""

    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _shift_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: str, now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return _shift_months(now, 1)
    if period == "quarter":
        return _shift_months(now, 3)
    if period == "year":
        return _shift_months(now, 12)
    raise ValueError(f"Unknown earnings period: {period}")


def _amount(booking: dict[str, Any]) -> float:
    try:
        return float(booking.get("totalAmount") or 0)
    except (TypeError, ValueError):
        return 0.0


@dataclass(slots=True)
class EarningsSummary:
    period: str
    total_earnings: float = 0.0
    pending_earnings: float = 0.0
    period_earnings: float = 0.0
    completed_count: int = 0
    bookings: list[dict[str, Any]] = field(default_factory=list)

    @property
    def period_label(self) -> str:
        for option in EARNING_PERIODS:
            if option["value"] == self.period:
                return option["label"]
        return self.period


def summarize_earnings(
    bookings: Iterable[dict[str, Any]],
    period: str = "month",
    now: datetime | None = None,
) -> EarningsSummary:
    """Aggregate a pandit's earnings for the dashboard."""

    start = period_start(period, now)
    summary = EarningsSummary(period=period)

    for booking in bookings:
        if booking.get("status") != "COMPLETED":
            continue
        payment_status = booking.get("paymentStatus")
        if payment_status == "PENDING":
            summary.pending_earnings += _amount(booking)
            continue
        if payment_status != "PAID":
            continue

        summary.total_earnings += _amount(booking)
        summary.completed_count += 1
        finished = parse_timestamp(booking.get("completedAt")) or parse_timestamp(booking.get("createdAt"))
        if finished is not None and finished >= start:
            summary.bookings.append(booking)
            summary.period_earnings += _amount(booking)

    return summary
