"""Client helpers for interacting with the MantraSetu REST backend."""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable

import httpx
from flask import current_app, has_request_context, session

from mantrasetu.extensions import backend

LOGGER = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "token"
SESSION_REFRESH_KEY = "refresh_token"

REFRESH_PATH = "/auth/refresh"


class ApiError(RuntimeError):
    """Raised when the backend rejects a request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ApiUnavailableError(ApiError):
    """Raised when the backend cannot be reached."""


class SessionExpiredError(RuntimeError):
    """Raised when the access token is rejected and cannot be refreshed.

    It is not an ``ApiError``; it propagates past page-level ``ApiError``
    handlers to the application-wide login redirect.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SessionTokenStore:
    """Keeps the backend access and refresh tokens in the Flask session.

    Outside of a request (for example inside worker threads) the store is
    empty, so calls made there are anonymous.
    """

    @property
    def access_token(self) -> str | None:
        if not has_request_context():
            return None
        return session.get(SESSION_TOKEN_KEY)

    @property
    def refresh_token(self) -> str | None:
        if not has_request_context():
            return None
        return session.get(SESSION_REFRESH_KEY)

    def save(self, access_token: str, refresh_token: str | None = None) -> None:
        if not has_request_context():
            return
        session[SESSION_TOKEN_KEY] = access_token
        if refresh_token:
            session[SESSION_REFRESH_KEY] = refresh_token

    def clear(self) -> None:
        if not has_request_context():
            return
        session.pop(SESSION_TOKEN_KEY, None)
        session.pop(SESSION_REFRESH_KEY, None)


class AnonymousTokenStore(SessionTokenStore):
    """Token store that never sends or keeps credentials."""

    @property
    def access_token(self) -> str | None:
        return None

    @property
    def refresh_token(self) -> str | None:
        return None

    def save(self, access_token: str, refresh_token: str | None = None) -> None:
        return None

    def clear(self) -> None:
        return None


def unwrap(payload: Any) -> Any:
    """Strip the ``{"success": ..., "data": ...}`` envelope when present."""

    if isinstance(payload, dict) and "data" in payload and (
        "success" in payload or set(payload) <= {"data", "message"}
    ):
        return payload["data"]
    return payload


def pluck(payload: Any, key: str, default: Any = None) -> Any:
    """Return ``key`` from an enveloped or bare payload."""

    data = unwrap(payload)
    if isinstance(data, dict) and key in data:
        return data[key]
    if isinstance(payload, dict) and key in payload:
        return payload[key]
    return default


def error_message(payload: Any, default: str) -> str:
    """Extract the user-facing message from an error payload."""

    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return default


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    return {key: value for key, value in params.items() if value not in (None, "")}


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except json.JSONDecodeError:
        return None


class ApiClient:
    """Thin wrapper over ``httpx.Client`` adding auth, refresh and error mapping."""

    def __init__(
        self,
        http: httpx.Client,
        tokens: SessionTokenStore | None = None,
        *,
        debug: bool = False,
    ) -> None:
        self.http = http
        self.tokens = tokens or SessionTokenStore()
        self.debug = debug

        self.auth = AuthResource(self)
        self.users = UserResource(self)
        self.bookings = BookingResource(self)
        self.services = ServiceResource(self)
        self.pandits = PanditResource(self)
        self.payments = PaymentResource(self)
        self.notifications = NotificationResource(self)
        self.admin = AdminResource(self)
        self.contact = ContactResource(self)
        self.homepage = HomepageResource(self)

    def anonymous(self) -> ApiClient:
        """Return a client sharing the connection pool but sending no token."""

        return ApiClient(self.http, AnonymousTokenStore(), debug=self.debug)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: Iterable[tuple[str, Any]] | None = None,
        default_error: str = "Something went wrong. Please try again.",
        retry: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body."""

        token = self.tokens.access_token
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        cleaned = _clean_params(params)

        if self.debug:
            LOGGER.debug("API request %s %s params=%s", method, path, cleaned)

        try:
            response = self.http.request(
                method,
                path,
                params=cleaned,
                json=json,
                data=data,
                files=list(files) if files else None,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            LOGGER.error("API %s %s failed: %s", method, path, exc)
            raise ApiUnavailableError(
                "Unable to reach the MantraSetu service. Please try again later."
            ) from exc

        if self.debug:
            LOGGER.debug("API response %s %s -> %s", method, path, response.status_code)

        if response.status_code == httpx.codes.UNAUTHORIZED and token and path != REFRESH_PATH:
            if retry and self._refresh_tokens():
                return self.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    data=data,
                    files=files,
                    default_error=default_error,
                    retry=False,
                )
            self.tokens.clear()
            raise SessionExpiredError(
                "Your session has expired. Please log in again.",
                status_code=response.status_code,
            )

        payload = _decode(response)
        if response.is_error:
            raise ApiError(
                error_message(payload, default_error),
                status_code=response.status_code,
                payload=payload,
            )
        return payload

    def _refresh_tokens(self) -> bool:
        refresh_token = self.tokens.refresh_token
        if not refresh_token:
            return False
        try:
            response = self.http.post(REFRESH_PATH, json={"refreshToken": refresh_token})
        except httpx.HTTPError:
            LOGGER.warning("Token refresh could not reach the backend")
            return False
        if response.is_error:
            return False
        tokens = unwrap(_decode(response)) or {}
        access_token = tokens.get("accessToken") if isinstance(tokens, dict) else None
        new_refresh = tokens.get("refreshToken") if isinstance(tokens, dict) else None
        if not access_token or not new_refresh:
            return False
        self.tokens.save(access_token, new_refresh)
        LOGGER.info("Refreshed backend access token")
        return True

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)


class _Resource:
    def __init__(self, client: ApiClient) -> None:
        self.client = client


class AuthResource(_Resource):
    def login(self, email: str, password: str) -> Any:
        return self.client.post(
            "/auth/login",
            json={"email": email, "password": password},
            default_error="Login failed. Please try again.",
        )

    def register(self, user_data: dict[str, Any]) -> Any:
        return self.client.post(
            "/auth/register",
            json=user_data,
            default_error="Registration failed. Please try again.",
        )

    def logout(self) -> Any:
        return self.client.post("/auth/logout")

    def refresh(self, refresh_token: str) -> Any:
        return self.client.post(REFRESH_PATH, json={"refreshToken": refresh_token})

    def forgot_password(self, email: str) -> Any:
        return self.client.post("/auth/forgot-password", json={"email": email})

    def reset_password(self, token: str, password: str) -> Any:
        return self.client.post("/auth/reset-password", json={"token": token, "password": password})

    def verify_email(self, token: str) -> Any:
        return self.client.post("/auth/verify-email", json={"token": token})

    def change_password(self, current_password: str, new_password: str) -> Any:
        return self.client.put(
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
            default_error="Failed to change password",
        )


class UserResource(_Resource):
    def get_profile(self) -> Any:
        return self.client.get("/users/profile", default_error="Failed to fetch profile")

    def update_profile(self, profile: dict[str, Any]) -> Any:
        return self.client.put(
            "/users/profile", json=profile, default_error="Failed to update profile"
        )

    def upload_profile_image(self, filename: str, content: bytes, content_type: str) -> Any:
        return self.client.post(
            "/users/profile/image",
            files=[("image", (filename, content, content_type))],
            default_error="Failed to upload image",
        )

    def get_bookings(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get(
            "/users/bookings", params=params, default_error="Failed to fetch bookings"
        )

    def get_addresses(self) -> Any:
        return self.client.get("/users/addresses")

    def add_address(self, address: dict[str, Any]) -> Any:
        return self.client.post("/users/addresses", json=address)

    def update_address(self, address_id: str, address: dict[str, Any]) -> Any:
        return self.client.put(f"/users/addresses/{address_id}", json=address)

    def delete_address(self, address_id: str) -> Any:
        return self.client.delete(f"/users/addresses/{address_id}")

    def get_notifications(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/users/notifications", params=params)

    def delete_account(self) -> Any:
        return self.client.delete("/users/account")

    def get_enrolled_services(self) -> Any:
        return self.client.get("/users/enrolled-services")

    def enroll_in_service(self, service_id: str, preferences: dict[str, Any] | None = None) -> Any:
        return self.client.post(
            "/users/enroll-service",
            json={"serviceId": service_id, "preferences": preferences or {}},
            default_error="Failed to enroll in service",
        )

    def unenroll_from_service(self, enrollment_id: str) -> Any:
        return self.client.delete(
            f"/users/enrollments/{enrollment_id}",
            default_error="Failed to unenroll from service",
        )

    def get_enrollment_history(self) -> Any:
        return self.client.get("/users/enrollment-history")


class BookingResource(_Resource):
    def search(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/bookings/search", params=params)

    def create(self, booking: dict[str, Any]) -> Any:
        return self.client.post(
            "/bookings", json=booking, default_error="Failed to create booking"
        )

    def get(self, booking_id: str) -> Any:
        return self.client.get(f"/bookings/{booking_id}", default_error="Booking not found")

    def update(self, booking_id: str, booking: dict[str, Any]) -> Any:
        return self.client.put(f"/bookings/{booking_id}", json=booking)

    def cancel(self, booking_id: str, reason: str) -> Any:
        return self.client.put(
            f"/bookings/{booking_id}/cancel",
            json={"reason": reason},
            default_error="Failed to cancel booking",
        )

    def reschedule(self, booking_id: str, new_date_time: str) -> Any:
        return self.client.put(
            f"/bookings/{booking_id}/reschedule",
            json={"newDateTime": new_date_time},
            default_error="Failed to reschedule booking",
        )

    def add_review(self, booking_id: str, rating: int, comment: str) -> Any:
        return self.client.post(
            f"/bookings/{booking_id}/review",
            json={"rating": rating, "comment": comment},
            default_error="Failed to submit review",
        )

    def get_available_slots(self, pandit_id: str, date: str) -> Any:
        return self.client.get(f"/bookings/availability/{pandit_id}", params={"date": date})


class ServiceResource(_Resource):
    def list(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/services", params=params, default_error="Failed to load services")

    def search(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/services/search", params=params)

    def get(self, service_id: str) -> Any:
        return self.client.get(f"/services/{service_id}", default_error="Service not found")

    def categories(self) -> Any:
        return self.client.get("/services/categories")

    def by_category(self, category: str) -> Any:
        return self.client.get(f"/services/category/{category}")


class PanditResource(_Resource):
    def search(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/pandits/search", params=params)

    def get(self, pandit_id: str) -> Any:
        return self.client.get(f"/pandits/{pandit_id}", default_error="Pandit not found")

    def available(self, filters: dict[str, Any]) -> Any:
        return self.client.get(
            "/pandits/available",
            params=filters,
            default_error="Failed to load available pandits",
        )

    def reviews(self, pandit_id: str) -> Any:
        return self.client.get(f"/pandits/{pandit_id}/reviews")

    def availability(self, pandit_id: str, date: str | None = None) -> Any:
        return self.client.get(
            f"/pandits/{pandit_id}/availability",
            params={"date": date},
            default_error="Failed to load available time slots",
        )

    def register(self, fields: dict[str, Any], files: list[tuple[str, Any]]) -> Any:
        return self.client.post(
            "/pandits/register",
            data=fields,
            files=files,
            default_error="Failed to register as pandit. Please try again.",
        )

    def create_profile(self, fields: dict[str, Any], files: list[tuple[str, Any]]) -> Any:
        return self.client.post("/pandits/profile", data=fields, files=files)

    def update_profile(self, profile: dict[str, Any]) -> Any:
        return self.client.put("/pandits/profile/me", json=profile)

    def bookings(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get(
            "/pandits/bookings", params=params, default_error="Failed to fetch bookings"
        )

    def update_booking_status(self, booking_id: str, status: str) -> Any:
        return self.client.put(
            f"/pandits/bookings/{booking_id}/status",
            json={"status": status},
            default_error="Failed to update booking status",
        )


class PaymentResource(_Resource):
    def create(self, payment: dict[str, Any]) -> Any:
        return self.client.post(
            "/payments", json=payment, default_error="Payment failed. Please try again."
        )

    def process(self, payment_id: str, payment: dict[str, Any]) -> Any:
        return self.client.put(
            f"/payments/{payment_id}/process",
            json=payment,
            default_error="Payment processing failed. Please contact support.",
        )

    def verify(self, payment_id: str) -> Any:
        return self.client.get(f"/payments/{payment_id}/verify")

    def search(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/payments/search", params=params)

    def history(self) -> Any:
        return self.client.get("/payments/history")

    def refund(self, payment_id: str, reason: str, amount: float | None = None) -> Any:
        body: dict[str, Any] = {"reason": reason}
        if amount is not None:
            body["amount"] = amount
        return self.client.post(f"/payments/{payment_id}/refund", json=body)


class NotificationResource(_Resource):
    def list(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/notifications/me", params=params)

    def mark_read(self, notification_id: str) -> Any:
        return self.client.put(f"/notifications/{notification_id}/read")

    def mark_all_read(self) -> Any:
        return self.client.put("/notifications/read-all")

    def update_preferences(self, preferences: dict[str, Any]) -> Any:
        return self.client.put("/notifications/preferences", json=preferences)


class AdminResource(_Resource):
    def dashboard_stats(self) -> Any:
        return self.client.get("/admin/dashboard/stats", default_error="Failed to load dashboard stats")

    def users(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/admin/users", params=params, default_error="Failed to load users")

    def user(self, user_id: str) -> Any:
        return self.client.get(f"/admin/users/{user_id}", default_error="User not found")

    def update_user_status(self, user_id: str, is_active: bool) -> Any:
        return self.client.put(
            f"/admin/users/{user_id}/status",
            json={"isActive": is_active},
            default_error="Failed to update user status",
        )

    def delete_user(self, user_id: str) -> Any:
        return self.client.delete(f"/admin/users/{user_id}", default_error="Failed to delete user")

    def pandits(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/admin/pandits", params=params, default_error="Failed to load pandits")

    def pandit(self, pandit_id: str) -> Any:
        return self.client.get(f"/admin/pandits/{pandit_id}", default_error="Pandit not found")

    def verify_pandit(self, pandit_id: str) -> Any:
        return self.client.put(f"/admin/pandits/{pandit_id}/verify", default_error="Failed to verify pandit")

    def unverify_pandit(self, pandit_id: str) -> Any:
        return self.client.put(
            f"/admin/pandits/{pandit_id}/unverify", default_error="Failed to unverify pandit"
        )

    def pandit_performance(self, pandit_id: str) -> Any:
        return self.client.get(f"/admin/pandits/{pandit_id}/performance")

    def services(self, params: dict[str, Any] | None = None) -> Any:
        return self.client.get("/services", params=params, default_error="Failed to load services")

    def service(self, service_id: str) -> Any:
        return self.client.get(f"/services/{service_id}", default_error="Service not found")

    def create_service(self, service: dict[str, Any]) -> Any:
        return self.client.post("/services", json=service, default_error="Failed to create service")

    def update_service(self, service_id: str, service: dict[str, Any]) -> Any:
        return self.client.patch(
            f"/services/{service_id}", json=service, default_error="Failed to update service"
        )

    def delete_service(self, service_id: str) -> Any:
        return self.client.delete(f"/services/{service_id}", default_error="Failed to delete service")

    def service_stats(self) -> Any:
        return self.client.get("/admin/services/stats")

    def analytics(self) -> Any:
        return self.client.get("/admin/analytics", default_error="Failed to load analytics")


class ContactResource(_Resource):
    def create(self, contact: dict[str, Any]) -> Any:
        return self.client.post(
            "/contact",
            json=contact,
            default_error="Failed to submit contact form. Please try again later.",
        )


class HomepageResource(_Resource):
    def get(self) -> Any:
        return self.client.get("/homepage", default_error="Failed to load homepage content")


def get_client() -> ApiClient:
    """Return an API client bound to the current application and session."""

    return ApiClient(
        backend.http_client(),
        SessionTokenStore(),
        debug=bool(current_app.config.get("API_DEBUG")),
    )
