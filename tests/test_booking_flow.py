"""End-to-end tests for the booking wizard and Razorpay checkout."""
from __future__ import annotations

from datetime import date, timedelta
from http import HTTPStatus
import unittest

from mantrasetu.app.models import ActivityLog
from mantrasetu.app.services.payment import expected_signature

from fake_backend import USER, FakeBackend, WebTestCase, envelope

SERVICE = {"id": "svc-1", "name": "Griha Pravesh", "category": "POOJA", "basePrice": 1100}
PANDIT = {
    "id": "p-7",
    "hourlyRate": 600,
    "rating": 4.9,
    "experienceYears": 15,
    "user": {"firstName": "Ravi", "lastName": "Shastri"},
}
SECRET = "razorpay-secret"


class BookingWizardCase(WebTestCase):
    """Signed-in devotee with the backend routes the wizard needs."""

    def setUp(self) -> None:  # noqa: D401 - inherited documentation
        """Sign in and register the backend routes the wizard needs."""

        super().setUp()
        self.sign_in(USER)
        self.booking_day = (date.today() + timedelta(days=3)).isoformat()

        self.backend.add("GET", "/services/svc-1", envelope(SERVICE))
        self.backend.add("GET", "/pandits/available", envelope({"pandits": [PANDIT]}))
        self.backend.add(
            "GET",
            "/pandits/p-7/availability",
            envelope({"availability": [{"time": "09:00", "isAvailable": True}, {"time": "11:00", "isAvailable": False}]}),
        )
        self.backend.add("POST", "/bookings", envelope({"booking": {"id": "bk-1", "status": "PENDING"}}))
        self.backend.add(
            "POST",
            "/payments",
            envelope({"id": "pay-1", "razorpayOrderId": "order_1", "razorpayKeyId": "rzp_live"}),
        )
        self.backend.add("PUT", "/payments/pay-1/process", envelope({"status": "PAID"}))

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def _book_until_payment(self) -> None:
        response = self.client.post("/services/svc-1/book", data={"panditId": "p-7"})
        self.assertEqual(response.status_code, HTTPStatus.FOUND, response.get_data(as_text=True))

        response = self.client.get(f"/services/svc-1/book/schedule?date={self.booking_day}")
        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))

        response = self.client.post(
            "/services/svc-1/book/details",
            data={"bookingTime": "09:00", "specialInstructions": "Bring samagri", "timezone": "Asia/Kolkata"},
        )
        self.assertEqual(response.status_code, HTTPStatus.FOUND, response.get_data(as_text=True))
        self.assertTrue(response.headers["Location"].endswith("/bookings/bk-1/payment"))

    def _callback(self, signature: str, order_id: str = "order_1"):
        return self.client.post(
            "/bookings/bk-1/payment/complete",
            data={
                "razorpay_payment_id": "pay_rzp_1",
                "razorpay_order_id": order_id,
                "razorpay_signature": signature,
            },
        )


class BookingFlowTestCase(BookingWizardCase):
    """Walk a signed-in devotee through every step of the wizard."""

    def test_select_pandit_lists_available_pandits(self) -> None:
        response = self.client.get("/services/svc-1/book")

        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        self.assertIn("Ravi Shastri", response.get_data(as_text=True))
        query = self.backend.calls("GET", "/pandits/available")[0].url.params
        self.assertEqual(query.get("specialization"), "Griha Pravesh")

    def test_select_pandit_requires_a_choice(self) -> None:
        response = self.client.post("/services/svc-1/book", data={"panditId": "unknown"})

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST, response.get_data(as_text=True))
        self.assertIn("Please select a pandit to continue.", response.get_data(as_text=True))

    def test_schedule_rejects_dates_outside_window(self) -> None:
        self.client.post("/services/svc-1/book", data={"panditId": "p-7"})

        response = self.client.get(f"/services/svc-1/book/schedule?date={date.today().isoformat()}")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST, response.get_data(as_text=True))
        self.assertEqual(self.backend.calls("GET", "/pandits/p-7/availability"), [])

    def test_schedule_without_pandit_restarts_wizard(self) -> None:
        response = self.client.get("/services/svc-1/book/schedule")

        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(response.headers["Location"].endswith("/services/svc-1/book"))

    def test_details_requires_a_time(self) -> None:
        self.client.post("/services/svc-1/book", data={"panditId": "p-7"})
        self.client.get(f"/services/svc-1/book/schedule?date={self.booking_day}")

        response = self.client.post("/services/svc-1/book/details", data={"bookingTime": ""})

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST, response.get_data(as_text=True))
        self.assertIn("Please fill in all required fields", response.get_data(as_text=True))
        self.assertEqual(self.backend.calls("POST", "/bookings"), [])

    def test_full_wizard_creates_booking_and_pays(self) -> None:
        self._book_until_payment()

        created = FakeBackend.json_body(self.backend.calls("POST", "/bookings")[0])
        self.assertEqual(
            created,
            {
                "panditId": "p-7",
                "serviceId": "svc-1",
                "bookingDate": self.booking_day,
                "bookingTime": "09:00",
                "timezone": "Asia/Kolkata",
                "specialInstructions": "Bring samagri",
            },
        )
        self.assertEqual(self.session_value("booking_draft")["totalAmount"], 2600)

        response = self.client.post("/bookings/bk-1/payment")
        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        body = response.get_data(as_text=True)
        self.assertIn("rzp_live", body)
        self.assertIn("order_1", body)
        self.assertIn("260000", body)
        order = FakeBackend.json_body(self.backend.calls("POST", "/payments")[0])
        self.assertEqual(order["amount"], 2600)
        self.assertEqual(order["paymentGateway"], "razorpay")

        response = self._callback("unchecked-without-secret")
        self.assertEqual(response.status_code, HTTPStatus.FOUND, response.get_data(as_text=True))
        self.assertTrue(response.headers["Location"].endswith("/bookings/bk-1/confirmation"))
        processed = FakeBackend.json_body(self.backend.calls("PUT", "/payments/pay-1/process")[0])
        self.assertEqual(processed["gatewayTransactionId"], "pay_rzp_1")
        self.assertEqual(processed["gatewayResponse"]["razorpay_order_id"], "order_1")

        response = self.client.get("/bookings/bk-1/confirmation")
        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        self.assertIsNone(self.session_value("booking_draft"))

        actions = sorted(entry.action for entry in ActivityLog.query.all())
        self.assertEqual(actions, ["booking.created", "payment.completed"])

    def test_payment_order_failure_stays_on_payment_page(self) -> None:
        self._book_until_payment()
        self.backend.add("POST", "/payments", {"message": "Gateway down"}, status=503)

        response = self.client.post("/bookings/bk-1/payment")

        self.assertEqual(response.status_code, HTTPStatus.SERVICE_UNAVAILABLE, response.get_data(as_text=True))
        self.assertIn("Payment failed. Please try again.", response.get_data(as_text=True))

    def test_confirmation_requires_payment(self) -> None:
        self._book_until_payment()

        response = self.client.get("/bookings/bk-1/confirmation")

        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(response.headers["Location"].endswith("/bookings/bk-1/payment"))

    def test_unknown_booking_payment_is_not_found(self) -> None:
        response = self.client.get("/bookings/other/payment")
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)

    def test_catalog_service_can_be_booked_when_backend_lacks_it(self) -> None:
        response = self.client.get("/services/seed-puja-6/book")

        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        query = self.backend.calls("GET", "/pandits/available")[0].url.params
        self.assertEqual(query.get("specialization"), "Satyanarayan Puja")

    def test_anonymous_visitor_must_log_in(self) -> None:
        with self.client.session_transaction() as session:
            session.clear()

        response = self.client.get("/services/svc-1/book")

        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertIn("/login", response.headers["Location"])


class SignedCheckoutTestCase(BookingWizardCase):
    """Repeat the checkout with a configured Razorpay secret."""

    config_overrides = {"RAZORPAY_KEY_SECRET": SECRET}

    def test_valid_signature_completes_payment(self) -> None:
        self._book_until_payment()
        self.client.post("/bookings/bk-1/payment")

        response = self._callback(expected_signature("order_1", "pay_rzp_1", SECRET))

        self.assertTrue(response.headers["Location"].endswith("/bookings/bk-1/confirmation"))
        self.assertEqual(len(self.backend.calls("PUT", "/payments/pay-1/process")), 1)

    def test_forged_signature_is_rejected(self) -> None:
        self._book_until_payment()
        self.client.post("/bookings/bk-1/payment")

        response = self._callback("forged")

        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        self.assertTrue(response.headers["Location"].endswith("/bookings/bk-1/payment"))
        self.assertIn("Payment processing failed. Please contact support.", self.flashes())
        self.assertEqual(self.backend.calls("PUT", "/payments/pay-1/process"), [])
        self.assertFalse(self.session_value("booking_draft").get("paid"))

    def test_signature_for_another_order_is_rejected(self) -> None:
        self._book_until_payment()
        self.client.post("/bookings/bk-1/payment")

        response = self._callback(expected_signature("order_9", "pay_rzp_1", SECRET), order_id="order_9")

        self.assertTrue(response.headers["Location"].endswith("/bookings/bk-1/payment"))
        self.assertEqual(self.backend.calls("PUT", "/payments/pay-1/process"), [])


if __name__ == "__main__":
    unittest.main()
