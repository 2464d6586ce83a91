"""Tests for the almanac, pricing, booking and form helpers."""
from __future__ import annotations

from datetime import date, datetime, timezone
from http import HTTPStatus
import json
import unittest

from werkzeug.datastructures import MultiDict

from mantrasetu.app.forms import (
    password_strength,
    validate_login,
    validate_pandit_onboarding,
    validate_registration,
    validate_reschedule,
    validate_review,
    validate_service,
)
from mantrasetu.app.i18n import translate
from mantrasetu.app.services.almanac import (
    UnknownCeremonyError,
    find_muhurats,
    format_gregorian,
    panchang_for,
    parse_date,
)
from mantrasetu.app.services.bookings import (
    InvalidTransitionError,
    allowed_transitions,
    ensure_transition,
    filter_by_status,
    group_for_pandit,
    period_start,
    summarize_earnings,
)
from mantrasetu.app.services.catalog import fallback_services, filter_services, get_puja, service_counts
from mantrasetu.app.services.payment import (
    PaymentVerificationError,
    booking_window,
    calculate_total,
    checkout_options,
    expected_signature,
    is_bookable_date,
    payment_request,
    verify_signature,
)

from fake_backend import USER, WebTestCase

ONBOARDING_FORM = MultiDict(
    [
        ("firstName", "Ravi"),
        ("lastName", "Shastri"),
        ("email", "ravi@example.com"),
        ("phone", "9876543210"),
        ("password", "secret1"),
        ("confirmPassword", "secret1"),
        ("acceptTerms", "on"),
        ("gender", "Male"),
        ("availability", "Both"),
        ("experienceYears", "12"),
        ("education", "Acharya, Sampurnanand Sanskrit University"),
        ("bio", "Performing Vedic rituals for families across Varanasi for over a decade."),
        ("languagesSpoken", "Hindi"),
        ("languagesSpoken", "Sanskrit"),
        ("specialization", "Vedic Rituals"),
        ("serviceAreas", "Varanasi"),
    ]
)


class AlmanacTestCase(unittest.TestCase):
    def test_parse_date_accepts_iso_and_defaults_to_today(self) -> None:
        self.assertEqual(parse_date("2025-10-23"), date(2025, 10, 23))
        self.assertEqual(parse_date("", today=date(2025, 1, 2)), date(2025, 1, 2))

    def test_parse_date_rejects_other_formats(self) -> None:
        for value in ("23/10/2025", "20251023", "2025-W43-4"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError) as ctx:
                    parse_date(value)
                self.assertEqual(str(ctx.exception), "Date must use YYYY-MM-DD format.")

    def test_panchang_reflects_weekday_of_requested_date(self) -> None:
        panchang = panchang_for(date(2025, 10, 23), "Varanasi")

        self.assertEqual(panchang["date"], "2025-10-23")
        self.assertEqual(panchang["gregorianDate"], "Thursday, 23 October 2025")
        self.assertEqual(panchang["location"], "Varanasi")
        self.assertEqual(panchang["vara"]["name"], "Thursday (Guruvaar)")
        self.assertIn("Religious ceremonies", panchang["vara"]["favorable"])
        self.assertEqual(panchang["tithi"]["deity"], "Lord Ganesha")

    def test_panchang_without_location_uses_default(self) -> None:
        self.assertEqual(panchang_for(date(2025, 10, 26), "")["location"], "New Delhi")
        self.assertEqual(format_gregorian(date(2025, 10, 26)), "Sunday, 26 October 2025")

    def test_find_muhurats_for_known_ceremony(self) -> None:
        result = find_muhurats("griha-pravesh", "  ")

        self.assertEqual(result["label"], "Griha Pravesh (Housewarming)")
        self.assertEqual(result["location"], "New Delhi")
        self.assertEqual(len(result["upcoming"]), 3)
        self.assertEqual(result["upcoming"][0]["nakshatra"], "Revati")
        self.assertEqual(result["daily"][0]["name"], "Abhijit Muhurat")

    def test_find_muhurats_rejects_unknown_ceremony(self) -> None:
        with self.assertRaises(UnknownCeremonyError):
            find_muhurats("mundan")


class PaymentTestCase(unittest.TestCase):
    def test_total_adds_pandit_fee_for_standard_duration(self) -> None:
        self.assertEqual(calculate_total(1100, 500), 2350)
        self.assertEqual(calculate_total(1000, 333), 1833)
        self.assertEqual(calculate_total("1500", None), 1500)

    def test_total_without_pandit_is_service_price(self) -> None:
        self.assertEqual(calculate_total(1499.5, 800, has_pandit=False), 1499.5)

    def test_booking_window_starts_tomorrow(self) -> None:
        first, last = booking_window(date(2025, 10, 1))

        self.assertEqual(first, date(2025, 10, 2))
        self.assertEqual(last, date(2025, 10, 31))
        self.assertFalse(is_bookable_date(date(2025, 10, 1), date(2025, 10, 1)))
        self.assertTrue(is_bookable_date(date(2025, 10, 31), date(2025, 10, 1)))
        self.assertFalse(is_bookable_date(date(2025, 11, 1), date(2025, 10, 1)))

    def test_payment_request_uses_online_razorpay_in_rupees(self) -> None:
        self.assertEqual(
            payment_request("b-1", 2350),
            {
                "bookingId": "b-1",
                "amount": 2350,
                "currency": "INR",
                "paymentMethod": "ONLINE",
                "paymentGateway": "razorpay",
            },
        )

    def test_checkout_options_amount_is_in_paise_with_prefill(self) -> None:
        options = checkout_options(
            key_id="rzp_test", order_id="order_1", amount=2350.5, service_name="Havan", user=USER
        )

        self.assertEqual(options["amount"], 235050)
        self.assertEqual(options["description"], "Payment for Havan")
        self.assertEqual(options["prefill"]["name"], "Asha Verma")
        self.assertEqual(options["prefill"]["contact"], "9876543210")
        self.assertEqual(options["theme"]["color"], "#ff6b35")

    def test_signature_is_checked_only_when_secret_configured(self) -> None:
        signature = expected_signature("order_1", "pay_1", "shh")

        verify_signature("order_1", "pay_1", signature, "shh")
        verify_signature("order_1", "pay_1", "anything", None)
        with self.assertRaises(PaymentVerificationError):
            verify_signature("order_1", "pay_1", "forged", "shh")
        with self.assertRaises(PaymentVerificationError):
            verify_signature("order_1", "", signature, "shh")


class BookingHelpersTestCase(unittest.TestCase):
    def test_pandit_transitions(self) -> None:
        self.assertEqual(allowed_transitions("PENDING"), {"CONFIRMED", "CANCELLED"})
        self.assertEqual(allowed_transitions("COMPLETED"), set())
        self.assertEqual(ensure_transition("CONFIRMED", "in_progress"), "IN_PROGRESS")
        with self.assertRaises(InvalidTransitionError):
            ensure_transition("PENDING", "COMPLETED")
        with self.assertRaises(InvalidTransitionError):
            ensure_transition(None, "CONFIRMED")

    def test_filter_and_group_by_status(self) -> None:
        bookings = [{"id": 1, "status": "PENDING"}, {"id": 2, "status": "COMPLETED"}, {"id": 3, "status": "NO_SHOW"}]

        self.assertEqual([b["id"] for b in filter_by_status(bookings, "completed")], [2])
        self.assertEqual(len(filter_by_status(bookings, "all")), 3)
        groups = group_for_pandit(bookings)
        self.assertEqual([b["id"] for b in groups["PENDING"]], [1])
        self.assertEqual(groups["CONFIRMED"], [])

    def test_period_start_clamps_month_end(self) -> None:
        now = datetime(2025, 3, 31, tzinfo=timezone.utc)
        self.assertEqual(period_start("month", now), datetime(2025, 2, 28, tzinfo=timezone.utc))
        self.assertEqual(period_start("year", now), datetime(2024, 3, 31, tzinfo=timezone.utc))
        with self.assertRaises(ValueError):
            period_start("decade", now)

    def test_earnings_summary_counts_paid_completed_bookings(self) -> None:
        now = datetime(2025, 10, 20, tzinfo=timezone.utc)
        bookings = [
            {"status": "COMPLETED", "paymentStatus": "PAID", "totalAmount": 2000, "completedAt": "2025-10-10T09:00:00Z"},
            {"status": "COMPLETED", "paymentStatus": "PAID", "totalAmount": "1500", "completedAt": "2025-06-01T09:00:00Z"},
            {"status": "COMPLETED", "paymentStatus": "PENDING", "totalAmount": 700},
            {"status": "CONFIRMED", "paymentStatus": "PAID", "totalAmount": 900},
        ]

        summary = summarize_earnings(bookings, "month", now)

        self.assertEqual(summary.total_earnings, 3500)
        self.assertEqual(summary.pending_earnings, 700)
        self.assertEqual(summary.period_earnings, 2000)
        self.assertEqual(summary.completed_count, 2)
        self.assertEqual(len(summary.bookings), 1)
        self.assertEqual(summary.period_label, "This Month")


class CatalogTestCase(unittest.TestCase):
    def test_filter_services_by_category_query_and_exclusions(self) -> None:
        services = fallback_services()

        self.assertTrue(all(s["category"] == "POOJA" for s in filter_services(services, "POOJA")))
        names = [s["name"] for s in filter_services(services, "all", "satyanarayan")]
        self.assertEqual(names, ["Satyanarayan Puja"])
        self.assertEqual(filter_services(services, "all", "satyanarayan", ["seed-puja-6"]), [])

    def test_service_counts(self) -> None:
        counts = service_counts(
            [
                {"category": "POOJA", "isVirtual": True},
                {"category": "astrology"},
                {"category": "HAVAN"},
            ]
        )
        self.assertEqual(counts, {"total": 3, "poojas": 1, "astrology": 1, "virtual": 1})

    def test_get_puja(self) -> None:
        self.assertEqual(get_puja("seed-puja-6").name, "Satyanarayan Puja")
        self.assertIsNone(get_puja("missing"))


class FormValidationTestCase(unittest.TestCase):
    def test_login_requires_valid_email_and_password(self) -> None:
        result = validate_login({"email": "not-an-email", "password": "123"})

        self.assertFalse(result.is_valid)
        self.assertEqual(result.errors["email"], "Invalid email address")
        self.assertEqual(result.errors["password"], "Password must be at least 6 characters")
        self.assertEqual(result.first_error(), "Invalid email address")

    def test_registration_checks_strength_and_confirmation(self) -> None:
        result = validate_registration(
            {
                "firstName": "Asha",
                "lastName": "Verma",
                "email": "asha@example.com",
                "phone": "9876543210",
                "password": "alllowercase1",
                "confirmPassword": "different",
            }
        )

        self.assertIn("uppercase letter", result.errors["password"])
        self.assertEqual(result.errors["confirmPassword"], "Passwords do not match")
        self.assertEqual(result.errors["acceptTerms"], "You must accept the terms and conditions")

    def test_password_strength(self) -> None:
        self.assertEqual(password_strength(""), (0, "Very Weak"))
        self.assertEqual(password_strength("Abcdefg1!"), (5, "Strong"))

    def test_pandit_onboarding_serializes_lists_as_json(self) -> None:
        result = validate_pandit_onboarding(ONBOARDING_FORM)

        self.assertTrue(result.is_valid, result.errors)
        self.assertEqual(result.data["role"], "PANDIT")
        self.assertEqual(result.data["experienceYears"], "12")
        self.assertEqual(json.loads(result.data["languagesSpoken"]), ["Hindi", "Sanskrit"])
        self.assertEqual(json.loads(result.data["achievements"]), [])

    def test_pandit_onboarding_limits(self) -> None:
        form = ONBOARDING_FORM.copy()
        form["experienceYears"] = "51"
        form["bio"] = "Too short"
        form.setlist("serviceAreas", [])

        result = validate_pandit_onboarding(form)

        self.assertEqual(result.errors["experienceYears"], "Maximum experience is 50 years")
        self.assertEqual(result.errors["bio"], "Bio must be at least 50 characters")
        self.assertEqual(result.errors["serviceAreas"], "Please select at least one service area")

    def test_review_rating_range(self) -> None:
        self.assertEqual(validate_review({"rating": "6", "comment": "ok"}).errors["rating"], "Rating must be between 1 and 5")
        self.assertEqual(validate_review({"rating": "", "comment": "ok"}).errors["rating"], "Please select a rating")
        self.assertTrue(validate_review({"rating": "5", "comment": "Wonderful"}).is_valid)

    def test_reschedule_combines_date_and_time(self) -> None:
        result = validate_reschedule({"bookingDate": "2025-11-02", "bookingTime": "10:00"})
        self.assertEqual(result.data, {"newDateTime": "2025-11-02T10:00"})

    def test_service_editor_parses_numbers_and_tags(self) -> None:
        result = validate_service(
            {"name": "Havan", "category": "HAVAN", "basePrice": "2100", "tags": "fire, havan, fire", "isActive": "on"}
        )

        self.assertTrue(result.is_valid, result.errors)
        self.assertEqual(result.data["basePrice"], 2100.0)
        self.assertEqual(result.data["durationMinutes"], 60)
        self.assertEqual(result.data["tags"], ["fire", "havan"])
        self.assertTrue(result.data["isActive"])
        self.assertFalse(result.data["isVirtual"])

    def test_service_editor_rejects_unknown_category(self) -> None:
        result = validate_service({"name": "Havan", "category": "YOGA", "basePrice": "-1"})
        self.assertEqual(result.errors["category"], "Please choose a valid category")
        self.assertEqual(result.errors["basePrice"], "Base price cannot be negative")


class TranslationTestCase(unittest.TestCase):
    def test_translate_falls_back_to_english_then_key(self) -> None:
        self.assertEqual(translate("common.cancel", "hi"), "रद्द करें")
        self.assertEqual(translate("footer.tagline", "hi"), "Connecting devotees with learned pandits.")
        self.assertEqual(translate("missing.key", "hi"), "missing.key")
        self.assertEqual(translate("common.cancel"), "Cancel")


class ContentApiTestCase(WebTestCase):
    def test_panchang_endpoint(self) -> None:
        response = self.client.get("/api/panchang?date=2025-10-23&location=Pune")

        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        data = response.get_json()["data"]
        self.assertEqual(data["vara"]["name"], "Thursday (Guruvaar)")
        self.assertEqual(data["location"], "Pune")

    def test_panchang_endpoint_rejects_bad_date(self) -> None:
        response = self.client.get("/api/panchang?date=yesterday")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST, response.get_data(as_text=True))
        self.assertEqual(response.get_json()["message"], "Date must use YYYY-MM-DD format.")

    def test_muhurat_endpoint_lists_ceremonies_without_query(self) -> None:
        response = self.client.get("/api/muhurat")

        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        ceremonies = [option["value"] for option in response.get_json()["data"]["ceremonies"]]
        self.assertIn("marriage", ceremonies)

    def test_muhurat_endpoint(self) -> None:
        response = self.client.get("/api/muhurat?ceremony=vehicle")
        self.assertEqual(response.get_json()["data"]["upcoming"][0]["date"], "October 23, 2025")

        response = self.client.get("/api/muhurat?ceremony=mundan")
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST, response.get_data(as_text=True))


if __name__ == "__main__":
    unittest.main()
