"""Tests for homepage aggregation and its fallback paths."""
from __future__ import annotations

import math
from http import HTTPStatus
import unittest

from flask import session

from mantrasetu.app.services.api_client import get_client
from mantrasetu.app.services.homepage import (
    default_hero,
    load_homepage,
    parse_homepage,
    transform_pandit,
    transform_service,
)
from mantrasetu.app.services.placeholder import (
    generate_placeholder_image,
    large_service_placeholder,
    pandit_placeholder,
    service_placeholder,
)

from fake_backend import USER, WebTestCase, envelope

PANDIT_RECORD = {
    "id": 7,
    "rating": 4.8,
    "experienceYears": 12,
    "specialization": ["Vedic Rituals"],
    "languagesSpoken": ["Hindi", "Sanskrit"],
    "hourlyRate": 600,
    "isVerified": True,
    "user": {"firstName": "Ravi", "lastName": "Shastri"},
}
SERVICE_RECORD = {
    "id": "svc-1",
    "name": "Griha Pravesh",
    "description": "Housewarming ceremony",
    "category": "POOJA",
    "basePrice": 3100,
    "durationMinutes": 150,
}


class PlaceholderTestCase(unittest.TestCase):
    def test_placeholder_is_svg_data_uri_with_dimensions(self) -> None:
        uri = generate_placeholder_image(120, 80, "AB", "#000000", "#ffffff")
        self.assertTrue(uri.startswith("data:image/svg+xml,"))
        self.assertIn("width%3D%22120%22", uri)
        self.assertIn("height%3D%2280%22", uri)
        self.assertIn("%3EAB%3C", uri)

    def test_named_placeholders_use_initials(self) -> None:
        self.assertIn("width%3D%22150%22", pandit_placeholder("ravi"))
        self.assertIn("%3ER%3C", pandit_placeholder("ravi"))
        self.assertIn("%3EGR%3C", service_placeholder("griha pravesh"))
        self.assertIn("width%3D%22400%22", large_service_placeholder("havan"))


class HomepageTransformTestCase(unittest.TestCase):
    def test_transform_pandit_builds_card(self) -> None:
        card = transform_pandit(PANDIT_RECORD)

        self.assertEqual(card.id, "7")
        self.assertEqual(card.name, "Ravi Shastri")
        self.assertEqual(card.title, "Vedic Scholar")
        self.assertEqual(card.rating, 4.8)
        self.assertEqual(card.experience, "12+ years")
        self.assertEqual(card.languages, ["Hindi", "Sanskrit"])
        self.assertTrue(card.image.startswith("data:image/svg+xml,"))
        self.assertTrue(card.is_verified)

    def test_transform_pandit_defaults_missing_or_zero_rating(self) -> None:
        for rating in (None, 0, "n/a", math.nan):
            with self.subTest(rating=rating):
                card = transform_pandit({**PANDIT_RECORD, "rating": rating})
                self.assertEqual(card.rating, 4.5)

    def test_transform_pandit_prefers_profile_image(self) -> None:
        raw = {**PANDIT_RECORD, "user": {**PANDIT_RECORD["user"], "profileImageUrl": "https://cdn/p.jpg"}}
        self.assertEqual(transform_pandit(raw).image, "https://cdn/p.jpg")

    def test_transform_service_links_to_detail_page(self) -> None:
        card = transform_service(SERVICE_RECORD)
        self.assertEqual(card.link, "/services/svc-1")
        self.assertEqual(card.base_price, 3100)
        self.assertEqual(card.duration_minutes, 150)

    def test_parse_homepage_falls_back_to_default_hero_fields(self) -> None:
        content = parse_homepage({"hero": {"title": "Custom"}, "stats": {"totalPandits": 12}})
        self.assertEqual(content.hero.title, "Custom")
        self.assertEqual(content.hero.button_link, default_hero().button_link)
        self.assertEqual(content.stats.total_pandits, 12)
        self.assertEqual(content.to_dict()["stats"]["totalPandits"], 12)


class HomepageLoadingTestCase(WebTestCase):
    """Load homepage content through the fake backend."""

    def _load(self):
        with self.app.test_request_context():
            return load_homepage(get_client())

    def test_combined_endpoint_is_used_when_available(self) -> None:
        self.backend.add(
            "GET",
            "/homepage",
            envelope(
                {
                    "hero": {"title": "Welcome"},
                    "featuredPandits": [{"id": "p1", "name": "Ravi Shastri", "rating": 4.9}],
                    "featuredServices": [{"id": "s1", "name": "Havan"}],
                    "stats": {"totalPandits": 40, "averageRating": 4.7},
                }
            ),
        )

        result = self._load()

        self.assertIsNone(result.error)
        self.assertEqual(result.content.hero.title, "Welcome")
        self.assertEqual(result.content.featured_pandits[0].name, "Ravi Shastri")
        self.assertEqual(result.content.featured_services[0].link, "/services/s1")
        self.assertEqual(self.backend.calls("GET", "/pandits/search"), [])

    def test_search_endpoints_fill_in_when_combined_endpoint_fails(self) -> None:
        self.backend.add("GET", "/homepage", {"message": "missing"}, status=HTTPStatus.NOT_FOUND)
        self.backend.add(
            "GET",
            "/pandits/search",
            envelope({"pandits": [PANDIT_RECORD, {**PANDIT_RECORD, "id": 8, "rating": 4.2}], "total": 25}),
        )
        self.backend.add("GET", "/services/search", envelope({"services": [SERVICE_RECORD], "total": 9}))

        result = self._load()

        self.assertIsNone(result.error)
        self.assertEqual(result.content.hero, default_hero())
        self.assertEqual(len(result.content.featured_pandits), 2)
        self.assertEqual(result.content.stats.total_pandits, 25)
        self.assertEqual(result.content.stats.total_services, 9)
        self.assertEqual(result.content.stats.total_bookings, 0)
        self.assertAlmostEqual(result.content.stats.average_rating, 4.5)

        pandit_query = self.backend.calls("GET", "/pandits/search")[0].url.params
        self.assertEqual(pandit_query.get("limit"), "4")
        self.assertEqual(pandit_query.get("isVerified"), "true")
        self.assertEqual(pandit_query.get("sortBy"), "rating")
        service_query = self.backend.calls("GET", "/services/search")[0].url.params
        self.assertEqual(service_query.get("sortBy"), "popularity")

    def test_homepage_requests_are_anonymous(self) -> None:
        self.backend.add("GET", "/pandits/search", envelope({"pandits": [], "total": 0}))
        self.backend.add("GET", "/services/search", envelope({"services": [], "total": 0}))

        with self.app.test_request_context():
            session["token"] = "access-1"
            load_homepage(get_client())

        for path in ("/homepage", "/pandits/search", "/services/search"):
            self.assertNotIn("Authorization", self.backend.calls("GET", path)[0].headers)

    def test_stale_session_still_gets_homepage(self) -> None:
        self.sign_in(USER)
        self.backend.add("GET", "/homepage", {"message": "Unauthorized"}, status=HTTPStatus.UNAUTHORIZED)
        self.backend.add("POST", "/auth/refresh", {"message": "invalid"}, status=HTTPStatus.UNAUTHORIZED)
        self.backend.add("GET", "/pandits/search", envelope({"pandits": [PANDIT_RECORD], "total": 1}))
        self.backend.add("GET", "/services/search", envelope({"services": [], "total": 0}))

        response = self.client.get("/")

        body = response.get_data(as_text=True)
        self.assertEqual(response.status_code, HTTPStatus.OK, body)
        self.assertIn("Ravi Shastri", body)
        self.assertEqual(self.backend.calls("POST", "/auth/refresh"), [])
        self.assertEqual(self.session_value("token"), "access-1")

    def test_total_failure_returns_defaults_with_message(self) -> None:
        self.backend.add("GET", "/pandits/search", {"message": "Search is down"}, status=500)
        self.backend.add("GET", "/services/search", envelope({"services": [], "total": 0}))

        result = self._load()

        self.assertEqual(result.error, "Search is down")
        self.assertEqual(result.content.hero, default_hero())
        self.assertEqual(result.content.featured_pandits, [])
        self.assertEqual(result.content.stats.total_pandits, 0)

    def test_failure_without_message_uses_generic_text(self) -> None:
        self.backend.add("GET", "/pandits/search", None, status=500)
        self.backend.add("GET", "/services/search", None, status=500)

        result = self._load()

        self.assertEqual(result.error, "Something went wrong. Please try again.")

    def test_homepage_json_endpoint(self) -> None:
        self.backend.add("GET", "/pandits/search", envelope({"pandits": [PANDIT_RECORD], "total": 1}))
        self.backend.add("GET", "/services/search", envelope({"services": [], "total": 0}))

        response = self.client.get("/api/homepage", headers={"Origin": "http://example.com"})

        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        data = response.get_json()
        self.assertTrue(data["success"])
        self.assertEqual(data["data"]["featuredPandits"][0]["name"], "Ravi Shastri")
        self.assertEqual(data["data"]["hero"]["buttonText"], "Book Pandit Ji")
        self.assertIn("Access-Control-Allow-Origin", response.headers)

    def test_homepage_page_renders_featured_cards(self) -> None:
        self.backend.add("GET", "/pandits/search", envelope({"pandits": [PANDIT_RECORD], "total": 1}))
        self.backend.add("GET", "/services/search", envelope({"services": [SERVICE_RECORD], "total": 1}))

        response = self.client.get("/")

        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        body = response.get_data(as_text=True)
        self.assertIn("Ravi Shastri", body)
        self.assertIn("Griha Pravesh", body)
        self.assertIn("Satyanarayan Puja", body)


if __name__ == "__main__":
    unittest.main()
