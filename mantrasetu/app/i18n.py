"""Translation catalog for interface strings."""
from __future__ import annotations

from flask import current_app, has_request_context, session

DEFAULT_LANGUAGE = "en"

LANGUAGES: list[dict[str, str]] = [
    {"code": "en", "label": "English", "native": "English"},
    {"code": "hi", "label": "Hindi", "native": "हिन्दी"},
]

CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "nav.home": "Home",
        "nav.services": "Services",
        "nav.panchang": "Panchang",
        "nav.muhurat": "Muhurat",
        "nav.contact": "Contact",
        "nav.login": "Login",
        "nav.register": "Register",
        "nav.logout": "Logout",
        "nav.dashboard": "Dashboard",
        "nav.bookings": "My Bookings",
        "nav.profile": "Profile",
        "nav.enrollment": "Service Enrollment",
        "nav.become_pandit": "Become a Pandit",
        "nav.admin": "Admin",
        "home.featured_pandits": "Featured Pandits",
        "home.featured_services": "Popular Services",
        "home.special_pujas": "Special Pujas",
        "home.stats.pandits": "Verified Pandits",
        "home.stats.services": "Services",
        "home.stats.rating": "Average Rating",
        "services.title": "Our Services",
        "services.search": "Search services",
        "services.book": "Book Now",
        "services.empty": "No services match your search.",
        "booking.select_pandit": "Select a Pandit",
        "booking.select_date": "Select Date",
        "booking.select_time": "Select Time",
        "booking.confirm": "Confirm Booking",
        "booking.pay": "Pay Now",
        "booking.total": "Total Amount",
        "booking.success": "Booking Confirmed!",
        "common.submit": "Submit",
        "common.save": "Save",
        "common.cancel": "Cancel",
        "common.view": "View",
        "common.delete": "Delete",
        "footer.tagline": "Connecting devotees with learned pandits.",
    },
    "hi": {
        "nav.home": "होम",
        "nav.services": "सेवाएं",
        "nav.panchang": "पंचांग",
        "nav.muhurat": "मुहूर्त",
        "nav.contact": "संपर्क",
        "nav.login": "लॉगिन",
        "nav.register": "रजिस्टर",
        "nav.logout": "लॉगआउट",
        "nav.dashboard": "डैशबोर्ड",
        "nav.bookings": "मेरी बुकिंग",
        "nav.profile": "प्रोफ़ाइल",
        "nav.enrollment": "सेवा नामांकन",
        "nav.become_pandit": "पंडित बनें",
        "nav.admin": "एडमिन",
        "home.featured_pandits": "विशेष पंडित",
        "home.featured_services": "लोकप्रिय सेवाएं",
        "home.special_pujas": "विशेष पूजा",
        "home.stats.pandits": "सत्यापित पंडित",
        "home.stats.services": "सेवाएं",
        "home.stats.rating": "औसत रेटिंग",
        "services.title": "हमारी सेवाएं",
        "services.search": "सेवाएं खोजें",
        "services.book": "अभी बुक करें",
        "services.empty": "आपकी खोज से कोई सेवा मेल नहीं खाती।",
        "booking.select_pandit": "पंडित चुनें",
        "booking.select_date": "तारीख चुनें",
        "booking.select_time": "समय चुनें",
        "booking.confirm": "बुकिंग की पुष्टि करें",
        "booking.pay": "अभी भुगतान करें",
        "booking.total": "कुल राशि",
        "booking.success": "बुकिंग की पुष्टि हो गई!",
        "common.submit": "जमा करें",
        "common.save": "सहेजें",
        "common.cancel": "रद्द करें",
        "common.view": "देखें",
        "common.delete": "हटाएं",
    },
}


def is_supported(code: str | None) -> bool:
    return code in CATALOG


def active_language() -> str:
    if has_request_context():
        code = session.get("language")
        if is_supported(code):
            return code
        configured = current_app.config.get("DEFAULT_LANGUAGE", DEFAULT_LANGUAGE)
        if is_supported(configured):
            return configured
    return DEFAULT_LANGUAGE


def translate(key: str, language: str | None = None) -> str:
    """Look ``key`` up in the active language, then English, then echo it."""

    code = language or active_language()
    value = CATALOG.get(code, {}).get(key)
    if value is None:
        value = CATALOG[DEFAULT_LANGUAGE].get(key, key)
    return value


t = translate
