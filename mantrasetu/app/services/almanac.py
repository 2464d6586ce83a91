"""Panchang and Muhurat content.

Only the Gregorian date and the weekday are computed; the almanac readings
themselves are fixed sample values until a real ephemeris source exists.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

DEFAULT_LOCATION = "New Delhi"

_VARA = {
    0: {"name": "Monday (Somvaar)", "lord": "Moon (Chandra)", "color": "White", "deity": "Lord Shiva"},
    1: {
        "name": "Tuesday (Mangalvaar)",
        "lord": "Mars (Mangal)",
        "color": "Red",
        "deity": "Lord Hanuman & Kartikeya",
    },
    2: {"name": "Wednesday (Budhvaar)", "lord": "Mercury (Budh)", "color": "Green", "deity": "Lord Ganesha"},
    3: {"name": "Thursday (Guruvaar)", "lord": "Jupiter (Guru)", "color": "Yellow", "deity": "Lord Vishnu"},
    4: {"name": "Friday (Shukravaar)", "lord": "Venus (Shukra)", "color": "White", "deity": "Goddess Lakshmi"},
    5: {"name": "Saturday (Shanivaar)", "lord": "Saturn (Shani)", "color": "Black", "deity": "Lord Shani"},
    6: {"name": "Sunday (Ravivaar)", "lord": "Sun (Surya)", "color": "Orange", "deity": "Lord Surya"},
}

_VARA_FAVORABLE = {
    0: ["Shiva worship", "Starting studies", "Travel"],
    1: ["Exercise", "Courage-building", "Property matters"],
    2: ["Business dealings", "Learning", "Communication"],
    3: ["Religious ceremonies", "Education", "Seeking guidance"],
    4: ["Arts and music", "Purchases", "Celebrations"],
    5: ["Charity", "Service to elders", "Discipline"],
    6: ["Health matters", "Government work", "Surya puja"],
}

_PANCHANG_BASE: dict[str, Any] = {
    "hindiDate": "Ashwin Krishna Paksha Chaturthi",
    "vikramSamvat": "2082",
    "shakaSamvat": "1947",
    "kaliSamvat": "5126",
    "tithi": {
        "name": "Chaturthi (4th Lunar Day)",
        "paksha": "Krishna Paksha (Waning Phase)",
        "endTime": "06:42 AM",
        "deity": "Lord Ganesha",
        "significance": "Good for removing obstacles, seeking wisdom",
        "auspicious": True,
    },
    "nakshatra": {
        "name": "Hasta",
        "lord": "Moon",
        "endTime": "08:15 PM",
        "deity": "Savitar (Sun God)",
        "characteristics": "Intelligence, craftsmanship, healing",
        "auspicious": True,
    },
    "yoga": {
        "name": "Shiva",
        "endTime": "02:30 PM",
        "deity": "Lord Shiva",
        "effect": "Auspicious for spiritual practices and meditation",
        "auspicious": True,
    },
    "karana": {
        "name": "Vanija",
        "type": "Movable",
        "endTime": "05:20 PM",
        "effect": "Good for business and trade activities",
        "auspicious": True,
    },
    "timings": {
        "sunrise": "06:28 AM",
        "sunset": "06:02 PM",
        "moonrise": "10:45 PM",
        "moonset": "12:20 PM",
        "dayDuration": "11h 34m",
    },
    "inauspicious": [
        {
            "name": "Rahu Kaal",
            "time": "03:15 PM - 04:45 PM",
            "description": "Avoid starting new ventures during this period",
            "severity": "high",
        },
        {
            "name": "Yamagandam",
            "time": "09:00 AM - 10:30 AM",
            "description": "Inauspicious for important activities",
            "severity": "medium",
        },
        {
            "name": "Gulika Kaal",
            "time": "12:00 PM - 01:30 PM",
            "description": "Not favorable for auspicious work",
            "severity": "medium",
        },
    ],
    "auspicious": [
        {
            "name": "Abhijit Muhurat",
            "time": "11:48 AM - 12:36 PM",
            "description": "Most auspicious time for any important work",
            "activity": "All auspicious activities",
        },
        {
            "name": "Amrit Kaal",
            "time": "07:30 AM - 09:05 AM",
            "description": "Highly favorable for spiritual practices",
            "activity": "Puja, meditation, learning",
        },
    ],
    "festivals": [
        {"name": "Regular Day", "description": "No major festival today", "type": "normal"},
    ],
    "recommendations": {
        "favorable": [
            "Worship Lord Ganesha on Chaturthi",
            "Start new learning or skill development",
            "Business meetings and trade activities",
            "Health and fitness activities",
        ],
        "avoid": [
            "Marriage ceremonies (not ideal day)",
            "Starting major construction work",
            "Long-distance travel during Rahu Kaal",
            "Important decisions during inauspicious periods",
        ],
    },
}

CEREMONY_TYPES: list[dict[str, str]] = [
    {"value": "marriage", "label": "Marriage / Wedding"},
    {"value": "griha-pravesh", "label": "Griha Pravesh (Housewarming)"},
    {"value": "business", "label": "New Business / Shop Opening"},
    {"value": "vehicle", "label": "Vehicle Purchase"},
    {"value": "namkaran", "label": "Namkaran (Naming Ceremony)"},
    {"value": "education", "label": "Education / Vidyarambham"},
]


def _muhurat(date_label: str, day: str, window: str, nakshatra: str, quality: str) -> dict[str, str]:
    return {"date": date_label, "day": day, "time": window, "nakshatra": nakshatra, "quality": quality}


UPCOMING_MUHURATS: dict[str, list[dict[str, str]]] = {
    "marriage": [
        _muhurat("November 25, 2025", "Tuesday", "10:30 AM - 12:15 PM", "Rohini", "Excellent"),
        _muhurat("November 28, 2025", "Friday", "09:45 AM - 11:30 AM", "Uttara Phalguni", "Very Good"),
        _muhurat("December 5, 2025", "Friday", "11:00 AM - 01:00 PM", "Hasta", "Excellent"),
    ],
    "griha-pravesh": [
        _muhurat("November 3, 2025", "Monday", "07:30 AM - 09:15 AM", "Revati", "Excellent"),
        _muhurat("November 10, 2025", "Monday", "08:00 AM - 10:00 AM", "Ashwini", "Very Good"),
        _muhurat("November 17, 2025", "Monday", "09:30 AM - 11:15 AM", "Mrigashira", "Good"),
    ],
    "business": [
        _muhurat("October 30, 2025", "Thursday", "10:15 AM - 12:00 PM", "Pushya", "Excellent"),
        _muhurat("November 6, 2025", "Thursday", "11:00 AM - 12:45 PM", "Uttara Phalguni", "Very Good"),
        _muhurat("November 13, 2025", "Thursday", "09:30 AM - 11:15 AM", "Hasta", "Excellent"),
    ],
    "vehicle": [
        _muhurat("October 23, 2025", "Thursday", "11:45 AM - 01:30 PM", "Ashwini", "Excellent"),
        _muhurat("October 27, 2025", "Monday", "10:00 AM - 11:45 AM", "Swati", "Very Good"),
        _muhurat("November 3, 2025", "Monday", "09:15 AM - 11:00 AM", "Shravana", "Excellent"),
    ],
    "namkaran": [
        _muhurat("October 24, 2025", "Friday", "08:30 AM - 10:15 AM", "Pushya", "Excellent"),
        _muhurat("October 31, 2025", "Friday", "09:00 AM - 10:45 AM", "Rohini", "Very Good"),
        _muhurat("November 7, 2025", "Friday", "10:00 AM - 11:45 AM", "Ashwini", "Excellent"),
    ],
    "education": [
        _muhurat("October 29, 2025", "Wednesday", "08:45 AM - 10:30 AM", "Hasta", "Excellent"),
        _muhurat("November 5, 2025", "Wednesday", "09:30 AM - 11:15 AM", "Revati", "Very Good"),
        _muhurat("November 12, 2025", "Wednesday", "10:15 AM - 12:00 PM", "Swati", "Good"),
    ],
}

DAILY_MUHURATS: list[dict[str, str]] = [
    {
        "name": "Abhijit Muhurat",
        "time": "11:48 AM - 12:36 PM",
        "description": "Most auspicious 48-minute window around noon, suitable for any important work",
        "suitable": "All ceremonies and important activities",
    },
    {
        "name": "Amrit Kaal",
        "time": "07:30 AM - 09:05 AM",
        "description": "Highly favorable nectar period for spiritual activities",
        "suitable": "Puja, meditation, religious ceremonies",
    },
    {
        "name": "Brahma Muhurat",
        "time": "04:45 AM - 05:30 AM",
        "description": "Sacred early morning period ideal for spiritual practices",
        "suitable": "Yoga, meditation, study of scriptures",
    },
]


class UnknownCeremonyError(ValueError):
    """Raised when a muhurat is requested for an unsupported ceremony."""


def format_gregorian(day: date) -> str:
    """Render a date the way the Indian English locale spells it out."""

    return f"{day.strftime('%A')}, {day.day} {day.strftime('%B %Y')}"


def parse_date(value: str | None, *, today: date | None = None) -> date:
    """Parse ``YYYY-MM-DD``; empty values mean today."""

    if not value:
        return today or date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError("Date must use YYYY-MM-DD format.") from exc


def panchang_for(day: date, location: str = DEFAULT_LOCATION) -> dict[str, Any]:
    """Return the almanac for ``day``."""

    weekday = day.weekday()
    vara = dict(_VARA[weekday])
    vara["favorable"] = list(_VARA_FAVORABLE[weekday])

    payload = dict(_PANCHANG_BASE)
    payload.update(
        {
            "date": day.isoformat(),
            "gregorianDate": format_gregorian(day),
            "location": location or DEFAULT_LOCATION,
            "vara": vara,
        }
    )
    return payload


def ceremony_label(ceremony: str) -> str | None:
    for option in CEREMONY_TYPES:
        if option["value"] == ceremony:
            return option["label"]
    return None


def find_muhurats(ceremony: str, location: str | None = None) -> dict[str, Any]:
    """Return upcoming auspicious windows for ``ceremony``."""

    label = ceremony_label(ceremony)
    if label is None:
        raise UnknownCeremonyError(f"Unknown ceremony type: {ceremony}")
    return {
        "ceremony": ceremony,
        "label": label,
        "location": (location or "").strip() or DEFAULT_LOCATION,
        "upcoming": list(UPCOMING_MUHURATS[ceremony]),
        "daily": list(DAILY_MUHURATS),
    }
