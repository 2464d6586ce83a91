"""Homepage content aggregation.

The backend exposes a combined ``/homepage`` endpoint. When it is missing or
fails, the featured pandits and services are assembled from the search
endpoints instead, queried concurrently, and reshaped into the same cards.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from mantrasetu.app.services.api_client import ApiClient, ApiError, unwrap
from mantrasetu.app.services.placeholder import pandit_placeholder, service_placeholder

LOGGER = logging.getLogger(__name__)

FEATURED_LIMIT = 4
DEFAULT_PANDIT_RATING = 4.5
DEFAULT_SERVICE_DURATION = 60
FALLBACK_ERROR = "Failed to load homepage content"


@dataclass(slots=True)
class HeroContent:
    title: str
    description: str
    button_text: str
    button_link: str
    image_url: str | None = None
    image_alt: str | None = None


@dataclass(slots=True)
class PanditCard:
    id: str
    name: str
    title: str
    rating: float
    experience: str
    specializations: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    image: str | None = None
    hourly_rate: float = 0.0
    bio: str = ""
    is_verified: bool = False


@dataclass(slots=True)
class ServiceCard:
    id: str
    name: str
    description: str
    link: str
    image: str | None = None
    category: str | None = None
    base_price: float = 0.0
    duration_minutes: int = DEFAULT_SERVICE_DURATION
    is_virtual: bool = False


@dataclass(slots=True)
class HomepageStats:
    total_pandits: int = 0
    total_services: int = 0
    total_bookings: int = 0
    average_rating: float = 0.0


@dataclass(slots=True)
class HomepageContent:
    hero: HeroContent
    featured_pandits: list[PanditCard] = field(default_factory=list)
    featured_services: list[ServiceCard] = field(default_factory=list)
    stats: HomepageStats = field(default_factory=HomepageStats)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the backend's camelCase field names."""

        return {
            "hero": {
                "title": self.hero.title,
                "description": self.hero.description,
                "buttonText": self.hero.button_text,
                "buttonLink": self.hero.button_link,
                "imageUrl": self.hero.image_url,
                "imageAlt": self.hero.image_alt,
            },
            "featuredPandits": [
                {
                    "id": card.id,
                    "name": card.name,
                    "title": card.title,
                    "rating": card.rating,
                    "experience": card.experience,
                    "specializations": card.specializations,
                    "languages": card.languages,
                    "image": card.image,
                    "hourlyRate": card.hourly_rate,
                    "bio": card.bio,
                    "isVerified": card.is_verified,
                }
                for card in self.featured_pandits
            ],
            "featuredServices": [
                {
                    "id": card.id,
                    "name": card.name,
                    "description": card.description,
                    "image": card.image,
                    "link": card.link,
                    "category": card.category,
                    "basePrice": card.base_price,
                    "durationMinutes": card.duration_minutes,
                    "isVirtual": card.is_virtual,
                }
                for card in self.featured_services
            ],
            "stats": {
                "totalPandits": self.stats.total_pandits,
                "totalServices": self.stats.total_services,
                "totalBookings": self.stats.total_bookings,
                "averageRating": self.stats.average_rating,
            },
        }


@dataclass(slots=True)
class HomepageResult:
    content: HomepageContent
    error: str | None = None


def default_hero() -> HeroContent:
    return HeroContent(
        title="Authentic Rituals, Guided by Learned Pandits",
        description=(
            "Book Verified Pandits for Astrology, Grih Pravesh, Satyanarayan, "
            "and all rituals on MantraSetu."
        ),
        button_text="Book Pandit Ji",
        button_link="/services",
    )


def _to_float(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    # NaN and zero both fall back to the default
    if number != number or number == 0:
        return default
    return number


def transform_pandit(raw: dict[str, Any]) -> PanditCard:
    """Reshape a pandit search record into a homepage card."""

    user = raw.get("user") or {}
    first_name = user.get("firstName") or ""
    last_name = user.get("lastName") or ""
    return PanditCard(
        id=str(raw.get("id")),
        name=f"{first_name} {last_name}",
        title="Vedic Scholar",
        rating=_to_float(raw.get("rating"), DEFAULT_PANDIT_RATING),
        experience=f"{raw.get('experienceYears')}+ years",
        specializations=list(raw.get("specialization") or []),
        languages=list(raw.get("languagesSpoken") or []),
        image=user.get("profileImageUrl") or pandit_placeholder(first_name),
        hourly_rate=_to_float(raw.get("hourlyRate"), 0.0),
        bio=raw.get("bio") or "",
        is_verified=bool(raw.get("isVerified")),
    )


def transform_service(raw: dict[str, Any]) -> ServiceCard:
    """Reshape a service search record into a homepage card."""

    name = raw.get("name") or ""
    return ServiceCard(
        id=str(raw.get("id")),
        name=name,
        description=raw.get("description") or "",
        image=raw.get("imageUrl") or service_placeholder(name),
        link=f"/services/{raw.get('id')}",
        category=raw.get("category"),
        base_price=_to_float(raw.get("basePrice"), 0.0),
        duration_minutes=raw.get("durationMinutes") or DEFAULT_SERVICE_DURATION,
        is_virtual=bool(raw.get("isVirtual")),
    )


def parse_homepage(data: dict[str, Any]) -> HomepageContent:
    """Parse the combined endpoint's ``data`` block."""

    hero_data = data.get("hero") or {}
    fallback_hero = default_hero()
    hero = HeroContent(
        title=hero_data.get("title") or fallback_hero.title,
        description=hero_data.get("description") or fallback_hero.description,
        button_text=hero_data.get("buttonText") or fallback_hero.button_text,
        button_link=hero_data.get("buttonLink") or fallback_hero.button_link,
        image_url=hero_data.get("imageUrl"),
        image_alt=hero_data.get("imageAlt"),
    )

    pandits = [
        PanditCard(
            id=str(item.get("id")),
            name=item.get("name") or "",
            title=item.get("title") or "Vedic Scholar",
            rating=_to_float(item.get("rating"), DEFAULT_PANDIT_RATING),
            experience=item.get("experience") or "",
            specializations=list(item.get("specializations") or []),
            languages=list(item.get("languages") or []),
            image=item.get("image") or pandit_placeholder(item.get("name") or ""),
            hourly_rate=_to_float(item.get("hourlyRate"), 0.0),
            bio=item.get("bio") or "",
            is_verified=bool(item.get("isVerified")),
        )
        for item in data.get("featuredPandits") or []
    ]

    services = [
        ServiceCard(
            id=str(item.get("id")),
            name=item.get("name") or "",
            description=item.get("description") or "",
            image=item.get("image") or service_placeholder(item.get("name") or ""),
            link=item.get("link") or f"/services/{item.get('id')}",
            category=item.get("category"),
            base_price=_to_float(item.get("basePrice"), 0.0),
            duration_minutes=item.get("durationMinutes") or DEFAULT_SERVICE_DURATION,
            is_virtual=bool(item.get("isVirtual")),
        )
        for item in data.get("featuredServices") or []
    ]

    stats_data = data.get("stats") or {}
    stats = HomepageStats(
        total_pandits=int(stats_data.get("totalPandits") or 0),
        total_services=int(stats_data.get("totalServices") or 0),
        total_bookings=int(stats_data.get("totalBookings") or 0),
        average_rating=float(stats_data.get("averageRating") or 0),
    )
    return HomepageContent(hero=hero, featured_pandits=pandits, featured_services=services, stats=stats)


def _load_combined(client: ApiClient) -> HomepageContent | None:
    try:
        response = client.homepage.get()
        if isinstance(response, dict) and response.get("success") and response.get("data"):
            return parse_homepage(response["data"])
    except (ApiError, AttributeError, TypeError, ValueError) as exc:
        LOGGER.warning("Homepage API not available, falling back to individual APIs: %s", exc)
    return None


def _load_from_searches(client: ApiClient) -> HomepageContent:
    with ThreadPoolExecutor(max_workers=2) as executor:
        pandits_future = executor.submit(
            client.pandits.search,
            {
                "limit": FEATURED_LIMIT,
                "isVerified": True,
                "sortBy": "rating",
                "sortOrder": "desc",
            },
        )
        services_future = executor.submit(
            client.services.search,
            {
                "limit": FEATURED_LIMIT,
                "isActive": True,
                "sortBy": "popularity",
                "sortOrder": "desc",
            },
        )
        pandits_data = unwrap(pandits_future.result()) or {}
        services_data = unwrap(services_future.result()) or {}

    featured_pandits = [transform_pandit(item) for item in pandits_data.get("pandits") or []]
    featured_services = [transform_service(item) for item in services_data.get("services") or []]

    average_rating = 0.0
    if featured_pandits:
        average_rating = sum(card.rating for card in featured_pandits) / len(featured_pandits)

    stats = HomepageStats(
        total_pandits=int(pandits_data.get("total") or 0),
        total_services=int(services_data.get("total") or 0),
        total_bookings=0,
        average_rating=average_rating,
    )
    return HomepageContent(
        hero=default_hero(),
        featured_pandits=featured_pandits,
        featured_services=featured_services,
        stats=stats,
    )


def load_homepage(client: ApiClient) -> HomepageResult:
    """Return homepage content, degrading to empty defaults on failure.

    Homepage data is public and is always fetched without the visitor's token.
    """

    client = client.anonymous()
    combined = _load_combined(client)
    if combined is not None:
        return HomepageResult(content=combined)

    try:
        return HomepageResult(content=_load_from_searches(client))
    except Exception as exc:  # noqa: BLE001 - any failure degrades to defaults
        LOGGER.error("Error fetching homepage data: %s", exc)
        if isinstance(exc, ApiError):
            message = exc.message or FALLBACK_ERROR
        else:
            message = str(exc) or FALLBACK_ERROR
        return HomepageResult(content=HomepageContent(hero=default_hero()), error=message)


def find_featured_pandit(content: HomepageContent, pandit_id: str) -> PanditCard | None:
    for card in content.featured_pandits:
        if card.id == pandit_id:
            return card
    return None
