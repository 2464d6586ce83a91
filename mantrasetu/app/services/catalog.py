"""Static catalog content shipped with the web client.

The puja catalog backs the services pages whenever the backend has nothing to
offer, and the option lists drive the pandit onboarding form.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

ALL_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

SERVICE_CATEGORIES = ["POOJA", "ASTROLOGY", "HAVAN", "KATHA", "SPECIAL_OCCASION", "CONSULTATION"]

CATEGORY_FILTERS: list[dict[str, str]] = [
    {"value": "all", "label": "All Services"},
    {"value": "POOJA", "label": "Poojas"},
    {"value": "ASTROLOGY", "label": "Astrology"},
    {"value": "HAVAN", "label": "Havan"},
    {"value": "KATHA", "label": "Katha"},
    {"value": "SPECIAL_OCCASION", "label": "Special Occasions"},
    {"value": "CONSULTATION", "label": "Consultation"},
]

CATEGORY_ICONS = {
    "POOJA": "\U0001F549\ufe0f",
    "ASTROLOGY": "\U0001F52E",
    "HAVAN": "\U0001F525",
    "KATHA": "\U0001F4D6",
    "SPECIAL_OCCASION": "\U0001F389",
    "CONSULTATION": "\U0001F4AC",
    "VIRTUAL": "\U0001F4BB",
}
DEFAULT_CATEGORY_ICON = "✨"

PANDIT_LANGUAGES = [
    "Hindi",
    "Sanskrit",
    "English",
    "Tamil",
    "Telugu",
    "Bengali",
    "Gujarati",
    "Marathi",
    "Kannada",
    "Malayalam",
    "Punjabi",
    "Assamese",
]

PANDIT_SPECIALIZATIONS = [
    "वैदिक अनुष्ठान (Vedic Rituals)",
    "ज्योतिष (Astrology)",
    "विवाह संस्कार (Marriage Ceremonies)",
    "गृह प्रवेश (House Warming)",
    "नामकरण (Naming Ceremony)",
    "अन्नप्राशन (First Feeding)",
    "मुंडन (Hair Cutting)",
    "यज्ञ (Yajna)",
    "पूजा (Puja)",
    "हवन (Havan)",
    "संस्कार (Sanskar)",
    "व्रत (Vrat)",
    "अन्य (Other)",
]

PANDIT_SERVICE_AREAS = [
    "Delhi NCR",
    "Mumbai",
    "Bangalore",
    "Chennai",
    "Kolkata",
    "Hyderabad",
    "Pune",
    "Ahmedabad",
    "Jaipur",
    "Lucknow",
    "Online Puja",
    "PAN India",
    "North Zone",
    "South Zone",
    "East Zone",
    "West Zone",
]

GENDERS = ["Male", "Female", "Other"]
AVAILABILITY_MODES = ["Offline", "Online", "Both"]

CONTACT_FAQ: list[dict[str, str]] = [
    {
        "question": "How do I book a pandit for my puja?",
        "answer": (
            "You can book a pandit by browsing our services page, selecting your preferred "
            "service, choosing a date and time, and completing the booking process. Our team "
            "will confirm the booking within 2 hours."
        ),
    },
    {
        "question": "What are your service charges?",
        "answer": (
            "Our service charges vary based on the type of puja and location. You can view "
            "detailed pricing on our services page. We offer transparent pricing with no "
            "hidden charges."
        ),
    },
    {
        "question": "Do you provide services outside the city?",
        "answer": (
            "Yes, we provide services across multiple cities. Please check our service area "
            "or contact us to confirm availability in your location."
        ),
    },
    {
        "question": "How can I cancel or reschedule my booking?",
        "answer": (
            "You can cancel or reschedule your booking up to 24 hours before the scheduled "
            "time through your dashboard or by contacting our support team."
        ),
    },
    {
        "question": "What payment methods do you accept?",
        "answer": (
            "We accept all major credit/debit cards, UPI, net banking, and digital wallets. "
            "Payment is secure and processed through our trusted payment partners."
        ),
    },
]


@dataclass(slots=True)
class PujaDetail:
    """A puja described locally rather than by the backend."""

    id: str
    name: str
    description: str
    long_description: str
    price: int
    duration: str
    difficulty: str
    location_type: str
    pandit_required: bool
    location_details: str
    category: str
    benefits: list[str] = field(default_factory=list)
    included: list[str] = field(default_factory=list)
    requirements: list[str] = field(default_factory=list)
    related_topics: list[str] = field(default_factory=list)
    available_days: list[str] = field(default_factory=lambda: list(ALL_DAYS))
    is_available: bool = True
    image_url: str | None = None

    @property
    def is_virtual(self) -> bool:
        return "virtual" in self.location_type.lower()

    def as_service(self) -> dict[str, Any]:
        """Shape the entry like a backend service record."""

        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "basePrice": self.price,
            "duration": self.duration,
            "isVirtual": self.is_virtual,
            "isActive": self.is_available,
            "imageUrl": self.image_url,
            "tags": list(self.related_topics),
        }


PUJA_CATALOG: list[PujaDetail] = [
    PujaDetail(
        id="seed-puja-6",
        name="Satyanarayan Puja",
        description="Sacred ritual for Lord Vishnu seeking blessings and prosperity",
        long_description=(
            "Satyanarayan Puja is a sacred Hindu ritual dedicated to Lord Vishnu in his "
            "Satyanarayan form. This puja is performed to seek divine blessings for "
            "prosperity, peace, and success in all endeavors. It is believed to remove "
            "obstacles, bring harmony to the family, and fulfill wishes. The ceremony "
            "includes traditional Vedic mantras, offerings, and the narration of the "
            "Satyanarayan Katha."
        ),
        price=2500,
        duration="2-3 hours",
        difficulty="Moderate",
        location_type="Home Visit",
        pandit_required=True,
        location_details="Pandit will visit your home with all necessary materials",
        category="POOJA",
        benefits=[
            "Removes obstacles and negativity",
            "Brings prosperity and abundance",
            "Ensures peace and harmony",
            "Fulfills wishes and desires",
            "Strengthens spiritual connection",
            "Blesses the entire family",
        ],
        included=[
            "Traditional Satyanarayan puja ceremony",
            "Experienced and knowledgeable pandit",
            "All puja materials and samagri",
            "Sacred mantras and prayers",
            "Satyanarayan Katha narration",
            "Prasad distribution",
            "Puja guidance and instructions",
        ],
        requirements=[
            "Clean and sacred space for puja",
            "Flowers and garlands",
            "Fruits and sweets for offerings",
            "Traditional clothes (optional)",
            "Family members present",
            "Pure ghee and incense sticks",
        ],
        related_topics=["vishnu", "prosperity", "peace", "family blessing", "vedic ritual"],
    ),
    PujaDetail(
        id="seed-puja-7",
        name="Diwali Laxmi Puja",
        description="Festival of lights celebrating Goddess Laxmi for wealth and abundance",
        long_description=(
            "Diwali Laxmi Puja is the most auspicious ceremony performed during the festival "
            "of lights. This sacred ritual is dedicated to Goddess Lakshmi, the deity of "
            "wealth, prosperity, and abundance. The puja is performed to invite divine "
            "blessings for financial prosperity, business success, and overall well-being. "
            "It includes traditional rituals, Lakshmi mantras, and offerings to honor the "
            "goddess."
        ),
        price=3000,
        duration="1-2 hours",
        difficulty="Easy",
        location_type="Home Visit",
        pandit_required=True,
        location_details="Special Diwali puja at your home or business",
        category="POOJA",
        benefits=[
            "Attracts wealth and prosperity",
            "Brings abundance and fortune",
            "Ensures business success",
            "Removes financial obstacles",
            "Blesses with happiness and peace",
            "Invites positive energy",
        ],
        included=[
            "Complete Lakshmi puja ceremony",
            "Traditional diyas and decorations",
            "Experienced pandit service",
            "Sacred Lakshmi mantras",
            "Puja flowers and offerings",
            "Blessed prasad",
            "Rangoli consultation",
        ],
        requirements=[
            "Clean and decorated puja area",
            "Silver or copper coins",
            "Fresh flowers and lotus",
            "Sweets and dry fruits",
            "New clothes (optional)",
            "Diyas and oil lamps",
        ],
        related_topics=["diwali", "lakshmi", "wealth", "prosperity", "abundance", "festival"],
    ),
    PujaDetail(
        id="seed-puja-8",
        name="Govardhan Puja",
        description="Celebrating Lord Krishna's protection and the abundance of nature",
        long_description=(
            "Govardhan Puja, also known as Annakut, celebrates Lord Krishna's lifting of "
            "Govardhan Hill to protect the people of Vrindavan. This puja honors nature, "
            "cattle, and the divine protection of Lord Krishna. It is performed with great "
            "devotion, offering a mountain of food (Annakut) to express gratitude for "
            "nature's abundance and seeking blessings for prosperity and protection."
        ),
        price=2800,
        duration="2-4 hours",
        difficulty="Moderate",
        location_type="Home or Temple Visit",
        pandit_required=True,
        location_details="Can be performed at home or at a temple",
        category="POOJA",
        benefits=[
            "Divine protection from Lord Krishna",
            "Abundance and prosperity",
            "Gratitude for nature's gifts",
            "Protection of livestock",
            "Family harmony and unity",
            "Spiritual growth",
        ],
        included=[
            "Traditional Govardhan puja",
            "Annakut (food mountain) arrangement",
            "Krishna mantras and bhajans",
            "Experienced pandit guidance",
            "Puja materials included",
            "Sacred offerings and prasad",
            "Cow worship rituals",
        ],
        requirements=[
            "Various food items for Annakut",
            "Cow dung for Govardhan creation",
            "Fresh flowers and tulsi leaves",
            "Milk and dairy products",
            "Traditional decorations",
            "Family participation",
        ],
        related_topics=["krishna", "govardhan", "protection", "nature", "abundance", "gratitude"],
    ),
    PujaDetail(
        id="seed-puja-9",
        name="Bhai Dooj Puja",
        description="Sacred celebration of sibling bond and family protection",
        long_description=(
            "Bhai Dooj Puja is a beautiful ceremony that celebrates the sacred bond between "
            "brothers and sisters. This puja is performed to strengthen sibling "
            "relationships, seek protection for brothers, and ensure family harmony. It's "
            "performed during the Diwali festival and is especially meaningful for families "
            "with strong sibling bonds. The ritual includes applying tilak, exchanging "
            "gifts, and praying for each other's well-being."
        ),
        price=1500,
        duration="60 minutes",
        difficulty="Easy",
        location_type="Pandit-Travels",
        pandit_required=True,
        location_details="Home visit for family ceremony",
        category="POOJA",
        benefits=[
            "Strengthens sibling bonds",
            "Brings family harmony",
            "Provides protection to brothers",
            "Ensures long life and prosperity",
            "Brings love and understanding",
            "Creates lasting memories",
        ],
        included=[
            "Traditional Bhai Dooj ceremony",
            "Sibling blessing rituals",
            "Experienced pandit service",
            "Family harmony mantras",
            "Protection blessings",
            "Sacred prasad",
            "Tilak ceremony guidance",
        ],
        requirements=[
            "Tilak materials (kumkum, rice)",
            "Sweets and fruits",
            "Flowers and garlands",
            "Traditional clothes",
            "Sister's blessings",
            "Gift exchange items",
        ],
        related_topics=["bhai dooj", "siblings", "family", "protection", "harmony", "festival"],
    ),
    PujaDetail(
        id="1",
        name="Maha Lakshmi Puja",
        description="Seek blessings of Goddess Lakshmi for wealth, prosperity, and abundance",
        long_description=(
            "Maha Lakshmi Puja is an elaborate and powerful ceremony dedicated to Goddess "
            "Lakshmi, the supreme deity of wealth, fortune, and prosperity. This sacred "
            "ritual invokes the divine blessings of the goddess to remove financial "
            "obstacles, attract abundance, and ensure overall well-being. The puja includes "
            "traditional Vedic mantras, elaborate offerings, and ancient rituals passed down "
            "through generations."
        ),
        price=2500,
        duration="120 minutes",
        difficulty="Moderate",
        location_type="Home or Office Visit",
        pandit_required=True,
        location_details="Pandit will visit your preferred location",
        category="POOJA",
        benefits=[
            "Attracts wealth and prosperity",
            "Removes financial obstacles",
            "Brings business success",
            "Ensures family harmony",
            "Invites divine blessings",
            "Creates positive energy flow",
        ],
        included=[
            "Complete Maha Lakshmi puja ceremony",
            "All traditional puja materials",
            "Experienced Vedic pandit",
            "Sacred Lakshmi mantras",
            "108 names chanting",
            "Blessed prasad",
            "Puja guidance and instructions",
        ],
        requirements=[
            "Clean and sacred puja space",
            "Fresh flowers and garlands",
            "Fruits and sweets",
            "Pure ghee for lamps",
            "New clothes (optional)",
            "Family members present",
        ],
        related_topics=["lakshmi", "wealth", "prosperity", "abundance", "success"],
    ),
    PujaDetail(
        id="2",
        name="Vedic Astrology Reading",
        description="Get personalized astrological guidance based on your birth chart",
        long_description=(
            "Vedic Astrology Reading provides deep insights into your life path, destiny, "
            "and potential based on ancient Vedic astrology principles. Our expert "
            "astrologers analyze your birth chart (Kundali) to provide accurate "
            "predictions, identify favorable and challenging periods, and recommend "
            "remedies for a harmonious life. The session includes detailed analysis of "
            "planetary positions, doshas, and personalized guidance."
        ),
        price=1500,
        duration="60 minutes",
        difficulty="Easy",
        location_type="Virtual or In-Person",
        pandit_required=True,
        location_details="Virtual consultation via video call or in-person meeting",
        category="ASTROLOGY",
        benefits=[
            "Understanding of life path and destiny",
            "Accurate predictions for future",
            "Career and business guidance",
            "Relationship compatibility analysis",
            "Health and wellness insights",
            "Personalized remedies",
        ],
        included=[
            "Complete birth chart analysis",
            "Planetary position assessment",
            "Dosha identification",
            "Future predictions",
            "Gemstone recommendations",
            "Remedy suggestions",
            "Written report provided",
        ],
        requirements=[
            "Exact birth date and time",
            "Birth place details",
            "Current life situation details",
            "Specific questions prepared",
            "Pen and paper for notes",
        ],
        related_topics=["astrology", "birth chart", "predictions", "guidance", "kundali"],
        available_days=["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
    ),
]


def get_puja(puja_id: str) -> PujaDetail | None:
    for puja in PUJA_CATALOG:
        if puja.id == puja_id:
            return puja
    return None


def fallback_services() -> list[dict[str, Any]]:
    return [puja.as_service() for puja in PUJA_CATALOG]


def category_icon(category: str | None) -> str:
    return CATEGORY_ICONS.get((category or "").upper(), DEFAULT_CATEGORY_ICON)


def category_label(category: str | None) -> str:
    for option in CATEGORY_FILTERS:
        if option["value"] == category:
            return option["label"]
    return (category or "").replace("_", " ").title()


def _matches_query(service: dict[str, Any], query: str) -> bool:
    if query in (service.get("name") or "").lower():
        return True
    if query in (service.get("description") or "").lower():
        return True
    return any(query in (tag or "").lower() for tag in service.get("tags") or [])


def filter_services(
    services: Iterable[dict[str, Any]],
    category: str | None = "all",
    query: str | None = "",
    exclude_ids: Iterable[str] | None = None,
) -> list[dict[str, Any]]:
    """Filter service records by category, free-text query and excluded ids."""

    needle = (query or "").strip().lower()
    excluded = {str(value) for value in exclude_ids or ()}
    selected = category or "all"

    results: list[dict[str, Any]] = []
    for service in services:
        if str(service.get("id")) in excluded:
            continue
        if selected != "all" and service.get("category") != selected:
            continue
        if needle and not _matches_query(service, needle):
            continue
        results.append(service)
    return results


def service_counts(services: Iterable[dict[str, Any]]) -> dict[str, int]:
    """Summary counts shown above the services listing."""

    counts = {"total": 0, "poojas": 0, "astrology": 0, "virtual": 0}
    for service in services:
        counts["total"] += 1
        category = (service.get("category") or "").upper()
        if category == "POOJA":
            counts["poojas"] += 1
        elif category == "ASTROLOGY":
            counts["astrology"] += 1
        if service.get("isVirtual"):
            counts["virtual"] += 1
    return counts
