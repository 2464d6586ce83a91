"""Inline SVG placeholder images for pandits and services."""
from __future__ import annotations

from urllib.parse import quote

_URI_SAFE = "-_.!~*'()"


def generate_placeholder_image(
    width: int,
    height: int,
    text: str,
    background_color: str = "#ff6b35",
    text_color: str = "#ffffff",
) -> str:
    """Return a ``data:`` URI holding a flat SVG with centred text."""

    svg = (
        f'<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">'
        f'<rect width="100%" height="100%" fill="{background_color}"/>'
        f'<text x="50%" y="50%" font-family="Arial, sans-serif" font-size="14" '
        f'fill="{text_color}" text-anchor="middle" dy=".3em">{text}</text>'
        "</svg>"
    )
    return "data:image/svg+xml," + quote(svg, safe=_URI_SAFE)


def pandit_placeholder(name: str) -> str:
    return generate_placeholder_image(150, 150, (name or "?")[:1].upper())


def service_placeholder(name: str) -> str:
    return generate_placeholder_image(200, 200, (name or "")[:2].upper())


def large_service_placeholder(name: str) -> str:
    return generate_placeholder_image(400, 200, (name or "")[:2].upper())
