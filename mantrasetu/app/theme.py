"""Design tokens exposed to templates."""
from __future__ import annotations

THEME: dict[str, dict[str, str]] = {
    "colors": {
        "primary": "#FF6B35",
        "primaryDark": "#E55A2B",
        "primaryLight": "#FF8A65",
        "secondary": "#FFD700",
        "cream": "#FFF8DC",
        "background": "#FFFEF7",
        "backgroundSecondary": "#FFF8DC",
        "textPrimary": "#333333",
        "textSecondary": "#666666",
        "border": "#e0e0e0",
        "success": "#4caf50",
        "warning": "#ff9800",
        "error": "#f44336",
        "info": "#2196f3",
    },
    "fonts": {
        "primary": "'Inter', sans-serif",
        "secondary": "'Poppins', sans-serif",
        "sanskrit": "'Noto Sans Devanagari', 'Sanskrit Text', serif",
    },
}

STATUS_COLORS = {
    "PENDING": THEME["colors"]["warning"],
    "CONFIRMED": THEME["colors"]["info"],
    "IN_PROGRESS": THEME["colors"]["primary"],
    "COMPLETED": THEME["colors"]["success"],
    "CANCELLED": THEME["colors"]["error"],
    "NO_SHOW": THEME["colors"]["textSecondary"],
    "PAID": THEME["colors"]["success"],
    "FAILED": THEME["colors"]["error"],
    "REFUNDED": THEME["colors"]["textSecondary"],
}


def status_color(status: str | None) -> str:
    return STATUS_COLORS.get((status or "").upper(), THEME["colors"]["textSecondary"])
