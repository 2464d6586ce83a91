"""Page blueprints and the helpers they share."""
from __future__ import annotations

from http import HTTPStatus
from typing import Any

from mantrasetu.app.services.api_client import ApiError, ApiUnavailableError, pluck, unwrap


def error_status(exc: ApiError) -> HTTPStatus:
    """HTTP status used when re-rendering a page after a backend failure."""

    if isinstance(exc, ApiUnavailableError) or not exc.status_code:
        return HTTPStatus.BAD_GATEWAY
    try:
        status = HTTPStatus(exc.status_code)
    except ValueError:
        return HTTPStatus.BAD_GATEWAY
    if status < HTTPStatus.BAD_REQUEST:
        return HTTPStatus.BAD_GATEWAY
    return status


def records(payload: Any, key: str) -> list[dict[str, Any]]:
    """Return the list stored under ``key``, or the payload itself when it is a list."""

    value = pluck(payload, key)
    if value is None:
        value = unwrap(payload)
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return []


def record(payload: Any, key: str) -> dict[str, Any] | None:
    """Return a single resource, unwrapping an optional ``{key: ...}`` layer."""

    data = unwrap(payload)
    if isinstance(data, dict) and set(data) <= {"success", "message"}:
        return None
    if isinstance(data, dict) and isinstance(data.get(key), dict):
        return data[key]
    if isinstance(data, dict) and data:
        return data
    return None
