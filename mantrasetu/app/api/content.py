"""JSON endpoints used by client-side widgets."""
from __future__ import annotations

from http import HTTPStatus

from flask import jsonify, request

from mantrasetu.app.api import api_bp
from mantrasetu.app.services.almanac import (
    CEREMONY_TYPES,
    DAILY_MUHURATS,
    UnknownCeremonyError,
    find_muhurats,
    panchang_for,
    parse_date,
)
from mantrasetu.app.services.api_client import get_client
from mantrasetu.app.services.homepage import load_homepage


@api_bp.get("/homepage")
def homepage() -> tuple[object, HTTPStatus]:
    """Return the aggregated homepage content."""

    result = load_homepage(get_client())
    return (
        jsonify(success=result.error is None, data=result.content.to_dict(), error=result.error),
        HTTPStatus.OK,
    )


@api_bp.get("/panchang")
def panchang() -> tuple[object, HTTPStatus]:
    try:
        day = parse_date(request.args.get("date"))
    except ValueError as exc:
        return jsonify(success=False, message=str(exc)), HTTPStatus.BAD_REQUEST

    location = (request.args.get("location") or "").strip()
    return jsonify(success=True, data=panchang_for(day, location)), HTTPStatus.OK


@api_bp.get("/muhurat")
def muhurat() -> tuple[object, HTTPStatus]:
    ceremony = (request.args.get("ceremony") or "").strip()
    if not ceremony:
        return (
            jsonify(success=True, data={"ceremonies": CEREMONY_TYPES, "daily": DAILY_MUHURATS}),
            HTTPStatus.OK,
        )

    try:
        data = find_muhurats(ceremony, request.args.get("location"))
    except UnknownCeremonyError as exc:
        return jsonify(success=False, message=str(exc)), HTTPStatus.BAD_REQUEST
    return jsonify(success=True, data=data), HTTPStatus.OK
