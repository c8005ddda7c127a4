"""Small helpers shared by the JSON blueprints."""

from __future__ import annotations

from flask import request

from merchstore.services.errors import ServiceError


def parse_id(raw_value: str, label: str = "ID") -> int:
    """Convert a path segment into a positive integer id."""

    try:
        value = int(raw_value)
    except (TypeError, ValueError):
        raise ServiceError.validation(f"Invalid {label} format") from None
    if value <= 0:
        raise ServiceError.validation(f"Invalid {label} format")
    return value


def json_payload():
    """Return the decoded JSON body, or ``None`` when it is missing or malformed."""

    return request.get_json(silent=True)
