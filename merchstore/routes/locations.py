from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import LocationPayload, load
from merchstore.services import locations
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("locations", __name__, url_prefix="/api/locations")


@bp.get("")
def list_locations():
    return jsonify([location.to_dict() for location in locations.list_locations(db.session)])


@bp.get("/<raw_id>")
def get_location(raw_id: str):
    return jsonify(locations.get_location(db.session, parse_id(raw_id)).to_dict())


@bp.post("")
def create_location():
    payload = load(LocationPayload, json_payload())
    location = locations.create_location(db.session, payload)
    return jsonify(location.to_dict()), 201


@bp.put("/<raw_id>")
def update_location(raw_id: str):
    location_id = parse_id(raw_id)
    payload = load(LocationPayload, json_payload())
    location = locations.update_location(db.session, location_id, payload)
    return jsonify(location.to_dict())


@bp.delete("/<raw_id>")
def delete_location(raw_id: str):
    locations.delete_location(db.session, parse_id(raw_id))
    return "", 204
