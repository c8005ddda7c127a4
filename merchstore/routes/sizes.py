from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import NamedPayload, load
from merchstore.services import catalog
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("sizes", __name__, url_prefix="/api/sizes")


@bp.get("")
def list_sizes():
    return jsonify([size.to_dict() for size in catalog.list_sizes(db.session)])


@bp.get("/<raw_id>")
def get_size(raw_id: str):
    return jsonify(catalog.get_size(db.session, parse_id(raw_id)).to_dict())


@bp.post("")
def create_size():
    payload = load(NamedPayload, json_payload())
    size = catalog.create_size(db.session, payload)
    return jsonify(size.to_dict()), 201


@bp.put("/<raw_id>")
def update_size(raw_id: str):
    size_id = parse_id(raw_id)
    payload = load(NamedPayload, json_payload())
    size = catalog.update_size(db.session, size_id, payload)
    return jsonify(size.to_dict())


@bp.delete("/<raw_id>")
def delete_size(raw_id: str):
    catalog.delete_size(db.session, parse_id(raw_id))
    return "", 204
