from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import NamedPayload, load
from merchstore.services import catalog
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("item_types", __name__, url_prefix="/api/item-types")


@bp.get("")
def list_item_types():
    item_types = catalog.list_item_types(db.session)
    return jsonify([item_type.to_dict() for item_type in item_types])


@bp.get("/<raw_id>")
def get_item_type(raw_id: str):
    item_type_id = parse_id(raw_id)
    item_type = catalog.get_item_type(db.session, item_type_id)
    sizes = catalog.sizes_for_item_type(db.session, item_type_id)
    return jsonify({**item_type.to_dict(), "sizes": [size.to_dict() for size in sizes]})


@bp.get("/<raw_id>/sizes")
def item_type_sizes(raw_id: str):
    sizes = catalog.sizes_for_item_type(db.session, parse_id(raw_id))
    return jsonify([size.to_dict() for size in sizes])


@bp.post("")
def create_item_type():
    payload = load(NamedPayload, json_payload())
    item_type = catalog.create_item_type(db.session, payload)
    return jsonify(item_type.to_dict()), 201


@bp.put("/<raw_id>")
def update_item_type(raw_id: str):
    item_type_id = parse_id(raw_id)
    payload = load(NamedPayload, json_payload())
    item_type = catalog.update_item_type(db.session, item_type_id, payload)
    return jsonify(item_type.to_dict())


@bp.delete("/<raw_id>")
def delete_item_type(raw_id: str):
    catalog.delete_item_type(db.session, parse_id(raw_id))
    return "", 204
