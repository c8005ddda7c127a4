from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import ItemTypeSizeCreate, load
from merchstore.services import catalog
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("item_type_sizes", __name__, url_prefix="/api/item-type-sizes")


@bp.get("")
def list_mappings():
    mappings = catalog.list_item_type_sizes(db.session)
    return jsonify([mapping.to_dict() for mapping in mappings])


@bp.post("")
def create_mapping():
    payload = load(ItemTypeSizeCreate, json_payload())
    mapping = catalog.create_item_type_size(db.session, payload)
    return jsonify(mapping.to_dict()), 201


@bp.delete("/<raw_item_type_id>/<raw_size_id>")
def delete_mapping(raw_item_type_id: str, raw_size_id: str):
    catalog.delete_item_type_size(
        db.session, parse_id(raw_item_type_id), parse_id(raw_size_id)
    )
    return "", 204
