from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import ItemCreate, ItemUpdate, load
from merchstore.services import catalog
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("items", __name__, url_prefix="/api/items")


@bp.get("")
def list_items():
    items = catalog.list_items(db.session)
    return jsonify([item.to_dict() for item in items])


@bp.get("/<raw_id>")
def get_item(raw_id: str):
    """Return one item with its per-size availability rows."""

    return jsonify(catalog.get_item_detail(db.session, parse_id(raw_id)))


@bp.post("")
def create_item():
    payload = load(ItemCreate, json_payload())
    item = catalog.create_item(db.session, payload)
    return jsonify(item.to_dict()), 201


@bp.put("/<raw_id>")
def update_item(raw_id: str):
    item_id = parse_id(raw_id)
    payload = load(ItemUpdate, json_payload())
    item = catalog.update_item(db.session, item_id, payload)
    return jsonify(item.to_dict())


@bp.delete("/<raw_id>")
def delete_item(raw_id: str):
    catalog.delete_item(db.session, parse_id(raw_id))
    return "", 204
