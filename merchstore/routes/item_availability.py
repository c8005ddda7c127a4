from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import (
    ItemAvailabilityCreate,
    ItemAvailabilityUpdate,
    StockUpdate,
    load,
)
from merchstore.services import inventory
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("item_availability", __name__, url_prefix="/api/item-availability")


@bp.get("")
def list_records():
    return jsonify([record.to_dict() for record in inventory.list_availability(db.session)])


@bp.get("/<raw_id>")
def get_record(raw_id: str):
    return jsonify(inventory.get_availability(db.session, parse_id(raw_id)).to_dict())


@bp.get("/item/<raw_item_id>")
def records_for_item(raw_item_id: str):
    records = inventory.availability_for_item(db.session, parse_id(raw_item_id, "item ID"))
    return jsonify([record.to_dict() for record in records])


@bp.post("")
def create_record():
    payload = load(ItemAvailabilityCreate, json_payload())
    record = inventory.create_availability(db.session, payload)
    return jsonify(record.to_dict()), 201


@bp.put("/<raw_id>")
def update_record(raw_id: str):
    availability_id = parse_id(raw_id)
    payload = load(ItemAvailabilityUpdate, json_payload())
    record = inventory.update_availability(db.session, availability_id, payload)
    return jsonify(record.to_dict())


@bp.patch("/stock/<raw_item_id>/<raw_size_id>")
def set_stock(raw_item_id: str, raw_size_id: str):
    """Overwrite the stock count for one item and size."""

    item_id = parse_id(raw_item_id)
    size_id = parse_id(raw_size_id)
    payload = load(StockUpdate, json_payload())
    record = inventory.set_stock(db.session, item_id, size_id, payload.quantity_in_stock)
    return jsonify(record.to_dict())


@bp.delete("/<raw_id>")
def delete_record(raw_id: str):
    inventory.delete_availability(db.session, parse_id(raw_id))
    return "", 204
