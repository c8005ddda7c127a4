from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from merchstore.extensions import db
from merchstore.schemas import OrderCreate, OrderStatusUpdate, load
from merchstore.services import orders
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@bp.get("")
def list_orders():
    return jsonify([order.to_dict() for order in orders.list_orders(db.session)])


@bp.get("/<raw_id>")
def get_order(raw_id: str):
    """Return an order with its user and item/size-enriched lines."""

    return jsonify(orders.get_order_detail(db.session, parse_id(raw_id)))


@bp.get("/user/<raw_user_id>")
def orders_for_user(raw_user_id: str):
    user_orders = orders.list_orders_for_user(db.session, parse_id(raw_user_id, "user ID"))
    return jsonify([order.to_dict() for order in user_orders])


@bp.post("")
def create_order():
    payload = load(OrderCreate, json_payload())
    order = orders.create_order(
        db.session,
        payload,
        trust_client_total=current_app.config.get("ORDER_TRUST_CLIENT_TOTAL", True),
        default_status=current_app.config.get("ORDER_DEFAULT_STATUS", "Completed"),
    )
    detail = orders.get_order_detail(db.session, order.id, include_user=False)
    return jsonify(detail), 201


@bp.patch("/<raw_id>/status")
def update_status(raw_id: str):
    order_id = parse_id(raw_id)
    payload = load(OrderStatusUpdate, json_payload())
    order = orders.update_order_status(db.session, order_id, payload.status)
    return jsonify(order.to_dict())


@bp.delete("/<raw_id>")
def delete_order(raw_id: str):
    orders.delete_order(db.session, parse_id(raw_id))
    return "", 204
