from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import UserCreate, UserUpdate, load
from merchstore.services import identity
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("users", __name__, url_prefix="/api/users")


@bp.get("")
def list_users():
    return jsonify([user.to_dict() for user in identity.list_users(db.session)])


@bp.get("/<raw_id>")
def get_user(raw_id: str):
    return jsonify(identity.get_user_detail(db.session, parse_id(raw_id)))


@bp.post("")
def create_user():
    payload = load(UserCreate, json_payload())
    user = identity.create_user(db.session, payload)
    return jsonify(user.to_dict()), 201


@bp.put("/<raw_id>")
def update_user(raw_id: str):
    user_id = parse_id(raw_id)
    payload = load(UserUpdate, json_payload())
    user = identity.update_user(db.session, user_id, payload)
    return jsonify(user.to_dict())


@bp.delete("/<raw_id>")
def delete_user(raw_id: str):
    identity.delete_user(db.session, parse_id(raw_id))
    return "", 204
