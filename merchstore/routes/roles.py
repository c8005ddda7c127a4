"""Roles, permissions and the grants between them."""

from __future__ import annotations

from flask import Blueprint, jsonify

from merchstore.extensions import db
from merchstore.schemas import NamedPayload, PermissionPayload, RolePermissionCreate, load
from merchstore.services import identity
from merchstore.utils.api import json_payload, parse_id

bp = Blueprint("roles", __name__, url_prefix="/api/roles")
permissions_bp = Blueprint("permissions", __name__, url_prefix="/api/permissions")
role_permissions_bp = Blueprint(
    "role_permissions", __name__, url_prefix="/api/role-permissions"
)


@bp.get("")
def list_roles():
    return jsonify([role.to_dict() for role in identity.list_roles(db.session)])


@bp.get("/<raw_id>")
def get_role(raw_id: str):
    return jsonify(identity.get_role_detail(db.session, parse_id(raw_id)))


@bp.post("")
def create_role():
    payload = load(NamedPayload, json_payload())
    role = identity.create_role(db.session, payload)
    return jsonify(role.to_dict()), 201


@bp.put("/<raw_id>")
def update_role(raw_id: str):
    role_id = parse_id(raw_id)
    payload = load(NamedPayload, json_payload())
    role = identity.update_role(db.session, role_id, payload)
    return jsonify(role.to_dict())


@bp.delete("/<raw_id>")
def delete_role(raw_id: str):
    identity.delete_role(db.session, parse_id(raw_id))
    return "", 204


@permissions_bp.get("")
def list_permissions():
    permissions = identity.list_permissions(db.session)
    return jsonify([permission.to_dict() for permission in permissions])


@permissions_bp.get("/<raw_id>")
def get_permission(raw_id: str):
    return jsonify(identity.get_permission(db.session, parse_id(raw_id)).to_dict())


@permissions_bp.post("")
def create_permission():
    payload = load(PermissionPayload, json_payload())
    permission = identity.create_permission(db.session, payload)
    return jsonify(permission.to_dict()), 201


@permissions_bp.put("/<raw_id>")
def update_permission(raw_id: str):
    permission_id = parse_id(raw_id)
    payload = load(PermissionPayload, json_payload())
    permission = identity.update_permission(db.session, permission_id, payload)
    return jsonify(permission.to_dict())


@permissions_bp.delete("/<raw_id>")
def delete_permission(raw_id: str):
    identity.delete_permission(db.session, parse_id(raw_id))
    return "", 204


@role_permissions_bp.get("")
def list_role_permissions():
    mappings = identity.list_role_permissions(db.session)
    return jsonify([mapping.to_dict() for mapping in mappings])


@role_permissions_bp.post("")
def add_permission_to_role():
    payload = load(RolePermissionCreate, json_payload())
    mapping = identity.add_permission_to_role(db.session, payload)
    return jsonify(mapping.to_dict()), 201


@role_permissions_bp.delete("/<raw_role_id>/<raw_permission_id>")
def remove_permission_from_role(raw_role_id: str, raw_permission_id: str):
    identity.remove_permission_from_role(
        db.session, parse_id(raw_role_id), parse_id(raw_permission_id)
    )
    return "", 204
