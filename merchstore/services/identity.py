from __future__ import annotations

import logging

from merchstore.models import Order, Permission, Role, RolePermission, User
from merchstore.schemas import (
    NamedPayload,
    PermissionPayload,
    RolePermissionCreate,
    UserCreate,
    UserUpdate,
    patch_fields,
)
from merchstore.services.errors import ServiceError
from merchstore.services.session import apply_patch, commit

logger = logging.getLogger(__name__)

USER_PATCH_COLUMNS = {"name": "name", "email": "email", "role_id": "role_id"}


def _normalize_email(email: str) -> str:
    return email.strip().lower()


# Users


def list_users(session) -> list[User]:
    return session.query(User).order_by(User.id).all()


def get_user(session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise ServiceError.not_found("User not found")
    return user


def find_user_by_email(session, email: str) -> User | None:
    return session.query(User).filter(User.email == _normalize_email(email)).one_or_none()


def get_user_detail(session, user_id: int) -> dict:
    user = get_user(session, user_id)
    role = session.get(Role, user.role_id) if user.role_id else None
    return {**user.to_dict(), "role": role.to_dict() if role else None}


def _require_role_reference(session, role_id: int) -> None:
    if session.get(Role, role_id) is None:
        raise ServiceError.validation("Role not found", roleId=role_id)


def create_user(session, payload: UserCreate) -> User:
    email = _normalize_email(payload.email)
    if find_user_by_email(session, email) is not None:
        raise ServiceError.conflict("User with this email already exists", email=email)
    _require_role_reference(session, payload.role_id)

    user = User(name=payload.name, email=email, role_id=payload.role_id)
    session.add(user)
    commit(
        session,
        action="create user",
        conflict_message="User with this email already exists",
        email=email,
    )
    return user


def update_user(session, user_id: int, payload: UserUpdate) -> User:
    user = get_user(session, user_id)
    changes = patch_fields(payload)

    if "email" in changes:
        changes["email"] = _normalize_email(changes["email"])
        if changes["email"] != user.email:
            if find_user_by_email(session, changes["email"]) is not None:
                raise ServiceError.conflict("Email already in use", email=changes["email"])
    if "role_id" in changes:
        _require_role_reference(session, changes["role_id"])

    if not apply_patch(user, changes, USER_PATCH_COLUMNS):
        raise ServiceError.validation("No changes made")
    commit(session, action="update user", conflict_message="Email already in use")
    return user


def delete_user(session, user_id: int) -> None:
    user = get_user(session, user_id)
    order_count = session.query(Order).filter(Order.user_id == user.id).count()
    if order_count:
        raise ServiceError.conflict(
            "User still has orders", userId=user.id, orderCount=order_count
        )
    session.delete(user)
    commit(session, action="delete user")


# Roles


def list_roles(session) -> list[Role]:
    return session.query(Role).order_by(Role.id).all()


def get_role(session, role_id: int) -> Role:
    role = session.get(Role, role_id)
    if role is None:
        raise ServiceError.not_found("Role not found")
    return role


def permissions_for_role(session, role_id: int) -> list[Permission]:
    return (
        session.query(Permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .order_by(Permission.id)
        .all()
    )


def get_role_detail(session, role_id: int) -> dict:
    role = get_role(session, role_id)
    permissions = permissions_for_role(session, role.id)
    return {**role.to_dict(), "permissions": [p.to_dict() for p in permissions]}


def create_role(session, payload: NamedPayload) -> Role:
    role = Role(name=payload.name)
    session.add(role)
    commit(session, action="create role")
    return role


def update_role(session, role_id: int, payload: NamedPayload) -> Role:
    role = get_role(session, role_id)
    role.name = payload.name
    commit(session, action="update role")
    return role


def delete_role(session, role_id: int) -> None:
    role = get_role(session, role_id)
    user_count = session.query(User).filter(User.role_id == role.id).count()
    if user_count:
        raise ServiceError.conflict(
            "Role is still assigned to users", roleId=role.id, userCount=user_count
        )
    session.delete(role)
    commit(session, action="delete role")


# Permissions


def list_permissions(session) -> list[Permission]:
    return session.query(Permission).order_by(Permission.id).all()


def get_permission(session, permission_id: int) -> Permission:
    permission = session.get(Permission, permission_id)
    if permission is None:
        raise ServiceError.not_found("Permission not found")
    return permission


def create_permission(session, payload: PermissionPayload) -> Permission:
    permission = Permission(action=payload.action, description=payload.description or "")
    session.add(permission)
    commit(session, action="create permission")
    return permission


def update_permission(session, permission_id: int, payload: PermissionPayload) -> Permission:
    permission = get_permission(session, permission_id)
    permission.action = payload.action
    permission.description = payload.description or ""
    commit(session, action="update permission")
    return permission


def delete_permission(session, permission_id: int) -> None:
    permission = get_permission(session, permission_id)
    session.delete(permission)
    commit(session, action="delete permission")


# Role <-> permission associations


def list_role_permissions(session) -> list[RolePermission]:
    return (
        session.query(RolePermission)
        .order_by(RolePermission.role_id, RolePermission.permission_id)
        .all()
    )


def add_permission_to_role(session, payload: RolePermissionCreate) -> RolePermission:
    """Grant a permission to a role.

    Both sides must exist and the pairing must be new. The existence check
    and the insert are separate statements; a concurrent duplicate that
    slips between them is rejected by the composite key and reported as the
    same conflict.
    """

    get_role(session, payload.role_id)
    get_permission(session, payload.permission_id)

    keys = {"roleId": payload.role_id, "permissionId": payload.permission_id}
    if session.get(RolePermission, (payload.role_id, payload.permission_id)) is not None:
        raise ServiceError.conflict("Permission already assigned to role", **keys)

    mapping = RolePermission(role_id=payload.role_id, permission_id=payload.permission_id)
    session.add(mapping)
    commit(
        session,
        action="assign permission to role",
        conflict_message="Permission already assigned to role",
        **keys,
    )
    logger.info("Granted permission %s to role %s", payload.permission_id, payload.role_id)
    return mapping


def remove_permission_from_role(session, role_id: int, permission_id: int) -> None:
    mapping = session.get(RolePermission, (role_id, permission_id))
    if mapping is None:
        raise ServiceError.not_found(
            "Permission not assigned to role", roleId=role_id, permissionId=permission_id
        )
    session.delete(mapping)
    commit(session, action="remove permission from role")
    logger.info("Revoked permission %s from role %s", permission_id, role_id)
