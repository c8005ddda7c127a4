import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from merchstore import create_app
from merchstore.extensions import db
from merchstore.models import Order, RolePermission, User


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "LOG_TO_FILE": False,
        }
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def role(client):
    response = client.post("/api/roles", json={"name": "admin"})
    assert response.status_code == 201
    return response.get_json()


def _create_user(client, role_id, email="grace@example.com"):
    return client.post(
        "/api/users", json={"name": "Grace", "email": email, "roleId": role_id}
    )


def test_create_user_and_fetch_with_role(client, role):
    response = _create_user(client, role["id"], email="Grace@Example.com")

    assert response.status_code == 201
    user = response.get_json()
    assert user["email"] == "grace@example.com"

    detail = client.get(f"/api/users/{user['id']}").get_json()
    assert detail["role"] == {"id": role["id"], "name": "admin"}


def test_duplicate_email_conflicts(client, role):
    assert _create_user(client, role["id"]).status_code == 201

    response = _create_user(client, role["id"], email="GRACE@example.com")

    assert response.status_code == 409
    assert response.get_json()["error"] == "User with this email already exists"
    assert User.query.count() == 1


def test_create_user_with_unknown_role(client):
    response = _create_user(client, 77)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Role not found"


def test_create_user_with_invalid_email(client, role):
    response = _create_user(client, role["id"], email="not-an-email")

    assert response.status_code == 400
    assert response.get_json()["details"][0]["field"] == "email"


def test_update_user_partially(client, role):
    user = _create_user(client, role["id"]).get_json()

    response = client.put(f"/api/users/{user['id']}", json={"name": "Grace Hopper"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["name"] == "Grace Hopper"
    assert body["email"] == "grace@example.com"


def test_update_user_to_taken_email(client, role):
    _create_user(client, role["id"])
    other = _create_user(client, role["id"], email="alan@example.com").get_json()

    response = client.put(f"/api/users/{other['id']}", json={"email": "grace@example.com"})

    assert response.status_code == 409


def test_delete_user_with_orders_conflicts(client, role):
    user = _create_user(client, role["id"]).get_json()
    db.session.add(Order(user_id=user["id"], total_amount=10))
    db.session.commit()

    response = client.delete(f"/api/users/{user['id']}")

    assert response.status_code == 409
    assert response.get_json()["orderCount"] == 1


def test_delete_role_in_use_conflicts(client, role):
    _create_user(client, role["id"])

    response = client.delete(f"/api/roles/{role['id']}")

    assert response.status_code == 409


def test_role_permission_assignment(client, role):
    permission = client.post(
        "/api/permissions",
        json={"action": "orders:manage", "description": "Manage orders"},
    ).get_json()
    payload = {"roleId": role["id"], "permissionId": permission["id"]}

    first = client.post("/api/role-permissions", json=payload)
    assert first.status_code == 201
    assert first.get_json() == payload

    second = client.post("/api/role-permissions", json=payload)
    assert second.status_code == 409
    assert RolePermission.query.count() == 1

    detail = client.get(f"/api/roles/{role['id']}").get_json()
    assert [p["action"] for p in detail["permissions"]] == ["orders:manage"]

    removed = client.delete(f"/api/role-permissions/{role['id']}/{permission['id']}")
    assert removed.status_code == 204
    again = client.delete(f"/api/role-permissions/{role['id']}/{permission['id']}")
    assert again.status_code == 404


def test_role_permission_requires_existing_permission(client, role):
    response = client.post(
        "/api/role-permissions", json={"roleId": role["id"], "permissionId": 9}
    )

    assert response.status_code == 404
    assert response.get_json()["error"] == "Permission not found"


def test_permission_crud(client):
    created = client.post("/api/permissions", json={"action": "items:edit"})
    assert created.status_code == 201
    permission = created.get_json()
    assert permission["description"] == ""

    updated = client.put(
        f"/api/permissions/{permission['id']}",
        json={"action": "items:write", "description": "Edit catalog"},
    )
    assert updated.get_json()["action"] == "items:write"

    assert client.delete(f"/api/permissions/{permission['id']}").status_code == 204
    assert client.get("/api/permissions").get_json() == []
