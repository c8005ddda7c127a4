import os
import sys
from decimal import Decimal

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from merchstore import create_app
from merchstore.extensions import db
from merchstore.models import Item, ItemAvailability, ItemTypeSize


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


def _create(client, url, payload):
    response = client.post(url, json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_item_lifecycle(client):
    item_type = _create(client, "/api/item-types", {"name": "Mug"})
    item = _create(
        client,
        "/api/items",
        {
            "name": "Logo Mug",
            "description": "Ceramic",
            "price": 9.5,
            "itemTypeId": item_type["id"],
            "imageUrl": "https://cdn.example.com/mug.png",
        },
    )
    assert item["price"] == pytest.approx(9.5)
    assert item["imageUrl"] == "https://cdn.example.com/mug.png"

    updated = client.put(f"/api/items/{item['id']}", json={"price": 11.5})
    assert updated.status_code == 200
    assert updated.get_json()["price"] == pytest.approx(11.5)
    assert updated.get_json()["name"] == "Logo Mug"

    detail = client.get(f"/api/items/{item['id']}").get_json()
    assert detail["availability"] == []

    assert client.delete(f"/api/items/{item['id']}").status_code == 204
    assert client.get(f"/api/items/{item['id']}").status_code == 404


def test_item_create_validation_details(client):
    response = client.post("/api/items", json={"name": "", "price": -1})

    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "Validation failed"
    fields = {detail["field"] for detail in body["details"]}
    assert {"name", "price", "itemTypeId"} <= fields


def test_item_create_rejects_bad_image_url(client):
    item_type = _create(client, "/api/item-types", {"name": "Mug"})

    response = client.post(
        "/api/items",
        json={
            "name": "Mug",
            "price": 5,
            "itemTypeId": item_type["id"],
            "imageUrl": "not a url",
        },
    )

    assert response.status_code == 400
    assert response.get_json()["details"][0]["field"] == "imageUrl"


def test_item_create_with_unknown_item_type(client):
    response = client.post(
        "/api/items", json={"name": "Mug", "price": 5, "itemTypeId": 42}
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "Item type not found"


def test_item_update_rejects_null_field(client):
    item_type = _create(client, "/api/item-types", {"name": "Mug"})
    item = _create(
        client, "/api/items", {"name": "Mug", "price": 5, "itemTypeId": item_type["id"]}
    )

    response = client.put(f"/api/items/{item['id']}", json={"name": None})

    assert response.status_code == 400


def test_delete_item_removes_availability(client):
    item_type = _create(client, "/api/item-types", {"name": "Tee"})
    size = _create(client, "/api/sizes", {"name": "L"})
    item = _create(
        client, "/api/items", {"name": "Tee", "price": 20, "itemTypeId": item_type["id"]}
    )
    _create(
        client,
        "/api/item-availability",
        {"itemId": item["id"], "sizeId": size["id"], "quantityInStock": 3},
    )

    assert client.delete(f"/api/items/{item['id']}").status_code == 204
    assert ItemAvailability.query.count() == 0


def test_item_type_sizes_mapping(client):
    item_type = _create(client, "/api/item-types", {"name": "Hoodie"})
    small = _create(client, "/api/sizes", {"name": "S"})
    large = _create(client, "/api/sizes", {"name": "L"})

    for size in (large, small):
        _create(
            client,
            "/api/item-type-sizes",
            {"itemTypeId": item_type["id"], "sizeId": size["id"]},
        )

    sizes = client.get(f"/api/item-types/{item_type['id']}/sizes").get_json()
    assert [size["name"] for size in sizes] == ["S", "L"]

    detail = client.get(f"/api/item-types/{item_type['id']}").get_json()
    assert [size["id"] for size in detail["sizes"]] == [small["id"], large["id"]]

    duplicate = client.post(
        "/api/item-type-sizes",
        json={"itemTypeId": item_type["id"], "sizeId": small["id"]},
    )
    assert duplicate.status_code == 409
    assert ItemTypeSize.query.count() == 2

    removed = client.delete(f"/api/item-type-sizes/{item_type['id']}/{small['id']}")
    assert removed.status_code == 204
    missing = client.delete(f"/api/item-type-sizes/{item_type['id']}/{small['id']}")
    assert missing.status_code == 404


def test_item_type_size_requires_existing_rows(client):
    item_type = _create(client, "/api/item-types", {"name": "Hoodie"})

    response = client.post(
        "/api/item-type-sizes", json={"itemTypeId": item_type["id"], "sizeId": 7}
    )

    assert response.status_code == 404
    assert response.get_json()["error"] == "Size not found"


def test_delete_item_type_in_use_conflicts(client):
    item_type = _create(client, "/api/item-types", {"name": "Scarf"})
    _create(client, "/api/items", {"name": "Scarf", "price": 15, "itemTypeId": item_type["id"]})

    response = client.delete(f"/api/item-types/{item_type['id']}")

    assert response.status_code == 409
    assert response.get_json()["itemCount"] == 1


def test_sizes_crud(client):
    size = _create(client, "/api/sizes", {"name": "XL"})

    renamed = client.put(f"/api/sizes/{size['id']}", json={"name": "XXL"})
    assert renamed.get_json()["name"] == "XXL"
    assert [row["name"] for row in client.get("/api/sizes").get_json()] == ["XXL"]

    assert client.delete(f"/api/sizes/{size['id']}").status_code == 204
    assert client.get(f"/api/sizes/{size['id']}").status_code == 404


def test_unknown_item_type(client):
    response = client.get("/api/item-types/5")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Item type not found"}


@pytest.mark.parametrize("raw_id", ["abc", "0", "-3", "1.5"])
def test_invalid_item_id(client, raw_id):
    response = client.get(f"/api/items/{raw_id}")

    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid ID format"}


def test_float_item_price_is_rounded_to_cents(client):
    item_type = _create(client, "/api/item-types", {"name": "Sticker"})

    item = _create(
        client,
        "/api/items",
        {"name": "Sticker", "price": 0.1 + 0.2, "itemTypeId": item_type["id"]},
    )

    assert item["price"] == pytest.approx(0.3)
    stored = db.session.get(Item, item["id"])
    assert Decimal(stored.price) == Decimal("0.30")
