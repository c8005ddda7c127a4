"""Catalog maintenance: items, item types, sizes and their associations."""
from __future__ import annotations

import logging

from merchstore.models import Item, ItemAvailability, ItemType, ItemTypeSize, Size
from merchstore.schemas import (
    ItemCreate,
    ItemTypeSizeCreate,
    ItemUpdate,
    NamedPayload,
    patch_fields,
)
from merchstore.services.errors import ServiceError
from merchstore.services.session import apply_patch, commit

logger = logging.getLogger(__name__)

ITEM_PATCH_COLUMNS = {
    "name": "name",
    "description": "description",
    "price": "price",
    "item_type_id": "item_type_id",
    "image_url": "image_url",
}


def _require(session, model, object_id: int, label: str):
    instance = session.get(model, object_id)
    if instance is None:
        raise ServiceError.not_found(f"{label} not found")
    return instance


# Items


def list_items(session) -> list[Item]:
    return session.query(Item).order_by(Item.id).all()


def get_item(session, item_id: int) -> Item:
    return _require(session, Item, item_id, "Item")


def get_item_detail(session, item_id: int) -> dict:
    item = get_item(session, item_id)
    availability = (
        session.query(ItemAvailability)
        .filter(ItemAvailability.item_id == item.id)
        .order_by(ItemAvailability.id)
        .all()
    )
    return {**item.to_dict(), "availability": [row.to_dict() for row in availability]}


def _require_item_type_reference(session, item_type_id: int) -> None:
    if session.get(ItemType, item_type_id) is None:
        raise ServiceError.validation("Item type not found", itemTypeId=item_type_id)


def create_item(session, payload: ItemCreate) -> Item:
    _require_item_type_reference(session, payload.item_type_id)
    item = Item(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        item_type_id=payload.item_type_id,
        image_url=payload.image_url,
    )
    session.add(item)
    commit(session, action="create item")
    return item


def update_item(session, item_id: int, payload: ItemUpdate) -> Item:
    item = get_item(session, item_id)
    changes = patch_fields(payload)
    if "item_type_id" in changes:
        _require_item_type_reference(session, changes["item_type_id"])
    if not apply_patch(item, changes, ITEM_PATCH_COLUMNS):
        raise ServiceError.validation("No changes made")
    commit(session, action="update item")
    return item


def delete_item(session, item_id: int) -> None:
    item = get_item(session, item_id)
    session.delete(item)
    commit(session, action="delete item")


# Item types


def list_item_types(session) -> list[ItemType]:
    return session.query(ItemType).order_by(ItemType.id).all()


def get_item_type(session, item_type_id: int) -> ItemType:
    return _require(session, ItemType, item_type_id, "Item type")


def sizes_for_item_type(session, item_type_id: int) -> list[Size]:
    get_item_type(session, item_type_id)
    return (
        session.query(Size)
        .join(ItemTypeSize, ItemTypeSize.size_id == Size.id)
        .filter(ItemTypeSize.item_type_id == item_type_id)
        .order_by(Size.id)
        .all()
    )


def create_item_type(session, payload: NamedPayload) -> ItemType:
    item_type = ItemType(name=payload.name)
    session.add(item_type)
    commit(session, action="create item type")
    return item_type


def update_item_type(session, item_type_id: int, payload: NamedPayload) -> ItemType:
    item_type = get_item_type(session, item_type_id)
    item_type.name = payload.name
    commit(session, action="update item type")
    return item_type


def delete_item_type(session, item_type_id: int) -> None:
    item_type = get_item_type(session, item_type_id)
    item_count = session.query(Item).filter(Item.item_type_id == item_type.id).count()
    if item_count:
        raise ServiceError.conflict(
            "Item type is still assigned to items",
            itemTypeId=item_type.id,
            itemCount=item_count,
        )
    session.delete(item_type)
    commit(session, action="delete item type")


# Sizes


def list_sizes(session) -> list[Size]:
    return session.query(Size).order_by(Size.id).all()


def get_size(session, size_id: int) -> Size:
    return _require(session, Size, size_id, "Size")


def create_size(session, payload: NamedPayload) -> Size:
    size = Size(name=payload.name)
    session.add(size)
    commit(session, action="create size")
    return size


def update_size(session, size_id: int, payload: NamedPayload) -> Size:
    size = get_size(session, size_id)
    size.name = payload.name
    commit(session, action="update size")
    return size


def delete_size(session, size_id: int) -> None:
    size = get_size(session, size_id)
    session.delete(size)
    commit(session, action="delete size")


# Item type <-> size associations


def list_item_type_sizes(session) -> list[ItemTypeSize]:
    return (
        session.query(ItemTypeSize)
        .order_by(ItemTypeSize.item_type_id, ItemTypeSize.size_id)
        .all()
    )


def create_item_type_size(session, payload: ItemTypeSizeCreate) -> ItemTypeSize:
    get_item_type(session, payload.item_type_id)
    get_size(session, payload.size_id)
    keys = {"itemTypeId": payload.item_type_id, "sizeId": payload.size_id}
    if session.get(ItemTypeSize, (payload.item_type_id, payload.size_id)) is not None:
        raise ServiceError.conflict("Size already assigned to item type", **keys)

    mapping = ItemTypeSize(item_type_id=payload.item_type_id, size_id=payload.size_id)
    session.add(mapping)
    # The composite key still rejects a duplicate inserted concurrently.
    commit(
        session,
        action="create item type size mapping",
        conflict_message="Size already assigned to item type",
        **keys,
    )
    return mapping


def delete_item_type_size(session, item_type_id: int, size_id: int) -> None:
    mapping = session.get(ItemTypeSize, (item_type_id, size_id))
    if mapping is None:
        raise ServiceError.not_found("Mapping not found")
    session.delete(mapping)
    commit(session, action="delete item type size mapping")
    logger.info("Removed size %s from item type %s", size_id, item_type_id)
