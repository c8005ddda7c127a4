"""Per (item, size) stock records.

Stock is written from two places: the admin inventory screens, which
overwrite a count directly (:func:`set_stock`), and the order lifecycle,
which moves counts by a delta (:func:`take_stock` / :func:`return_stock`).
Overwrites are last-write-wins; deltas are applied in SQL so concurrent
orders never read-modify-write the same row.
"""
from __future__ import annotations

import logging

from sqlalchemy import update

from merchstore.models import Item, ItemAvailability, Size
from merchstore.schemas import ItemAvailabilityCreate, ItemAvailabilityUpdate, patch_fields
from merchstore.services.errors import ServiceError
from merchstore.services.session import apply_patch, commit

logger = logging.getLogger(__name__)

AVAILABILITY_PATCH_COLUMNS = {
    "item_id": "item_id",
    "size_id": "size_id",
    "quantity_in_stock": "quantity_in_stock",
}


def list_availability(session) -> list[ItemAvailability]:
    return session.query(ItemAvailability).order_by(ItemAvailability.id).all()


def get_availability(session, availability_id: int) -> ItemAvailability:
    record = session.get(ItemAvailability, availability_id)
    if record is None:
        raise ServiceError.not_found("Item availability record not found")
    return record


def availability_for_item(session, item_id: int) -> list[ItemAvailability]:
    return (
        session.query(ItemAvailability)
        .filter(ItemAvailability.item_id == item_id)
        .order_by(ItemAvailability.id)
        .all()
    )


def find_availability(session, item_id: int, size_id: int) -> ItemAvailability | None:
    return (
        session.query(ItemAvailability)
        .filter(
            ItemAvailability.item_id == item_id,
            ItemAvailability.size_id == size_id,
        )
        .one_or_none()
    )


def _require_references(session, item_id: int, size_id: int) -> None:
    if session.get(Item, item_id) is None:
        raise ServiceError.validation("Item not found", itemId=item_id)
    if session.get(Size, size_id) is None:
        raise ServiceError.validation("Size not found", sizeId=size_id)


def _reject_duplicate(session, item_id: int, size_id: int, *, exclude_id: int | None = None):
    existing = find_availability(session, item_id, size_id)
    if existing is not None and existing.id != exclude_id:
        raise ServiceError.conflict(
            "A record for this item and size already exists",
            existingId=existing.id,
        )


def create_availability(session, payload: ItemAvailabilityCreate) -> ItemAvailability:
    _reject_duplicate(session, payload.item_id, payload.size_id)
    _require_references(session, payload.item_id, payload.size_id)

    record = ItemAvailability(
        item_id=payload.item_id,
        size_id=payload.size_id,
        quantity_in_stock=payload.quantity_in_stock,
    )
    session.add(record)
    commit(
        session,
        action="create item availability record",
        conflict_message="A record for this item and size already exists",
    )
    return record


def update_availability(
    session, availability_id: int, payload: ItemAvailabilityUpdate
) -> ItemAvailability:
    record = get_availability(session, availability_id)
    changes = patch_fields(payload)

    item_id = changes.get("item_id", record.item_id)
    size_id = changes.get("size_id", record.size_id)
    if "item_id" in changes or "size_id" in changes:
        _reject_duplicate(session, item_id, size_id, exclude_id=record.id)
        _require_references(session, item_id, size_id)

    if not apply_patch(record, changes, AVAILABILITY_PATCH_COLUMNS):
        raise ServiceError.validation("No changes made")
    commit(
        session,
        action="update item availability record",
        conflict_message="A record for this item and size already exists",
    )
    return record


def set_stock(session, item_id: int, size_id: int, quantity: int) -> ItemAvailability:
    """Overwrite the stock count of one (item, size) pair.

    This is a set, not a delta: repeating the call with the same quantity
    leaves the count unchanged.
    """

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ServiceError.validation("Quantity must be a non-negative number")

    record = find_availability(session, item_id, size_id)
    if record is None:
        raise ServiceError.not_found(
            "No availability record found for this item and size",
            itemId=item_id,
            sizeId=size_id,
        )

    previous = record.quantity_in_stock
    record.quantity_in_stock = quantity
    commit(session, action="update stock")
    logger.info(
        "Stock for item %s size %s set to %s (was %s)",
        item_id,
        size_id,
        quantity,
        previous,
    )
    return record


def take_stock(session, item_id: int, size_id: int, quantity: int) -> bool:
    """Decrement stock only if at least ``quantity`` units remain.

    Returns ``False`` when the row is missing or holds too few units. The
    caller owns the transaction.
    """

    result = session.execute(
        update(ItemAvailability)
        .where(
            ItemAvailability.item_id == item_id,
            ItemAvailability.size_id == size_id,
            ItemAvailability.quantity_in_stock >= quantity,
        )
        .values(quantity_in_stock=ItemAvailability.quantity_in_stock - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def return_stock(session, item_id: int, size_id: int, quantity: int) -> bool:
    """Add ``quantity`` units back; ``False`` when the row no longer exists."""

    result = session.execute(
        update(ItemAvailability)
        .where(
            ItemAvailability.item_id == item_id,
            ItemAvailability.size_id == size_id,
        )
        .values(quantity_in_stock=ItemAvailability.quantity_in_stock + quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def delete_availability(session, availability_id: int) -> None:
    record = get_availability(session, availability_id)
    session.delete(record)
    commit(session, action="delete item availability record")
