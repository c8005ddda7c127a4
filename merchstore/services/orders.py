"""Order placement and cancellation with stock adjustment.

Creating an order validates every line against the live stock counts before
anything is written, then inserts the order, its lines and the stock
decrements in one transaction. Each decrement is conditional
(``quantity_in_stock >= requested``), so two orders racing for the last units
cannot both succeed: the loser is rolled back and reported as short on stock.

Deleting an order removes its lines and the order and puts the consumed
quantities back on the shelf, also in a single transaction.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from merchstore.models import Item, Order, OrderLine, OrderStatus, Size, User
from merchstore.schemas import OrderCreate, to_cents
from merchstore.services import inventory
from merchstore.services.errors import ServiceError
from merchstore.services.identity import get_user
from merchstore.services.session import commit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedLine:
    item_id: int
    size_id: int
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


def _parse_order_date(raw: str | None) -> datetime:
    if not raw:
        return datetime.utcnow()
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise ServiceError.validation(
            "Validation failed",
            details=[{"field": "orderDate", "message": "Invalid ISO 8601 date"}],
        ) from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _requested_quantities(payload: OrderCreate) -> "OrderedDict[tuple[int, int], int]":
    requested: OrderedDict[tuple[int, int], int] = OrderedDict()
    for line in payload.order_lines:
        key = (line.item_id, line.size_id)
        requested[key] = requested.get(key, 0) + line.quantity
    return requested


def _insufficient_stock(item_id: int, size_id: int, requested: int, available: int):
    return ServiceError.validation(
        "Not enough stock available",
        itemId=item_id,
        sizeId=size_id,
        requested=requested,
        available=available,
    )


def _check_stock(session, requested: dict[tuple[int, int], int]) -> None:
    for (item_id, size_id), quantity in requested.items():
        availability = inventory.find_availability(session, item_id, size_id)
        if availability is None:
            raise ServiceError.validation(
                "Item not available in the specified size",
                itemId=item_id,
                sizeId=size_id,
            )
        if availability.quantity_in_stock < quantity:
            raise _insufficient_stock(
                item_id, size_id, quantity, availability.quantity_in_stock
            )


def _price_lines(session, payload: OrderCreate) -> list[PricedLine]:
    priced = []
    live_prices: dict[int, Decimal] = {}
    for line in payload.order_lines:
        price = line.price_at_time_of_order
        if price is None:
            if line.item_id not in live_prices:
                item = session.get(Item, line.item_id)
                if item is None:
                    raise ServiceError.validation(
                        f"Item with ID {line.item_id} not found", itemId=line.item_id
                    )
                live_prices[line.item_id] = Decimal(item.price)
            price = live_prices[line.item_id]
        priced.append(
            PricedLine(
                item_id=line.item_id,
                size_id=line.size_id,
                quantity=line.quantity,
                price=to_cents(price),
            )
        )
    return priced


def create_order(
    session,
    payload: OrderCreate,
    *,
    trust_client_total: bool = True,
    default_status: str = OrderStatus.DEFAULT,
) -> Order:
    user = get_user(session, payload.user_id)
    requested = _requested_quantities(payload)
    _check_stock(session, requested)
    lines = _price_lines(session, payload)

    computed_total = to_cents(sum((line.subtotal for line in lines), Decimal("0")))
    total_amount = computed_total
    if payload.total_amount is not None:
        if trust_client_total:
            total_amount = to_cents(payload.total_amount)
        elif payload.total_amount != computed_total:
            logger.warning(
                "Ignoring client total %s for user %s; computed %s",
                payload.total_amount,
                user.id,
                computed_total,
            )

    order = Order(
        user_id=user.id,
        order_date=_parse_order_date(payload.order_date),
        total_amount=total_amount,
        status=payload.status or default_status,
    )
    for line in lines:
        order.order_lines.append(
            OrderLine(
                item_id=line.item_id,
                size_id=line.size_id,
                quantity=line.quantity,
                price_at_time_of_order=line.price,
            )
        )

    try:
        session.add(order)
        session.flush()
        for (item_id, size_id), quantity in requested.items():
            if not inventory.take_stock(session, item_id, size_id, quantity):
                session.rollback()
                current = inventory.find_availability(session, item_id, size_id)
                available = current.quantity_in_stock if current is not None else 0
                logger.info(
                    "Order for user %s lost stock race on item %s size %s",
                    user.id,
                    item_id,
                    size_id,
                )
                raise _insufficient_stock(item_id, size_id, quantity, available)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Database error while creating order for user %s", user.id)
        raise ServiceError.internal("Failed to create order") from exc

    commit(session, action="create order")
    logger.info(
        "Created order %s for user %s (%d lines, total %s)",
        order.id,
        user.id,
        len(lines),
        total_amount,
    )
    return order


def list_orders(session) -> list[Order]:
    return session.query(Order).order_by(Order.order_date.desc(), Order.id.desc()).all()


def list_orders_for_user(session, user_id: int) -> list[Order]:
    get_user(session, user_id)
    return (
        session.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.order_date.desc(), Order.id.desc())
        .all()
    )


def get_order(session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise ServiceError.not_found("Order not found")
    return order


def get_order_lines(session, order_id: int) -> list[dict]:
    """Return the lines of an order with display details of item and size.

    The joins are outer joins: a line whose item or size has since been
    deleted is still returned, just without the nested ``item``/``size``.
    """

    rows = (
        session.query(OrderLine, Item, Size)
        .outerjoin(Item, Item.id == OrderLine.item_id)
        .outerjoin(Size, Size.id == OrderLine.size_id)
        .filter(OrderLine.order_id == order_id)
        .order_by(OrderLine.id)
        .all()
    )

    lines = []
    for line, item, size in rows:
        entry = line.to_dict()
        if item is not None:
            entry["item"] = item.to_dict()
        if size is not None:
            entry["size"] = size.to_dict()
        lines.append(entry)
    return lines


def get_order_detail(session, order_id: int, *, include_user: bool = True) -> dict:
    order = get_order(session, order_id)
    detail = order.to_dict()
    if include_user:
        user = session.get(User, order.user_id)
        detail["user"] = user.to_dict() if user else None
    detail["orderLines"] = get_order_lines(session, order.id)
    return detail


def update_order_status(session, order_id: int, status: str) -> Order:
    """Write ``status`` as given; there are no transition rules."""

    order = get_order(session, order_id)
    previous = order.status
    order.status = status
    commit(session, action="update order status")
    logger.info("Order %s status changed from %s to %s", order.id, previous, status)
    return order


def delete_order(session, order_id: int) -> None:
    order = get_order(session, order_id)
    restock = [(line.item_id, line.size_id, line.quantity) for line in order.order_lines]

    try:
        session.delete(order)
        session.flush()
        for item_id, size_id, quantity in restock:
            if not inventory.return_stock(session, item_id, size_id, quantity):
                logger.warning(
                    "Skipped restocking %s units for order %s: no availability "
                    "record for item %s size %s",
                    quantity,
                    order_id,
                    item_id,
                    size_id,
                )
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Database error while deleting order %s", order_id)
        raise ServiceError.internal("Failed to delete order") from exc

    commit(session, action="delete order")
    logger.info("Deleted order %s and restocked %d lines", order_id, len(restock))
