from datetime import datetime
from decimal import Decimal

from merchstore.extensions import db


def _money(value) -> float | None:
    if value is None:
        return None
    return float(Decimal(value))


class ItemTypeSize(db.Model):
    __tablename__ = "item_type_size"

    item_type_id = db.Column(
        db.Integer, db.ForeignKey("item_type.id"), primary_key=True
    )
    size_id = db.Column(db.Integer, db.ForeignKey("size.id"), primary_key=True)

    def to_dict(self):
        return {"itemTypeId": self.item_type_id, "sizeId": self.size_id}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ItemTypeSize type={self.item_type_id} size={self.size_id}>"


class ItemType(db.Model):
    __tablename__ = "item_type"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)

    sizes = db.relationship(
        "Size",
        secondary="item_type_size",
        order_by="Size.id",
        back_populates="item_types",
    )
    items = db.relationship("Item", back_populates="item_type")

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ItemType {self.name}>"


class Size(db.Model):
    __tablename__ = "size"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)

    item_types = db.relationship(
        "ItemType",
        secondary="item_type_size",
        back_populates="sizes",
    )
    availability = db.relationship(
        "ItemAvailability",
        back_populates="size",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Size {self.name}>"


class Item(db.Model):
    __tablename__ = "item"

    __table_args__ = (
        db.CheckConstraint("price > 0", name="ck_item_price_positive"),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    price = db.Column(db.Numeric(10, 2), nullable=False)
    item_type_id = db.Column(db.Integer, db.ForeignKey("item_type.id"), nullable=False)
    image_url = db.Column(db.String(1024), nullable=False, default="")

    item_type = db.relationship("ItemType", back_populates="items")
    availability = db.relationship(
        "ItemAvailability",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="ItemAvailability.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "price": _money(self.price),
            "itemTypeId": self.item_type_id,
            "imageUrl": self.image_url or "",
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Item {self.name} price={self.price}>"


class ItemAvailability(db.Model):
    __tablename__ = "item_availability"

    __table_args__ = (
        db.UniqueConstraint("item_id", "size_id", name="uq_item_availability_item_size"),
        db.CheckConstraint(
            "quantity_in_stock >= 0", name="ck_item_availability_stock_non_negative"
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey("item.id"), nullable=False)
    size_id = db.Column(db.Integer, db.ForeignKey("size.id"), nullable=False)
    quantity_in_stock = db.Column(db.Integer, nullable=False, default=0)

    item = db.relationship("Item", back_populates="availability")
    size = db.relationship("Size", back_populates="availability")

    def to_dict(self):
        return {
            "id": self.id,
            "itemId": self.item_id,
            "sizeId": self.size_id,
            "quantityInStock": self.quantity_in_stock,
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<ItemAvailability item={self.item_id} size={self.size_id} "
            f"qty={self.quantity_in_stock}>"
        )


class RolePermission(db.Model):
    __tablename__ = "role_permission"

    role_id = db.Column(db.Integer, db.ForeignKey("role.id"), primary_key=True)
    permission_id = db.Column(
        db.Integer, db.ForeignKey("permission.id"), primary_key=True
    )

    def to_dict(self):
        return {"roleId": self.role_id, "permissionId": self.permission_id}


class Role(db.Model):
    __tablename__ = "role"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)

    permissions = db.relationship(
        "Permission",
        secondary="role_permission",
        order_by="Permission.id",
        back_populates="roles",
    )
    users = db.relationship("User", back_populates="role")

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Role {self.name}>"


class Permission(db.Model):
    __tablename__ = "permission"

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(120), nullable=False)
    description = db.Column(db.String(255), nullable=False, default="")

    roles = db.relationship(
        "Role",
        secondary="role_permission",
        back_populates="permissions",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "action": self.action,
            "description": self.description or "",
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Permission {self.action}>"


class User(db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role_id = db.Column(db.Integer, db.ForeignKey("role.id"), nullable=False)

    role = db.relationship("Role", back_populates="users")
    orders = db.relationship("Order", back_populates="user")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "roleId": self.role_id,
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User {self.email}>"


class OrderStatus:
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    # Conventional values shown by the storefront; the column accepts any text.
    ALL_STATUSES = [PROCESSING, COMPLETED, CANCELLED]
    DEFAULT = COMPLETED


class Order(db.Model):
    __tablename__ = "order"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    order_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(64), nullable=False, default=OrderStatus.DEFAULT)

    user = db.relationship("User", back_populates="orders")
    order_lines = db.relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "orderDate": self.order_date.isoformat() if self.order_date else None,
            "totalAmount": _money(self.total_amount),
            "status": self.status,
        }

    def __repr__(self):
        return f"<Order {self.id} status={self.status}>"


class OrderLine(db.Model):
    __tablename__ = "order_line"

    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_line_quantity_positive"),
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer, db.ForeignKey("order.id"), nullable=False, index=True
    )
    # Not foreign keys: a line outlives the catalog rows it was priced from.
    item_id = db.Column(db.Integer, nullable=False)
    size_id = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price_at_time_of_order = db.Column(db.Numeric(10, 2), nullable=False)

    order = db.relationship("Order", back_populates="order_lines")

    def to_dict(self):
        return {
            "id": self.id,
            "orderId": self.order_id,
            "itemId": self.item_id,
            "sizeId": self.size_id,
            "quantity": self.quantity,
            "priceAtTimeOfOrder": _money(self.price_at_time_of_order),
        }

    def __repr__(self):
        return (
            f"<OrderLine order={self.order_id} item={self.item_id} "
            f"size={self.size_id} qty={self.quantity}>"
        )


class Location(db.Model):
    __tablename__ = "location"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(512), nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "address": self.address}
