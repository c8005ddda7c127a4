"""create merch store tables

Revision ID: 0001_initial_schema
Revises: 
Create Date: 2024-03-04

"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "item_type",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
    )
    op.create_table(
        "size",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=64), nullable=False),
    )
    op.create_table(
        "item_type_size",
        sa.Column(
            "item_type_id",
            sa.Integer(),
            sa.ForeignKey("item_type.id"),
            primary_key=True,
        ),
        sa.Column("size_id", sa.Integer(), sa.ForeignKey("size.id"), primary_key=True),
    )
    op.create_table(
        "item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "item_type_id", sa.Integer(), sa.ForeignKey("item_type.id"), nullable=False
        ),
        sa.Column("image_url", sa.String(length=1024), nullable=False, server_default=""),
        sa.CheckConstraint("price > 0", name="ck_item_price_positive"),
    )
    op.create_table(
        "item_availability",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("item.id"), nullable=False),
        sa.Column("size_id", sa.Integer(), sa.ForeignKey("size.id"), nullable=False),
        sa.Column("quantity_in_stock", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("item_id", "size_id", name="uq_item_availability_item_size"),
        sa.CheckConstraint(
            "quantity_in_stock >= 0", name="ck_item_availability_stock_non_negative"
        ),
    )
    op.create_table(
        "role",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=64), nullable=False),
    )
    op.create_table(
        "permission",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
    )
    op.create_table(
        "role_permission",
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("role.id"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.Integer(),
            sa.ForeignKey("permission.id"),
            primary_key=True,
        ),
    )
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("role.id"), nullable=False),
    )
    op.create_table(
        "order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("order_date", sa.DateTime(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=64), nullable=False, server_default="Completed"),
    )
    op.create_index("ix_order_user_id", "order", ["user_id"])
    op.create_table(
        "order_line",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("size_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_at_time_of_order", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_order_line_quantity_positive"),
    )
    op.create_index("ix_order_line_order_id", "order_line", ["order_id"])
    op.create_table(
        "location",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=512), nullable=False),
    )


def downgrade():
    op.drop_table("location")
    op.drop_index("ix_order_line_order_id", table_name="order_line")
    op.drop_table("order_line")
    op.drop_index("ix_order_user_id", table_name="order")
    op.drop_table("order")
    op.drop_table("user")
    op.drop_table("role_permission")
    op.drop_table("permission")
    op.drop_table("role")
    op.drop_table("item_availability")
    op.drop_table("item")
    op.drop_table("item_type_size")
    op.drop_table("size")
    op.drop_table("item_type")
