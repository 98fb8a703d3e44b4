"""order core schema

Revision ID: 0001_order_core
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_order_core"
down_revision = None
branch_labels = None
depends_on = None

ORDER_STATUSES = (
    "Pending",
    "Confirmed",
    "InPreparation",
    "Ready",
    "OutForDelivery",
    "AwaitingClientConfirmation",
    "Delivered",
    "Cancelled",
)
PAYMENT_METHODS = ("Cash", "CreditCard", "DebitCard", "PIX", "MealVoucher")
DELIVERER_AVAILABILITY = ("Available", "Unavailable", "OnDelivery")


def upgrade() -> None:
    op.create_table(
        "restaurants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_open", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("delivery_fee", sa.Numeric(10, 2), nullable=True),
    )
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), sa.ForeignKey("restaurants.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    )
    op.create_index("ix_menu_items_restaurant_id", "menu_items", ["restaurant_id"])
    op.create_table(
        "client_addresses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_client_addresses_client_id", "client_addresses", ["client_id"])
    op.create_table(
        "deliverers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column(
            "availability",
            sa.Enum(*DELIVERER_AVAILABILITY, name="deliverer_availability", native_enum=False, length=16),
            nullable=False,
            server_default="Unavailable",
        ),
    )
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("restaurant_id", sa.Integer(), sa.ForeignKey("restaurants.id"), nullable=False),
        sa.Column("address_id", sa.Integer(), sa.ForeignKey("client_addresses.id"), nullable=False),
        sa.Column("deliverer_id", sa.Integer(), sa.ForeignKey("deliverers.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*ORDER_STATUSES, name="order_status", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("status_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "payment_method",
            sa.Enum(*PAYMENT_METHODS, name="payment_method", native_enum=False, length=16),
            nullable=False,
        ),
    )
    op.create_index("ix_orders_client_id", "orders", ["client_id"])
    op.create_index("ix_orders_restaurant_id", "orders", ["restaurant_id"])
    op.create_index("ix_orders_deliverer_id", "orders", ["deliverer_id"])
    op.create_index("ix_orders_restaurant_status", "orders", ["restaurant_id", "status"])
    op.create_table(
        "order_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("menu_item_id", sa.Integer(), sa.ForeignKey("menu_items.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_frozen", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
    )
    op.create_index("ix_order_lines_order_id", "order_lines", ["order_id"])
    op.create_table(
        "order_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("event_type", sa.String(length=32), nullable=False),
        sa.Column("from_status", sa.String(length=32), nullable=True),
        sa.Column("to_status", sa.String(length=32), nullable=True),
        sa.Column("actor_role", sa.String(length=16), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column("deliverer_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_order_events_order_id", "order_events", ["order_id"])


def downgrade() -> None:
    op.drop_index("ix_order_events_order_id", table_name="order_events")
    op.drop_table("order_events")
    op.drop_index("ix_order_lines_order_id", table_name="order_lines")
    op.drop_table("order_lines")
    op.drop_index("ix_orders_restaurant_status", table_name="orders")
    op.drop_index("ix_orders_deliverer_id", table_name="orders")
    op.drop_index("ix_orders_restaurant_id", table_name="orders")
    op.drop_index("ix_orders_client_id", table_name="orders")
    op.drop_table("orders")
    op.drop_table("deliverers")
    op.drop_index("ix_client_addresses_client_id", table_name="client_addresses")
    op.drop_table("client_addresses")
    op.drop_index("ix_menu_items_restaurant_id", table_name="menu_items")
    op.drop_table("menu_items")
    op.drop_table("restaurants")
