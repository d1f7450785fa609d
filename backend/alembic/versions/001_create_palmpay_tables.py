"""Create PalmPay tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Initial schema: catalog, devices, orders, users and their
       cards/templates/auth logs, plus the device auth log.

Foreign keys carry no ON DELETE action. User deletion removes dependents
explicitly (UserService.delete_user); device and product rows are never
deleted through the API.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    # ── Catalog ───────────────────────────────────────────────────────────
    op.create_table(
        "products",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("stock", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
    )
    op.create_index("idx_products_active_name", "products", ["active", "name"])

    op.create_table(
        "customers",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("palm_id", sa.String(255), nullable=True),
        _created_at(),
    )
    op.create_index("idx_customers_created_at", "customers", [sa.text("created_at DESC")])

    # ── Devices ───────────────────────────────────────────────────────────
    op.create_table(
        "palm_devices",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("api_token", sa.String(64), nullable=False, unique=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )

    op.create_table(
        "device_authentication_logs",
        _id(),
        sa.Column("palm_device_id", sa.String(36), sa.ForeignKey("palm_devices.id"), nullable=True),
        sa.Column("device_type", sa.String(64), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        _created_at("timestamp"),
    )
    op.create_index(
        "idx_device_auth_logs_timestamp",
        "device_authentication_logs",
        [sa.text("timestamp DESC")],
    )

    # ── Orders ────────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        _id(),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("palm_device_id", sa.String(36), sa.ForeignKey("palm_devices.id"), nullable=True),
        _created_at(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_orders_created_at", "orders", [sa.text("created_at DESC")])
    op.create_index("idx_orders_status_device", "orders", ["status", "palm_device_id"])

    op.create_table(
        "order_items",
        _id(),
        sa.Column("order_id", sa.String(36), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("product_id", sa.String(36), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    # ── Users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _id(),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        _created_at(),
    )
    op.create_index("idx_users_display_name", "users", ["display_name"])

    op.create_table(
        "cards",
        _id(),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("cardholder_name", sa.String(255), nullable=True),
        sa.Column("last4", sa.String(4), nullable=False),
        sa.Column("brand", sa.String(32), nullable=True),
        sa.Column("exp_month", sa.Integer(), nullable=True),
        sa.Column("exp_year", sa.Integer(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_cards_user_id", "cards", ["user_id"])

    op.create_table(
        "palm_templates",
        _id(),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("sdk_vendor", sa.String(64), nullable=False),
        sa.Column("feature_version", sa.String(32), nullable=False),
        sa.Column("left_palmprint", sa.Text(), nullable=True),
        sa.Column("left_palmvein", sa.Text(), nullable=True),
        sa.Column("right_palmprint", sa.Text(), nullable=True),
        sa.Column("right_palmvein", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        _created_at(),
        _created_at("updated_at"),
    )
    op.create_index("ix_palm_templates_user_id", "palm_templates", ["user_id"])
    op.create_index(
        "idx_palm_templates_vendor_version",
        "palm_templates",
        ["sdk_vendor", "feature_version", "active"],
    )

    op.create_table(
        "authentication_logs",
        _id(),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("method", sa.String(32), nullable=False),
        sa.Column("device_id", sa.String(255), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        _created_at("timestamp"),
    )
    op.create_index(
        "idx_auth_logs_user_timestamp",
        "authentication_logs",
        ["user_id", sa.text("timestamp DESC")],
    )


def downgrade() -> None:
    # Children before parents
    for table in (
        "authentication_logs",
        "palm_templates",
        "cards",
        "users",
        "order_items",
        "orders",
        "device_authentication_logs",
        "palm_devices",
        "customers",
        "products",
    ):
        op.drop_table(table)
