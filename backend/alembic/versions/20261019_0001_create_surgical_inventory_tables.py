"""create surgical inventory and auto-restock tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "surgical_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("min_stock_level", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("supplier_name", sa.String(length=100), nullable=False),
        sa.Column("supplier_contact", sa.String(length=100), nullable=True),
        sa.Column("supplier_email", sa.String(length=255), nullable=True),
        sa.Column("auto_restock_enabled", sa.Boolean(), nullable=False),
        sa.Column("auto_restock_max_stock_level", sa.Integer(), nullable=False),
        sa.Column("auto_restock_reorder_quantity", sa.Integer(), nullable=True),
        sa.Column("auto_restock_method", sa.String(length=20), nullable=False),
        sa.Column("last_auto_restock", sa.DateTime(), nullable=True),
        sa.Column("auto_restock_count", sa.Integer(), nullable=False),
        sa.Column("last_auto_restock_quantity", sa.Integer(), nullable=True),
        sa.Column("last_supplier_order", sa.String(length=64), nullable=True),
        sa.Column("last_email_sent", sa.Boolean(), nullable=True),
        sa.Column("last_restocked", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity >= 0", name="ck_surgical_items_quantity_non_negative"),
        sa.CheckConstraint("min_stock_level >= 0", name="ck_surgical_items_min_stock_non_negative"),
        sa.CheckConstraint("unit_price >= 0", name="ck_surgical_items_unit_price_non_negative"),
        sa.CheckConstraint(
            "status IN ('Available', 'Low Stock', 'Out of Stock', 'Discontinued')",
            name="ck_surgical_items_status",
        ),
        sa.CheckConstraint(
            "auto_restock_method IN ('fixed_quantity', 'auto_fill')",
            name="ck_surgical_items_restock_method",
        ),
        sa.CheckConstraint(
            "auto_restock_max_stock_level >= 0",
            name="ck_surgical_items_max_stock_non_negative",
        ),
        sa.CheckConstraint(
            "auto_restock_reorder_quantity IS NULL OR auto_restock_reorder_quantity >= 0",
            name="ck_surgical_items_reorder_quantity_non_negative",
        ),
    )
    op.create_index("ix_surgical_items_id", "surgical_items", ["id"], unique=False)
    op.create_index("ix_surgical_items_name", "surgical_items", ["name"], unique=False)
    op.create_index("ix_surgical_items_category_status", "surgical_items", ["category", "status"], unique=False)
    op.create_index(
        "ix_surgical_items_auto_restock_quantity",
        "surgical_items",
        ["auto_restock_enabled", "quantity"],
        unique=False,
    )

    op.create_table(
        "surgical_item_restock_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("value", sa.Numeric(14, 2), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("previous_stock", sa.Integer(), nullable=False),
        sa.Column("new_stock", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("supplier_order_id", sa.String(length=64), nullable=True),
        sa.Column("email_sent", sa.Boolean(), nullable=False),
        sa.Column("source", sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["surgical_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount > 0", name="ck_restock_history_amount_positive"),
        sa.CheckConstraint("new_stock = previous_stock + amount", name="ck_restock_history_stock_balance"),
    )
    op.create_index("ix_surgical_item_restock_history_id", "surgical_item_restock_history", ["id"], unique=False)
    op.create_index(
        "ix_surgical_item_restock_history_item_id",
        "surgical_item_restock_history",
        ["item_id"],
        unique=False,
    )
    op.create_index("ix_restock_history_item_date", "surgical_item_restock_history", ["item_id", "date"], unique=False)

    op.create_table(
        "surgical_item_usage",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("quantity_used", sa.Integer(), nullable=False),
        sa.Column("used_by", sa.String(length=100), nullable=False),
        sa.Column("purpose", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["surgical_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity_used > 0", name="ck_surgical_item_usage_quantity_positive"),
    )
    op.create_index("ix_surgical_item_usage_id", "surgical_item_usage", ["id"], unique=False)
    op.create_index("ix_surgical_item_usage_item_id", "surgical_item_usage", ["item_id"], unique=False)

    op.create_table(
        "notification_outbox",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(length=30), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=True),
        sa.Column("order_id", sa.String(length=64), nullable=True),
        sa.Column("sender", sa.String(length=255), nullable=False),
        sa.Column("recipient", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        sa.Column("delivered", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["surgical_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "kind IN ('supplier_order', 'admin_confirmation')",
            name="ck_notification_outbox_kind",
        ),
    )
    op.create_index("ix_notification_outbox_id", "notification_outbox", ["id"], unique=False)
    op.create_index("ix_notification_outbox_item_id", "notification_outbox", ["item_id"], unique=False)
    op.create_index("ix_notification_outbox_order_id", "notification_outbox", ["order_id"], unique=False)
    op.create_index(
        "ix_notification_outbox_kind_created_at",
        "notification_outbox",
        ["kind", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_notification_outbox_kind_created_at", table_name="notification_outbox")
    op.drop_index("ix_notification_outbox_order_id", table_name="notification_outbox")
    op.drop_index("ix_notification_outbox_item_id", table_name="notification_outbox")
    op.drop_index("ix_notification_outbox_id", table_name="notification_outbox")
    op.drop_table("notification_outbox")
    op.drop_index("ix_surgical_item_usage_item_id", table_name="surgical_item_usage")
    op.drop_index("ix_surgical_item_usage_id", table_name="surgical_item_usage")
    op.drop_table("surgical_item_usage")
    op.drop_index("ix_restock_history_item_date", table_name="surgical_item_restock_history")
    op.drop_index("ix_surgical_item_restock_history_item_id", table_name="surgical_item_restock_history")
    op.drop_index("ix_surgical_item_restock_history_id", table_name="surgical_item_restock_history")
    op.drop_table("surgical_item_restock_history")
    op.drop_index("ix_surgical_items_auto_restock_quantity", table_name="surgical_items")
    op.drop_index("ix_surgical_items_category_status", table_name="surgical_items")
    op.drop_index("ix_surgical_items_name", table_name="surgical_items")
    op.drop_index("ix_surgical_items_id", table_name="surgical_items")
    op.drop_table("surgical_items")
