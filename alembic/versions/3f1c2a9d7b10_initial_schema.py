"""initial schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("affiliate_id", sa.Integer, nullable=False),
        sa.Column("item_name", sa.String(255), nullable=False),
        sa.Column("item_description", sa.Text, nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=False, server_default="General"),
        sa.Column("unit_price", sa.Integer, nullable=False, server_default="0"),
        sa.Column("available_quantity", sa.Numeric(12, 3), nullable=False, server_default="0"),
        sa.Column("minimum_stock_level", sa.Numeric(12, 3), nullable=False, server_default="5"),
        sa.Column("unit", sa.String(20), nullable=False, server_default="pcs"),
        sa.Column("sku", sa.String(100), nullable=False, server_default=""),
        sa.Column("total_sold", sa.Numeric(12, 3), nullable=False, server_default="0"),
        sa.Column("last_sold_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_inventory_items_affiliate_name", "inventory_items", ["affiliate_id", "item_name"])

    op.create_table(
        "customer_bills",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("bill_number", sa.String(32), nullable=False, unique=True),
        sa.Column("affiliate_id", sa.Integer, nullable=False),
        sa.Column("customer_phone_number", sa.String(15), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("subtotal", sa.Integer, nullable=False, server_default="0"),
        sa.Column("item_discount_total", sa.Integer, nullable=False, server_default="0"),
        sa.Column("additional_discount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("grand_total", sa.Integer, nullable=False, server_default="0"),
        sa.Column("remarks", sa.Text, nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("payment_method", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("whatsapp_sent", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("whatsapp_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pdf_path", sa.Text, nullable=False, server_default=""),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("bill_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_customer_bills_affiliate_date", "customer_bills", ["affiliate_id", "bill_date"])
    op.create_index("ix_customer_bills_phone", "customer_bills", ["customer_phone_number"])

    op.create_table(
        "customer_bill_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "bill_id", sa.Integer, sa.ForeignKey("customer_bills.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("unit_price", sa.Numeric(18, 6), nullable=False),
        sa.Column("discount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("net_amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("inventory_item_id", sa.Integer, sa.ForeignKey("inventory_items.id"), nullable=True),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "bill_sequences",
        sa.Column("sequence_key", sa.String(32), primary_key=True),
        sa.Column("last_value", sa.Integer, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("bill_sequences")
    op.drop_table("customer_bill_items")
    op.drop_index("ix_customer_bills_phone", table_name="customer_bills")
    op.drop_index("ix_customer_bills_affiliate_date", table_name="customer_bills")
    op.drop_table("customer_bills")
    op.drop_index("ix_inventory_items_affiliate_name", table_name="inventory_items")
    op.drop_table("inventory_items")
