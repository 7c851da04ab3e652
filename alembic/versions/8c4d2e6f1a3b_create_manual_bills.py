"""create manual bills

Revision ID: 8c4d2e6f1a3b
Revises: 3f1c2a9d7b10
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "8c4d2e6f1a3b"
down_revision: Union[str, Sequence[str], None] = "3f1c2a9d7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "manual_bills",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("affiliate_id", sa.Integer, nullable=False),
        sa.Column("device_name", sa.String(200), nullable=False),
        sa.Column("device_number", sa.String(100), nullable=False),
        sa.Column("device_cost", sa.Integer, nullable=False),
        sa.Column("remarks", sa.Text, nullable=False, server_default=""),
        sa.Column("image_uri", sa.Text, nullable=True),
        sa.Column("category", sa.String(30), nullable=False, server_default="Other"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_manual_bills_affiliate_created", "manual_bills", ["affiliate_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_manual_bills_affiliate_created", table_name="manual_bills")
    op.drop_table("manual_bills")
