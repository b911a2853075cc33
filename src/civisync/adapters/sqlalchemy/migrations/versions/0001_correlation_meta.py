"""create correlation_meta

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "correlation_meta",
        sa.Column("order_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("contact_id", sa.Integer(), nullable=True),
        sa.Column("contribution_id", sa.Integer(), nullable=True),
        sa.Column("campaign_id", sa.Integer(), nullable=True),
        sa.Column("source", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("order_id", name=op.f("pk_correlation_meta")),
    )
    op.create_index(
        op.f("ix_correlation_meta_contribution_id"),
        "correlation_meta",
        ["contribution_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_correlation_meta_contribution_id"), table_name="correlation_meta")
    op.drop_table("correlation_meta")
