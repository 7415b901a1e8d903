"""Create the managed_record table.

Revision ID: 0001
Revises:
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "managed_record",
        sa.Column("record_id", sa.String(), nullable=False),
        sa.Column("target_identity", sa.String(), nullable=False),
        sa.Column("scope", sa.String(), nullable=True),
        sa.Column("is_template", sa.Boolean(), nullable=False),
        sa.Column("properties", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("record_id", name=op.f("pk_managed_record")),
    )
    op.create_index(
        op.f("ix_managed_record_target_identity"),
        "managed_record",
        ["target_identity"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_managed_record_target_identity"), table_name="managed_record")
    op.drop_table("managed_record")
