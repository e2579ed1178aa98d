"""Add the single-flight run lock table and the split-mode timestamp.

Revision ID: 002_run_locks
Revises: 001_baseline
Create Date: 2026-10-06
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "002_run_locks"
down_revision: str | None = "001_baseline"
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    # Stores opened by a newer release already have the table from create_all.
    if "run_locks" not in sa.inspect(op.get_bind()).get_table_names():
        op.create_table(
            "run_locks",
            sa.Column("name", sa.Text, primary_key=True),
            sa.Column("holder", sa.Text, nullable=False),
            sa.Column("acquired", sa.Text, nullable=False),
        )
    op.add_column("order_types", sa.Column("split_enabled_at", sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("order_types") as batch:
        batch.drop_column("split_enabled_at")
    op.drop_table("run_locks")
