"""Baseline schema — order types, profile types, profiles, orders, shipments.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-09-28

Existing databases get stamped at this revision without running it;
fresh databases created before version tracking get it applied during
``profsplit upgrade``.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "order_types",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("label", sa.Text, nullable=False),
        sa.Column("use_split_profiles", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "profile_types",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("label", sa.Text, nullable=False),
        sa.Column("created", sa.Text, nullable=False),
    )

    op.create_table(
        "profile_fields",
        sa.Column("profile_type", sa.Text, sa.ForeignKey("profile_types.id"), nullable=False),
        sa.Column("field_name", sa.Text, nullable=False),
        sa.Column("field_type", sa.Text, nullable=False),
        sa.Column("is_base", sa.Integer, nullable=False, server_default="0"),
        sa.Column("required", sa.Integer, nullable=False, server_default="0"),
        sa.Column("settings", sa.Text),
        sa.UniqueConstraint("profile_type", "field_name"),
    )

    op.create_table(
        "profile_displays",
        sa.Column("kind", sa.Text, nullable=False),
        sa.Column("profile_type", sa.Text, sa.ForeignKey("profile_types.id"), nullable=False),
        sa.Column("mode", sa.Text, nullable=False),
        sa.Column("status", sa.Integer, nullable=False, server_default="1"),
        sa.UniqueConstraint("kind", "profile_type", "mode"),
    )

    op.create_table(
        "display_components",
        sa.Column("kind", sa.Text, nullable=False),
        sa.Column("profile_type", sa.Text, sa.ForeignKey("profile_types.id"), nullable=False),
        sa.Column("mode", sa.Text, nullable=False),
        sa.Column("component", sa.Text, nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("settings", sa.Text),
        sa.UniqueConstraint("kind", "profile_type", "mode", "component"),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type", sa.Text, sa.ForeignKey("profile_types.id"), nullable=False),
        sa.Column("uid", sa.Integer),
        sa.Column("address", sa.Text),
        sa.Column("data", sa.Text),
        sa.Column("created", sa.Text, nullable=False),
        sa.Column("changed", sa.Text, nullable=False),
    )
    op.create_index("ix_profiles_type", "profiles", ["type"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type", sa.Text, sa.ForeignKey("order_types.id"), nullable=False),
        sa.Column("billing_profile_id", sa.Integer, sa.ForeignKey("profiles.id")),
        sa.Column("created", sa.Text, nullable=False),
    )
    op.create_index("ix_orders_type", "orders", ["type"])
    op.create_index("ix_orders_billing_profile", "orders", ["billing_profile_id"])

    op.create_table(
        "shipments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("shipping_profile_id", sa.Integer, sa.ForeignKey("profiles.id")),
    )
    op.create_index("ix_shipments_order", "shipments", ["order_id"])
    op.create_index("ix_shipments_shipping_profile", "shipments", ["shipping_profile_id"])


def downgrade() -> None:
    op.drop_table("shipments")
    op.drop_table("orders")
    op.drop_table("profiles")
    op.drop_table("display_components")
    op.drop_table("profile_displays")
    op.drop_table("profile_fields")
    op.drop_table("profile_types")
    op.drop_table("order_types")
