"""SQLAlchemy Core table definitions for the profsplit store.

Profile type ids double as :class:`~profsplit.domain.types.ProfileCategory`
values. JSON columns are stored as TEXT and (de)serialized by the
repositories.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

order_types = Table(
    "order_types",
    metadata,
    Column("id", Text, primary_key=True),
    Column("label", Text, nullable=False),
    Column("use_split_profiles", Integer, nullable=False, default=0, server_default="0"),
    Column("split_enabled_at", Text),
)

profile_types = Table(
    "profile_types",
    metadata,
    Column("id", Text, primary_key=True),
    Column("label", Text, nullable=False),
    Column("created", Text, nullable=False),
)

profile_fields = Table(
    "profile_fields",
    metadata,
    Column("profile_type", Text, ForeignKey("profile_types.id"), nullable=False),
    Column("field_name", Text, nullable=False),
    Column("field_type", Text, nullable=False),
    Column("is_base", Integer, nullable=False, default=0, server_default="0"),
    Column("required", Integer, nullable=False, default=0, server_default="0"),
    Column("settings", Text),  # JSON object
    UniqueConstraint("profile_type", "field_name"),
)

profile_displays = Table(
    "profile_displays",
    metadata,
    Column("kind", Text, nullable=False),  # view | form
    Column("profile_type", Text, ForeignKey("profile_types.id"), nullable=False),
    Column("mode", Text, nullable=False),
    Column("status", Integer, nullable=False, default=1, server_default="1"),
    UniqueConstraint("kind", "profile_type", "mode"),
)

display_components = Table(
    "display_components",
    metadata,
    Column("kind", Text, nullable=False),
    Column("profile_type", Text, ForeignKey("profile_types.id"), nullable=False),
    Column("mode", Text, nullable=False),
    Column("component", Text, nullable=False),
    Column("position", Integer, nullable=False),
    Column("settings", Text),  # JSON object
    UniqueConstraint("kind", "profile_type", "mode", "component"),
)

profiles = Table(
    "profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("type", Text, ForeignKey("profile_types.id"), nullable=False),
    Column("uid", Integer),
    Column("address", Text),  # JSON object
    Column("data", Text),  # JSON object, extra field values
    Column("created", Text, nullable=False),
    Column("changed", Text, nullable=False),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("type", Text, ForeignKey("order_types.id"), nullable=False),
    Column("billing_profile_id", Integer, ForeignKey("profiles.id")),
    Column("created", Text, nullable=False),
)

shipments = Table(
    "shipments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id"), nullable=False),
    Column("shipping_profile_id", Integer, ForeignKey("profiles.id")),
)

run_locks = Table(
    "run_locks",
    metadata,
    Column("name", Text, primary_key=True),
    Column("holder", Text, nullable=False),
    Column("acquired", Text, nullable=False),
)

# ---------------------------------------------------------------------------
# Indexes for the reference scans
# ---------------------------------------------------------------------------

Index("ix_orders_type", orders.c.type)
Index("ix_orders_billing_profile", orders.c.billing_profile_id)
Index("ix_shipments_order", shipments.c.order_id)
Index("ix_shipments_shipping_profile", shipments.c.shipping_profile_id)
Index("ix_profiles_type", profiles.c.type)
