"""SQLite database engine and schema via SQLAlchemy Core."""

from profsplit.infrastructure.database.engine import (
    DEFAULT_ORDER_TYPE,
    SHARED_PROFILE_TYPE,
    create_db_engine,
    db_path_for,
    init_database,
)
from profsplit.infrastructure.database.schema import (
    display_components,
    metadata,
    order_types,
    orders,
    profile_displays,
    profile_fields,
    profile_types,
    profiles,
    run_locks,
    shipments,
)

__all__ = [
    "DEFAULT_ORDER_TYPE",
    "SHARED_PROFILE_TYPE",
    "create_db_engine",
    "db_path_for",
    "display_components",
    "init_database",
    "metadata",
    "order_types",
    "orders",
    "profile_displays",
    "profile_fields",
    "profile_types",
    "profiles",
    "run_locks",
    "shipments",
]
