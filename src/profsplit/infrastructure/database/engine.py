"""Database engine setup for SQLite with WAL mode and savepoints.

The DB is stored at {store_root}/.profsplit/profsplit.db.

SQLAlchemy Core (not ORM) is used: the migration reads and rewrites rows
by id and never benefits from an identity map.

pysqlite's own transaction handling is disabled so that SQLAlchemy emits
BEGIN itself; without that, SAVEPOINT (used to isolate one order inside a
chunk transaction) does not work on SQLite.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Connection, Engine

from profsplit.config.discovery import STORE_DIRNAME
from profsplit.infrastructure.database.schema import (
    display_components,
    metadata,
    order_types,
    profile_displays,
    profile_fields,
    profile_types,
)

DATA_DIR = STORE_DIRNAME
DB_FILENAME = "profsplit.db"

SHARED_PROFILE_TYPE = "customer"
DEFAULT_ORDER_TYPE = "default"

# Field definitions of the shared customer profile type seeded on init.
# Base fields belong to every profile and are never cloned.
_SHARED_FIELDS: list[dict[str, Any]] = [
    {"field_name": "profile_id", "field_type": "integer", "is_base": 1, "required": 1},
    {"field_name": "type", "field_type": "string", "is_base": 1, "required": 1},
    {"field_name": "uid", "field_type": "integer", "is_base": 1, "required": 0},
    {
        "field_name": "address",
        "field_type": "address",
        "is_base": 0,
        "required": 1,
        "settings": {"available_countries": [], "langcode_override": ""},
    },
]

_SHARED_COMPONENTS: dict[str, list[tuple[str, dict[str, Any]]]] = {
    "view": [("address", {"type": "address_default", "label": "hidden", "weight": 0})],
    "form": [("address", {"type": "address_default", "weight": 0})],
}


def db_path_for(store_root: Path) -> Path:
    """Location of the database file under *store_root*."""
    return store_root / DATA_DIR / DB_FILENAME


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL, foreign keys, and working savepoints."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


def init_database(store_root: Path) -> Engine:
    """Initialize the database at ``{store_root}/.profsplit/profsplit.db``.

    Creates the ``.profsplit/`` directory structure, all tables from
    :data:`schema.metadata`, and seeds the shared customer profile type and
    the default order type.

    Idempotent — safe to call on an existing store.
    """
    data_dir = store_root / DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "backups").mkdir(exist_ok=True)

    engine = create_db_engine(db_path_for(store_root))
    metadata.create_all(engine)
    _seed_defaults(engine)
    return engine


def _seed_defaults(engine: Engine) -> None:
    """Insert the shared profile type and default order type if missing."""
    now = datetime.now(UTC).isoformat()
    with engine.begin() as conn:
        existing = conn.execute(
            select(profile_types.c.id).where(profile_types.c.id == SHARED_PROFILE_TYPE)
        ).first()
        if existing is None:
            conn.execute(
                insert(profile_types).values(id=SHARED_PROFILE_TYPE, label="Customer", created=now)
            )
            for spec in _SHARED_FIELDS:
                conn.execute(
                    insert(profile_fields).values(
                        profile_type=SHARED_PROFILE_TYPE,
                        field_name=spec["field_name"],
                        field_type=spec["field_type"],
                        is_base=spec["is_base"],
                        required=spec["required"],
                        settings=json.dumps(spec.get("settings", {})),
                    )
                )
            for kind, components in _SHARED_COMPONENTS.items():
                conn.execute(
                    insert(profile_displays).values(
                        kind=kind, profile_type=SHARED_PROFILE_TYPE, mode="default", status=1
                    )
                )
                for position, (name, settings) in enumerate(components):
                    conn.execute(
                        insert(display_components).values(
                            kind=kind,
                            profile_type=SHARED_PROFILE_TYPE,
                            mode="default",
                            component=name,
                            position=position,
                            settings=json.dumps(settings),
                        )
                    )

        row = conn.execute(
            select(order_types.c.id).where(order_types.c.id == DEFAULT_ORDER_TYPE)
        ).first()
        if row is None:
            conn.execute(
                insert(order_types).values(id=DEFAULT_ORDER_TYPE, label="Default")
            )
