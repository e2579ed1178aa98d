"""Store — repository root with transaction coordination and run locking.

The Store is the single dependency injected into every service. It owns
the database engine and the reference graph:

- **Transactions**: :meth:`Store.transaction` yields a
  :class:`StoreTransaction` bound to one connection. Services open
  SAVEPOINTs on ``txn.conn`` to isolate smaller units inside it.
- **Run lock**: :meth:`Store.run_lock` is a single-flight lock row in
  ``run_locks``. A migration's dataset-wide reference scan is only correct
  while no other run mutates shipments.
- **Graph**: cache is invalidated on transaction end (success or failure)
  and lazily rebuilt from committed state on next access.
"""

from __future__ import annotations

import logging
import os
import shutil
import socket
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError

from profsplit.domain.errors import LockHeldError
from profsplit.infrastructure.database.engine import DATA_DIR, db_path_for, init_database
from profsplit.infrastructure.database.schema import run_locks
from profsplit.infrastructure.graph.engine import ReferenceGraph
from profsplit.infrastructure.repositories import (
    OrderRepository,
    OrderTypeRepository,
    ProfileRepository,
    ProfileTypeRepository,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from profsplit.config.settings import ProfSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# StoreTransaction — yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active transaction with repositories bound to its connection."""

    conn: Connection
    _repos: dict[str, Any] = field(default_factory=dict, repr=False)

    def _repo(self, key: str, factory: type) -> Any:
        if key not in self._repos:
            self._repos[key] = factory(self.conn)
        return self._repos[key]

    @property
    def orders(self) -> OrderRepository:
        return self._repo("orders", OrderRepository)

    @property
    def profiles(self) -> ProfileRepository:
        return self._repo("profiles", ProfileRepository)

    @property
    def profile_types(self) -> ProfileTypeRepository:
        return self._repo("profile_types", ProfileTypeRepository)

    @property
    def order_types(self) -> OrderTypeRepository:
        return self._repo("order_types", OrderTypeRepository)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class Store:
    """Repository encapsulating database access, locking, and backups.

    Constructed lazily by the CLI's AppContext from :class:`ProfSettings`.
    Services receive it via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: ProfSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(self.root)
        self._graph = ReferenceGraph(self._engine)
        self._plugins: Any | None = None

    @property
    def root(self) -> Path:
        """The store root directory."""
        return self._settings.store_root

    @property
    def db_path(self) -> Path:
        return db_path_for(self.root)

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine."""
        return self._engine

    @property
    def graph(self) -> ReferenceGraph:
        """The reference graph (lazy-built from committed DB state)."""
        return self._graph

    @property
    def settings(self) -> ProfSettings:
        return self._settings

    @property
    def plugins(self) -> Any | None:
        """The plugin manager (None if not initialized)."""
        return self._plugins

    def init_plugins(self) -> None:
        """Discover entry-point plugins and wire up the hook relay."""
        from profsplit.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load()
        self._plugins = pm

    def close(self) -> None:
        """Dispose the engine's connection pool."""
        self._engine.dispose()

    @contextmanager
    def transaction(self, *, commit: bool = True) -> Iterator[StoreTransaction]:
        """One database transaction.

        Commits on normal exit, rolls back on exception. With
        ``commit=False`` the transaction is always rolled back, which is
        how dry runs see their own writes without persisting them.

        Do not read ``store.graph`` inside the block; it reflects committed
        state only.

        Usage::

            with store.transaction() as txn:
                with txn.conn.begin_nested():
                    txn.profiles.set_type(pid, "customer_billing")
        """
        with self._engine.connect() as conn, conn.begin() as trans:
            try:
                yield StoreTransaction(conn=conn)
                if not commit:
                    trans.rollback()
            finally:
                self._graph.invalidate()

    # ------------------------------------------------------------------
    # Single-flight run lock
    # ------------------------------------------------------------------

    @contextmanager
    def run_lock(self, purpose: str = "migrate") -> Iterator[str]:
        """Hold the run lock for the duration of the block.

        Yields the holder string. Raises :class:`LockHeldError` if another
        run holds the lock; nothing is written in that case.
        """
        name = self._settings.migration.lock_name
        holder = f"{socket.gethostname()}:{os.getpid()}:{purpose}"
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(run_locks).values(
                        name=name, holder=holder, acquired=datetime.now(UTC).isoformat()
                    )
                )
        except IntegrityError as exc:
            current = self.lock_status()
            raise LockHeldError(
                name,
                current.get("holder") if current else None,
                current.get("acquired") if current else None,
            ) from exc

        logger.debug("Acquired run lock %s as %s", name, holder)
        try:
            yield holder
        finally:
            with self._engine.begin() as conn:
                conn.execute(
                    delete(run_locks).where(run_locks.c.name == name, run_locks.c.holder == holder)
                )
            logger.debug("Released run lock %s", name)

    def lock_status(self) -> dict[str, str] | None:
        """Current holder of the run lock, or None when free."""
        name = self._settings.migration.lock_name
        with self._engine.connect() as conn:
            row = conn.execute(select(run_locks).where(run_locks.c.name == name)).first()
        if row is None:
            return None
        return {"name": str(row.name), "holder": str(row.holder), "acquired": str(row.acquired)}

    def break_lock(self) -> bool:
        """Remove a stale run lock. Returns True if one was removed."""
        name = self._settings.migration.lock_name
        with self._engine.begin() as conn:
            result = conn.execute(delete(run_locks).where(run_locks.c.name == name))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def backup(self) -> Path:
        """Create a timestamped copy of the database and prune old ones.

        The WAL is checkpointed first so the copy holds every committed row.
        """
        backup_dir = self.root / DATA_DIR / "backups"
        backup_dir.mkdir(parents=True, exist_ok=True)

        # Raw connection: outside the BEGIN the engine emits for Connections.
        raw = self._engine.raw_connection()
        try:
            raw.cursor().execute("PRAGMA wal_checkpoint(TRUNCATE)")
        finally:
            raw.close()

        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
        backup_path = backup_dir / f"profsplit-{stamp}.db"
        shutil.copy2(str(self.db_path), str(backup_path))

        self._prune_backups(backup_dir)
        return backup_path

    def _prune_backups(self, backup_dir: Path) -> None:
        """Keep only the newest ``[backup] max_count`` copies."""
        max_count = self._settings.backup.max_count
        backups = sorted(backup_dir.glob("profsplit-*.db"))
        if len(backups) > max_count:
            for old in backups[: len(backups) - max_count]:
                old.unlink(missing_ok=True)
