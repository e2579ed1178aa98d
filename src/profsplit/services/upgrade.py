"""UpgradeService — store schema migration with Alembic.

Pipeline: BACKUP → MIGRATE → VALIDATE → REPORT
"""

from __future__ import annotations

import logging
from typing import Any

from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from profsplit.infrastructure.database.engine import db_path_for
from profsplit.infrastructure.database.migrations import build_config
from profsplit.services.base import BaseService
from profsplit.services.result import ServiceResult

logger = logging.getLogger(__name__)

BASELINE_REVISION = "001_baseline"


class UpgradeService(BaseService):
    """Handles store schema migrations via Alembic."""

    def _db_url(self) -> str:
        return f"sqlite:///{db_path_for(self._store.root)}"

    def _untracked_revision(self) -> str | None:
        """Revision an unversioned store's tables correspond to.

        None when the core tables are missing entirely.
        """
        insp = inspect(self._store.engine)
        if "orders" not in insp.get_table_names():
            return None
        columns = {c["name"] for c in insp.get_columns("order_types")}
        return "head" if "split_enabled_at" in columns else BASELINE_REVISION

    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "upgrade"

        try:
            cfg = build_config(self._db_url())
            script = ScriptDirectory.from_config(cfg)
            head = script.get_current_head()

            with self._store.engine.connect() as conn:
                ctx = MigrationContext.configure(conn)
                current = ctx.get_current_revision()

            # Walk from head down to current
            pending: list[dict[str, Any]] = []
            if current != head and head is not None:
                rev_obj = script.get_revision(head)
                while rev_obj is not None and rev_obj.revision != current:
                    pending.append({"revision": rev_obj.revision, "description": rev_obj.doc or ""})
                    down = rev_obj.down_revision
                    if down is None:
                        break
                    rev_obj = script.get_revision(str(down))
        except Exception as exc:
            return ServiceResult.failure(op, "CHECK_FAILED", f"Failed to check migrations: {exc}")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": head,
            },
        )

    def apply(self) -> ServiceResult:
        """BACKUP → MIGRATE → VALIDATE → REPORT pipeline."""
        op = "upgrade"
        warnings: list[str] = []

        check_result = self.check_pending()
        if not check_result.ok:
            return check_result

        pending_count = check_result.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check_result.data["head"],
                    "message": "Store schema is already up to date",
                },
            )

        # BACKUP
        try:
            backup_path = self._store.backup()
        except OSError as exc:
            return ServiceResult.failure(op, "BACKUP_FAILED", f"Backup failed: {exc}")

        # MIGRATE (stamp first when the tables predate version tracking)
        try:
            cfg = build_config(self._db_url())
            if check_result.data.get("current") is None:
                untracked = self._untracked_revision()
                if untracked is not None:
                    command.stamp(cfg, untracked)
            command.upgrade(cfg, "head")
        except Exception as exc:
            return ServiceResult.failure(
                op,
                "MIGRATION_FAILED",
                f"Migration failed: {exc}. Backup at: {backup_path}",
                detail={"backup_path": str(backup_path)},
            )

        # VALIDATE
        from profsplit.services.verify import VerifyService

        integrity = VerifyService(self._store).verify()
        if integrity.ok and integrity.data["error_count"] > 0:
            warnings.append(
                f"Post-upgrade verification found {integrity.data['error_count']} errors"
            )

        logger.info("Upgraded store schema to %s", check_result.data["head"])
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "applied_count": pending_count,
                "current": check_result.data["head"],
                "backup_path": str(backup_path),
            },
            warnings=warnings,
        )

    def stamp_current(self) -> ServiceResult:
        """Stamp the store as at current head (for freshly created stores)."""
        op = "upgrade"

        try:
            cfg = build_config(self._db_url())
            command.stamp(cfg, "head")
            head = ScriptDirectory.from_config(cfg).get_current_head()
        except Exception as exc:
            return ServiceResult.failure(op, "STAMP_FAILED", f"Failed to stamp database: {exc}")

        return ServiceResult(ok=True, op=op, data={"stamped": True, "current": head})
