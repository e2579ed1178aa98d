"""MigrationService — the batch executor and plan inspection.

Orders are processed strictly sequentially in chunks of
``[migration] chunk_size``. Each chunk is one transaction; each order
inside it runs in a SAVEPOINT so a failing order rolls back only its own
writes and the batch continues. The whole run holds the store's
single-flight lock because the resolver's dataset-wide scan is only
correct while nothing else mutates shipments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from profsplit.domain.errors import LockHeldError, ProfsplitError
from profsplit.domain.registry import resolve
from profsplit.services._helpers import chunked, order_type_context
from profsplit.services.base import BaseService
from profsplit.services.contracts import MigrationReportData, PlanData, dump_validated
from profsplit.services.planner import MigrationPlanner
from profsplit.services.result import ServiceResult
from profsplit.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Connection

    from profsplit.domain.registry import OrderTypeContext

logger = logging.getLogger(__name__)


@dataclass
class _ChunkReport:
    """Accumulated results of one chunk, merged only after it commits."""

    succeeded: list[int] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)
    created_profiles: list[int] = field(default_factory=list)
    repointed_shipments: list[int] = field(default_factory=list)
    writes: int = 0


class MigrationService(BaseService):
    """Drives the planner over order ids and reports per-order outcomes."""

    @traced
    def migrate(
        self,
        order_ids: Iterable[int],
        ctx: OrderTypeContext,
        *,
        chunk_size: int | None = None,
        dry_run: bool = False,
        hold_lock: bool = True,
    ) -> ServiceResult:
        """Migrate *order_ids* against the categories *ctx* resolves to.

        ``ok`` is True whenever the run completed, including runs with
        per-order failures; those are listed in ``data["failed"]``.
        Pass ``hold_lock=False`` only when the caller already holds the
        run lock.
        """
        op = "migrate"
        ids = list(dict.fromkeys(order_ids))
        size = chunk_size
        if size is None:
            size = self._store.settings.migration.chunk_size
        if size < 1:
            return ServiceResult.failure(
                op, "INVALID_CHUNK_SIZE", f"Chunk size must be positive, got {size}"
            )

        if not ids:
            data = dump_validated(
                MigrationReportData, {"order_type": ctx.id, "dry_run": dry_run}
            )
            return ServiceResult(ok=True, op=op, data=data)

        if not hold_lock:
            return self._run(op, ids, ctx, size, dry_run=dry_run)
        try:
            with self._store.run_lock(op):
                return self._run(op, ids, ctx, size, dry_run=dry_run)
        except LockHeldError as exc:
            return ServiceResult.failure(op, exc.code, exc.message, detail=exc.detail)

    @traced
    def migrate_order_type(
        self,
        order_type_id: str,
        *,
        order_ids: Iterable[int] | None = None,
        chunk_size: int | None = None,
        dry_run: bool = False,
    ) -> ServiceResult:
        """Migrate orders of *order_type_id* to the split categories.

        Every order of the type, ascending, unless *order_ids* narrows it.
        The flag itself is left alone; ``OrderTypeService.enable_split``
        is the only writer of the mode.
        """
        with self._store.transaction() as txn:
            row = txn.order_types.get(order_type_id)
            if order_ids is not None:
                ids = list(order_ids)
            elif row is not None:
                ids = txn.orders.order_ids_for_type(order_type_id)
            else:
                ids = []
        if row is None:
            return ServiceResult.failure(
                "migrate", "UNKNOWN_ORDER_TYPE", f"No order type: {order_type_id}"
            )
        ctx = order_type_context(row).targeting_split()
        return self.migrate(ids, ctx, chunk_size=chunk_size, dry_run=dry_run)

    @traced
    def plan(self, order_id: int, *, order_type_id: str | None = None) -> ServiceResult:
        """Inspect the split migration plan for one order without writing.

        The order's own type supplies the context unless *order_type_id*
        overrides it. The plan always targets the split categories.
        """
        op = "plan"
        with self._store.transaction(commit=False) as txn:
            order = txn.orders.get(order_id)
            if order is None:
                return ServiceResult.failure(op, "ORDER_NOT_FOUND", f"No order: {order_id}")
            type_id = order_type_id or order.type
            row = txn.order_types.get(type_id)
            if row is None:
                return ServiceResult.failure(
                    op, "UNKNOWN_ORDER_TYPE", f"No order type: {type_id}"
                )
            ctx = order_type_context(row).targeting_split()
            try:
                plan = MigrationPlanner(txn.conn).plan_for(order_id, ctx)
            except ProfsplitError as exc:
                return ServiceResult.failure(op, exc.code, exc.message, detail=exc.detail)

        resolved = resolve(ctx)
        payload = plan.model_dump(mode="json")
        payload.update(
            order_type=ctx.id,
            target_billing=resolved.billing.value,
            target_shipping=resolved.shipping.value,
            duplicates=len(plan.duplicates),
            is_noop=plan.is_noop,
        )
        return ServiceResult(ok=True, op=op, data=dump_validated(PlanData, payload))

    # ------------------------------------------------------------------
    # Batch execution
    # ------------------------------------------------------------------

    def _run(
        self,
        op: str,
        ids: list[int],
        ctx: OrderTypeContext,
        size: int,
        *,
        dry_run: bool,
    ) -> ServiceResult:
        warnings: list[str] = []
        report: dict[str, Any] = {
            "order_type": ctx.id,
            "succeeded": [],
            "failed": [],
            "created_profiles": [],
            "repointed_shipments": [],
            "writes": 0,
            "chunks": 0,
            "dry_run": dry_run,
        }

        if not dry_run and self._store.settings.migration.backup_before_run:
            try:
                report["backup_path"] = str(self._store.backup())
            except OSError as exc:
                return ServiceResult.failure(op, "BACKUP_FAILED", f"Backup failed: {exc}")

        chunks = list(chunked(ids, size))
        logger.info(
            "Migrating %d order(s) of %s in %d chunk(s)%s",
            len(ids),
            ctx.id,
            len(chunks),
            " (dry run)" if dry_run else "",
        )

        if dry_run:
            # One rolled-back transaction so later chunks see earlier writes.
            with self._store.transaction(commit=False) as txn:
                for chunk in chunks:
                    self._merge(report, self._run_chunk(txn.conn, chunk, ctx))
        else:
            for chunk in chunks:
                self._run_committed(report, chunk, ctx, warnings)

        if report["failed"]:
            warnings.append(f"{len(report['failed'])} order(s) failed to migrate")
        if not dry_run:
            self._dispatch_event(
                "post_migrate_batch",
                {
                    "order_type": ctx.id,
                    "succeeded": list(report["succeeded"]),
                    "failed": [f["order_id"] for f in report["failed"]],
                },
                warnings,
            )

        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(MigrationReportData, report),
            warnings=warnings,
        )

    def _run_committed(
        self,
        report: dict[str, Any],
        chunk: list[int],
        ctx: OrderTypeContext,
        warnings: list[str],
    ) -> None:
        """Run and commit one chunk; a failed commit fails every order in it."""
        result: _ChunkReport | None = None
        try:
            with self._store.transaction() as txn:
                result = self._run_chunk(txn.conn, chunk, ctx)
        except SQLAlchemyError as exc:
            logger.warning("Chunk %s failed to commit", chunk, exc_info=True)
            already_failed = {f["order_id"]: f for f in result.failed} if result else {}
            report["chunks"] += 1
            report["failed"].extend(
                already_failed.get(
                    oid, {"order_id": oid, "code": "COMMIT_FAILED", "message": str(exc)}
                )
                for oid in chunk
            )
            return

        self._merge(report, result)
        for oid in result.succeeded:
            self._dispatch_event(
                "post_migrate_order",
                {"order_id": oid, "order_type": ctx.id},
                warnings,
            )

    def _run_chunk(self, conn: Connection, chunk: list[int], ctx: OrderTypeContext) -> _ChunkReport:
        planner = MigrationPlanner(conn)
        result = _ChunkReport()
        with trace_span("chunk") as span:
            for order_id in chunk:
                try:
                    with conn.begin_nested():
                        outcome = planner.apply(order_id, ctx)
                except ProfsplitError as exc:
                    logger.warning("Order %d failed: %s: %s", order_id, exc.code, exc.message)
                    result.failed.append(
                        {"order_id": order_id, "code": exc.code, "message": exc.message}
                    )
                    continue
                except Exception as exc:
                    logger.warning("Order %d failed unexpectedly", order_id, exc_info=True)
                    result.failed.append(
                        {"order_id": order_id, "code": "UNEXPECTED", "message": str(exc)}
                    )
                    continue

                result.succeeded.append(order_id)
                result.created_profiles.extend(outcome.created_profiles)
                result.repointed_shipments.extend(outcome.repointed_shipments)
                result.writes += outcome.writes
            if span:
                span.count("orders", len(chunk))
                span.annotate("failed", len(result.failed))
        return result

    @staticmethod
    def _merge(report: dict[str, Any], result: _ChunkReport) -> None:
        report["chunks"] += 1
        report["succeeded"].extend(result.succeeded)
        report["failed"].extend(result.failed)
        report["created_profiles"].extend(result.created_profiles)
        report["repointed_shipments"].extend(result.repointed_shipments)
        report["writes"] += result.writes

    # ------------------------------------------------------------------
    # Run lock maintenance
    # ------------------------------------------------------------------

    def unlock(self) -> ServiceResult:
        """Remove a run lock left behind by a crashed run."""
        op = "unlock"
        status = self._store.lock_status()
        removed = self._store.break_lock()
        if removed:
            logger.warning("Removed run lock held by %s", status["holder"] if status else "?")
        return ServiceResult(
            ok=True,
            op=op,
            data={"removed": removed, "holder": status["holder"] if status else None},
        )
