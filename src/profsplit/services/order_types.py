"""OrderTypeService — profile mode inspection and the split transition.

``enable_split`` is the only writer of an order type's mode flag:

GUARD → LOCK → PROVISION → MIGRATE → (accept or refuse partial) → FLAG
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from profsplit.domain.errors import LockHeldError, ModeTransitionError
from profsplit.domain.lifecycle import ProfileMode, is_valid_transition
from profsplit.domain.registry import resolve
from profsplit.services._helpers import now_iso, order_type_context
from profsplit.services.base import BaseService
from profsplit.services.contracts import OrderTypeData, OrderTypeListData, dump_validated
from profsplit.services.result import ServiceResult
from profsplit.services.telemetry import traced

if TYPE_CHECKING:
    from profsplit.infrastructure.repositories import OrderTypeRow
    from profsplit.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)


def describe_orders(label: str, count: int) -> str:
    """Sentence shown next to the mode toggle.

    Examples:
        >>> describe_orders("Default", 1)
        'The Default order type contains 1 order.'
        >>> describe_orders("Default", 3)
        'The Default order type contains 3 orders.'
    """
    noun = "order" if count == 1 else "orders"
    return f"The {label} order type contains {count} {noun}."


class OrderTypeService(BaseService):
    """Reads order types and performs the one-way split transition."""

    @traced
    def show(self, order_type_id: str) -> ServiceResult:
        """Describe one order type and whether it can still be split."""
        op = "show_order_type"
        with self._store.transaction() as txn:
            row = txn.order_types.get(order_type_id)
            if row is None:
                return ServiceResult.failure(
                    op, "UNKNOWN_ORDER_TYPE", f"No order type: {order_type_id}"
                )
            data = self._describe(txn, row)
        return ServiceResult(ok=True, op=op, data=dump_validated(OrderTypeData, data))

    @traced
    def list_types(self) -> ServiceResult:
        op = "list_order_types"
        with self._store.transaction() as txn:
            items = [self._describe(txn, row) for row in txn.order_types.list_all()]
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(OrderTypeListData, {"count": len(items), "items": items}),
        )

    @traced
    def enable_split(
        self,
        order_type_id: str,
        *,
        accept_partial: bool = False,
        chunk_size: int | None = None,
    ) -> ServiceResult:
        """Provision, migrate every order of the type, then set split mode.

        The flag is only written when the migration had no failures, or
        when *accept_partial* is set. Otherwise the result is
        ``PARTIAL_MIGRATION`` with the migration report in ``error.detail``.
        """
        op = "enable_split"
        warnings: list[str] = []

        with self._store.transaction() as txn:
            row = txn.order_types.get(order_type_id)
        if row is None:
            return ServiceResult.failure(
                op, "UNKNOWN_ORDER_TYPE", f"No order type: {order_type_id}"
            )

        ctx = order_type_context(row)
        try:
            self._check_transition(ctx.mode, ProfileMode.SPLIT, order_type_id)
        except ModeTransitionError as exc:
            return ServiceResult.failure(op, exc.code, exc.message, detail=exc.detail)

        try:
            with self._store.run_lock(op):
                return self._enable_split_locked(
                    op,
                    row,
                    accept_partial=accept_partial,
                    chunk_size=chunk_size,
                    warnings=warnings,
                )
        except LockHeldError as exc:
            return ServiceResult.failure(op, exc.code, exc.message, detail=exc.detail)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _enable_split_locked(
        self,
        op: str,
        row: OrderTypeRow,
        *,
        accept_partial: bool,
        chunk_size: int | None,
        warnings: list[str],
    ) -> ServiceResult:
        from profsplit.services.migrate import MigrationService
        from profsplit.services.provision import ProvisionService

        # Another run may have enabled split mode between the first read and the lock.
        with self._store.transaction() as txn:
            current = txn.order_types.get(row.id)
        if current is None:
            return ServiceResult.failure(op, "UNKNOWN_ORDER_TYPE", f"No order type: {row.id}")
        ctx = order_type_context(current)
        try:
            self._check_transition(ctx.mode, ProfileMode.SPLIT, row.id)
        except ModeTransitionError as exc:
            return ServiceResult.failure(op, exc.code, exc.message, detail=exc.detail)
        target = ctx.targeting_split()

        provisioned = ProvisionService(self._store).provision(target)
        if not provisioned.ok:
            assert provisioned.error is not None
            return ServiceResult.failure(
                op,
                provisioned.error.code,
                provisioned.error.message,
                detail=provisioned.error.detail,
            )
        warnings.extend(provisioned.warnings)

        with self._store.transaction() as txn:
            ids = txn.orders.order_ids_for_type(row.id)
        migrated = MigrationService(self._store).migrate(
            ids, target, chunk_size=chunk_size, hold_lock=False
        )
        if not migrated.ok:
            assert migrated.error is not None
            return ServiceResult.failure(
                op, migrated.error.code, migrated.error.message, detail=migrated.error.detail
            )
        warnings.extend(migrated.warnings)

        report = migrated.data
        if report["failed"] and not accept_partial:
            return ServiceResult.failure(
                op,
                "PARTIAL_MIGRATION",
                f"{len(report['failed'])} order(s) failed to migrate; "
                f"split mode not enabled for {row.id}",
                detail={"report": report},
                warnings=warnings,
            )

        enabled_at = now_iso()
        with self._store.transaction() as txn:
            written = txn.order_types.set_split_profiles(row.id, enabled_at)
        if not written:
            return ServiceResult.failure(
                op,
                "INVALID_TRANSITION",
                f"Order type {row.id} is already in split mode",
                detail={
                    "order_type": row.id,
                    "from": ProfileMode.SPLIT.value,
                    "to": ProfileMode.SPLIT.value,
                },
                warnings=warnings,
            )
        logger.info("Enabled split profiles for order type %s", row.id)

        self._dispatch_event(
            "post_mode_change",
            {
                "order_type": row.id,
                "old_mode": ProfileMode.SINGLE.value,
                "new_mode": ProfileMode.SPLIT.value,
            },
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "order_type": row.id,
                "mode": ProfileMode.SPLIT.value,
                "split_enabled_at": enabled_at,
                "partial": bool(report["failed"]),
                "provision": provisioned.data,
                "migration": report,
            },
            warnings=warnings,
        )

    @staticmethod
    def _check_transition(current: ProfileMode, target: ProfileMode, type_id: str) -> None:
        if not is_valid_transition(current.value, target.value):
            raise ModeTransitionError(
                f"Order type {type_id} cannot move from {current.value} to {target.value}",
                detail={"order_type": type_id, "from": current.value, "to": target.value},
            )

    @staticmethod
    def _describe(txn: StoreTransaction, row: OrderTypeRow) -> dict[str, Any]:
        ctx = order_type_context(row)
        targets = resolve(ctx)
        count = txn.orders.count_for_type(row.id)
        return {
            "id": row.id,
            "label": row.label,
            "mode": ctx.mode.value,
            "billing_category": targets.billing.value,
            "shipping_category": targets.shipping.value,
            "order_count": count,
            "description": describe_orders(row.label, count),
            "can_enable_split": is_valid_transition(ctx.mode.value, ProfileMode.SPLIT.value),
            "split_enabled_at": row.split_enabled_at,
        }
