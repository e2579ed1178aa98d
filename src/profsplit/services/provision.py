"""ProvisionService — ensure the Billing and Shipping profile categories exist.

Both categories are cloned from the shared category: its non-base field
definitions and the component layout of every view and form display.
Component order is kept exactly by removing the shared components from
the target display and re-adding them in shared order, only when the two
layouts differ. A second call therefore writes nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from profsplit.domain.errors import ProvisionError
from profsplit.domain.types import SPLIT_CATEGORIES, DisplayKind, ProfileCategory
from profsplit.services._helpers import order_type_context
from profsplit.services.base import BaseService
from profsplit.services.contracts import ProvisionData, dump_validated
from profsplit.services.result import ServiceResult
from profsplit.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from profsplit.domain.registry import OrderTypeContext
    from profsplit.infrastructure.repositories import ProfileTypeRepository

logger = logging.getLogger(__name__)


class ProvisionService(BaseService):
    """Creates and synchronizes the split profile categories."""

    @traced
    def provision(self, ctx: OrderTypeContext) -> ServiceResult:
        """Provision the Billing and Shipping categories for *ctx*.

        Failure is fatal for a migration: callers must not touch any
        order when this returns ``ok=False``.
        """
        op = "provision"
        warnings: list[str] = []
        try:
            with self._store.transaction() as txn:
                data = self._provision(txn.profile_types, ctx)
        except ProvisionError as exc:
            logger.error("Provisioning failed: %s", exc.message)
            return ServiceResult.failure(op, exc.code, exc.message, detail=exc.detail)
        except SQLAlchemyError as exc:
            logger.error("Provisioning failed", exc_info=True)
            return ServiceResult.failure(op, "PROVISION_FAILED", f"Provisioning failed: {exc}")

        if data["writes"]:
            self._dispatch_event(
                "post_provision",
                {
                    "order_type": ctx.id,
                    "created_types": [t["profile_type"] for t in data["types"] if t["created"]],
                    "writes": data["writes"],
                },
                warnings,
            )
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(ProvisionData, data),
            warnings=warnings,
        )

    @traced
    def provision_order_type(self, order_type_id: str) -> ServiceResult:
        """Provision for a stored order type, looked up by id."""
        with self._store.transaction() as txn:
            row = txn.order_types.get(order_type_id)
        if row is None:
            return ServiceResult.failure(
                "provision", "UNKNOWN_ORDER_TYPE", f"No order type: {order_type_id}"
            )
        return self.provision(order_type_context(row).targeting_split())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _provision(self, repo: ProfileTypeRepository, ctx: OrderTypeContext) -> dict[str, Any]:
        source = ProfileCategory.SHARED.value
        if not repo.exists(source):
            raise ProvisionError(
                f"Shared profile type {source!r} does not exist",
                detail={"profile_type": source},
            )

        labels = {
            ProfileCategory.BILLING: self._store.settings.profile_types.billing_label,
            ProfileCategory.SHIPPING: self._store.settings.profile_types.shipping_label,
        }
        writes = 0
        types: list[dict[str, Any]] = []
        for category in SPLIT_CATEGORIES:
            with trace_span(f"provision.{category.value}"):
                entry, n = self._provision_type(repo, source, category.value, labels[category])
            types.append(entry)
            writes += n

        logger.info("Provisioned split profile types for %s (%d writes)", ctx.id, writes)
        return {"order_type": ctx.id, "source": source, "types": types, "writes": writes}

    def _provision_type(
        self,
        repo: ProfileTypeRepository,
        source: str,
        target: str,
        label: str,
    ) -> tuple[dict[str, Any], int]:
        writes = 0
        created = False
        if not repo.exists(target):
            repo.create(target, label)
            created = True
            writes += 1

        existing = {f.field_name for f in repo.fields(target)}
        copied: list[str] = []
        for definition in repo.fields(source, include_base=False):
            if definition.field_name in existing:
                continue
            repo.add_field(target, definition)
            copied.append(definition.field_name)
            writes += 1

        synced: list[str] = []
        for kind in DisplayKind:
            for mode in repo.display_modes(source, kind.value):
                n = self._sync_display(repo, kind.value, source, target, mode)
                if n:
                    synced.append(f"{kind.value}.{mode}")
                    writes += n

        entry = {
            "profile_type": target,
            "label": repo.label(target) or label,
            "created": created,
            "fields_copied": copied,
            "displays_synced": synced,
        }
        return entry, writes

    @staticmethod
    def _sync_display(
        repo: ProfileTypeRepository,
        kind: str,
        source: str,
        target: str,
        mode: str,
    ) -> int:
        """Make *target*'s display carry *source*'s components in order."""
        writes = 0
        if not repo.display_exists(kind, target, mode):
            repo.create_display(kind, target, mode)
            writes += 1

        wanted = [(c.name, c.settings) for c in repo.components(kind, source, mode)]
        names = {name for name, _ in wanted}
        current = [(c.name, c.settings) for c in repo.components(kind, target, mode)]
        if [c for c in current if c[0] in names] == wanted:
            return writes

        for name, _settings in wanted:
            if any(c[0] == name for c in current):
                repo.remove_component(kind, target, mode, name)
                writes += 1
        for name, settings in wanted:
            repo.set_component(kind, target, mode, name, settings)
            writes += 1
        logger.debug("Synced %s display %s.%s from %s", kind, target, mode, source)
        return writes
