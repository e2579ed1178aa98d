"""VerifyService — post-migration integrity check.

Read-only. Checks that every order of a split-mode order type bills to a
``customer_billing`` profile, that every one of its shipments ships to a
``customer_shipping`` profile, and that no profile serves both roles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from profsplit.domain.types import SPLIT_CATEGORIES, ProfileCategory
from profsplit.services.base import BaseService
from profsplit.services.contracts import VerifyResultData, dump_validated
from profsplit.services.result import ServiceResult
from profsplit.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from profsplit.infrastructure.store import StoreTransaction


class VerifyService(BaseService):
    """Checks the dataset-wide split invariants."""

    @traced
    def verify(self, order_type_id: str | None = None) -> ServiceResult:
        """Verify split-mode order types, or only *order_type_id*."""
        op = "verify"
        issues: list[dict[str, Any]] = []

        with self._store.transaction() as txn:
            if order_type_id is not None:
                if txn.order_types.get(order_type_id) is None:
                    return ServiceResult.failure(
                        op, "UNKNOWN_ORDER_TYPE", f"No order type: {order_type_id}"
                    )
                type_ids = [order_type_id]
            else:
                type_ids = [t.id for t in txn.order_types.list_all() if t.use_split_profiles]

            for category in SPLIT_CATEGORIES:
                if not txn.profile_types.exists(category.value):
                    issues.append(
                        {
                            "category": "missing_profile_type",
                            "severity": "warning",
                            "message": f"Profile type {category.value!r} is not provisioned",
                        }
                    )

            touched: set[int] = set()
            with trace_span("categories"):
                for type_id in type_ids:
                    touched |= self._check_categories(txn, type_id, issues)

        with trace_span("dual_use"):
            for pid, roles in sorted(self._store.graph.profile_roles().items()):
                if pid in touched and roles["billing"] and roles["shipping"]:
                    issues.append(
                        {
                            "category": "dual_use",
                            "severity": "error",
                            "profile_id": pid,
                            "message": (
                                f"Profile {pid} is billing for orders "
                                f"{sorted(roles['billing'])} and shipping for orders "
                                f"{sorted(roles['shipping'])}"
                            ),
                        }
                    )

        error_count = sum(1 for i in issues if i["severity"] == "error")
        warning_count = len(issues) - error_count
        data = {
            "order_types": type_ids,
            "issues": issues,
            "count": len(issues),
            "error_count": error_count,
            "warning_count": warning_count,
            "healthy": error_count == 0,
        }
        return ServiceResult(ok=True, op=op, data=dump_validated(VerifyResultData, data))

    @staticmethod
    def _check_categories(
        txn: StoreTransaction,
        type_id: str,
        issues: list[dict[str, Any]],
    ) -> set[int]:
        """Append category issues for *type_id*; return the profile ids seen."""
        seen: set[int] = set()
        for order in txn.orders.billing_references(type_id):
            pid = order.billing_profile_id
            if pid is None:
                continue
            seen.add(pid)
            profile = txn.profiles.get(pid)
            if profile is None or profile.type != ProfileCategory.BILLING.value:
                issues.append(
                    {
                        "category": "billing_category",
                        "severity": "error",
                        "order_id": order.id,
                        "profile_id": pid,
                        "message": (
                            f"Order {order.id} bills to profile {pid} of type "
                            f"{(profile.type if profile else 'missing')!r}"
                        ),
                    }
                )

        for shipment in txn.orders.shipping_references(type_id):
            pid = shipment.shipping_profile_id
            if pid is None:
                continue
            seen.add(pid)
            profile = txn.profiles.get(pid)
            if profile is None or profile.type != ProfileCategory.SHIPPING.value:
                issues.append(
                    {
                        "category": "shipping_category",
                        "severity": "error",
                        "order_id": shipment.order_id,
                        "shipment_id": shipment.id,
                        "profile_id": pid,
                        "message": (
                            f"Shipment {shipment.id} ships to profile {pid} of type "
                            f"{(profile.type if profile else 'missing')!r}"
                        ),
                    }
                )
        return seen
