"""AnalyzeService — fan-out preview over the reference graph.

Read-only. Reports which profiles the migration will duplicate and
whether an order type's orders fall into disjoint reference groups.
Execution stays sequential either way.
"""

from __future__ import annotations

from profsplit.services.base import BaseService
from profsplit.services.contracts import AnalyzeData, dump_validated
from profsplit.services.result import ServiceResult
from profsplit.services.telemetry import trace_span, traced


class AnalyzeService(BaseService):
    """Pre-run fan-out analysis for one order type."""

    @traced
    def analyze(self, order_type_id: str) -> ServiceResult:
        op = "analyze"
        with self._store.transaction() as txn:
            if txn.order_types.get(order_type_id) is None:
                return ServiceResult.failure(
                    op, "UNKNOWN_ORDER_TYPE", f"No order type: {order_type_id}"
                )
            ids = txn.orders.order_ids_for_type(order_type_id)

        graph = self._store.graph
        wanted = set(ids)
        with trace_span("graph_analysis"):
            roles = graph.profile_roles()
            shared = [
                pid
                for pid in graph.shared_identities()
                if roles[pid]["billing"] & roles[pid]["shipping"] & wanted
            ]
            cross = [
                pid
                for pid, owners in graph.cross_order_profiles().items()
                if wanted.intersection(owners)
            ]
            conflicts = [
                c
                for c in graph.ownership_conflicts()
                if wanted.intersection(c["billing_orders"] + c["shipping_orders"])
            ]
            groups = graph.reference_groups(ids)
            # One duplicate per billing-owned profile shipped to by these orders.
            expected = sum(1 for r in roles.values() if r["billing"] and r["shipping"] & wanted)

        data = {
            "order_type": order_type_id,
            "order_count": len(ids),
            "shared_identities": shared,
            "cross_order_profiles": cross,
            "ownership_conflicts": conflicts,
            "groups": groups,
            "group_count": len(groups),
            "disjoint": all(len(g) <= 1 for g in groups),
            "expected_duplicates": expected,
        }
        warnings: list[str] = []
        if conflicts:
            warnings.append(
                f"{len(conflicts)} profile(s) are billed by one order and shipped to by "
                "another; the billing order keeps them and shipments get a duplicate"
            )
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(AnalyzeData, data),
            warnings=warnings,
        )
