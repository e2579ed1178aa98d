"""ReferenceGraph — lazy-built NetworkX graph of profile references.

Nodes are ``("order", id)``, ``("shipment", id)`` and ``("profile", id)``.
Edges: order—profile (``role="billing"``), order—shipment
(``role="contains"``), shipment—profile (``role="shipping"``).

Rebuilt from committed DB state on first access after :meth:`invalidate`.
Only used for read-side analysis; the migration itself never consults it.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

import networkx as nx
from sqlalchemy import select

from profsplit.infrastructure.database.schema import orders, shipments

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.engine import Engine

type _Graph = nx.Graph
type _Node = tuple[str, int]


def _order(order_id: int) -> _Node:
    return ("order", order_id)


def _profile(profile_id: int) -> _Node:
    return ("profile", profile_id)


class ReferenceGraph:
    """Fan-out analysis over the whole dataset's profile references."""

    def __init__(self, db: Engine) -> None:
        self._db = db
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building from DB on first access."""
        if self._graph is None:
            self._graph = self._build_from_db()
        return self._graph

    def invalidate(self) -> None:
        """Clear the cached graph, forcing rebuild on next access."""
        self._graph = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def profile_roles(self) -> dict[int, dict[str, set[int]]]:
        """Map profile id to ``{"billing": {order ids}, "shipping": {order ids}}``."""
        g = self.graph
        roles: dict[int, dict[str, set[int]]] = defaultdict(
            lambda: {"billing": set(), "shipping": set()}
        )
        for u, v, attrs in g.edges(data=True):
            role = attrs.get("role")
            if role == "billing":
                order_node, profile_node = (u, v) if u[0] == "order" else (v, u)
                roles[profile_node[1]]["billing"].add(order_node[1])
            elif role == "shipping":
                shipment_node, profile_node = (u, v) if u[0] == "shipment" else (v, u)
                roles[profile_node[1]]["shipping"].add(g.nodes[shipment_node]["order_id"])
        return dict(roles)

    def shared_identities(self) -> list[int]:
        """Profiles used as billing and shipping by the same order."""
        return sorted(
            pid for pid, r in self.profile_roles().items() if r["billing"] & r["shipping"]
        )

    def cross_order_profiles(self) -> dict[int, list[int]]:
        """Profiles referenced by more than one order, with those orders."""
        result: dict[int, list[int]] = {}
        for pid, r in self.profile_roles().items():
            owners = r["billing"] | r["shipping"]
            if len(owners) > 1:
                result[pid] = sorted(owners)
        return dict(sorted(result.items()))

    def ownership_conflicts(self) -> list[dict[str, Any]]:
        """Profiles billed by one order and shipped to by a different order."""
        conflicts: list[dict[str, Any]] = []
        for pid, r in sorted(self.profile_roles().items()):
            foreign = r["shipping"] - r["billing"]
            if r["billing"] and foreign:
                conflicts.append(
                    {
                        "profile_id": pid,
                        "billing_orders": sorted(r["billing"]),
                        "shipping_orders": sorted(foreign),
                    }
                )
        return conflicts

    def reference_groups(self, order_ids: Iterable[int] | None = None) -> list[list[int]]:
        """Orders grouped by connected reference component.

        Two orders land in the same group when any chain of shared profiles
        links them. With *order_ids*, only those orders are reported.
        """
        g = self.graph
        wanted = set(order_ids) if order_ids is not None else None
        groups: list[list[int]] = []
        for component in nx.connected_components(g):
            members = sorted(n[1] for n in component if n[0] == "order")
            if wanted is not None:
                members = [m for m in members if m in wanted]
            if members:
                groups.append(members)
        return sorted(groups)

    def is_disjoint(self, order_ids: Iterable[int]) -> bool:
        """True when no two of *order_ids* share any profile, directly or transitively."""
        return all(len(group) <= 1 for group in self.reference_groups(order_ids))

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _build_from_db(self) -> _Graph:
        """Build the graph from ``orders`` and ``shipments``.

        Orders are added first so orders without any reference still appear.
        """
        g: _Graph = nx.Graph()
        with self._db.connect() as conn:
            order_rows = conn.execute(
                select(orders.c.id, orders.c.type, orders.c.billing_profile_id)
            )
            for row in order_rows:
                g.add_node(_order(row.id), order_type=row.type)
                if row.billing_profile_id is not None:
                    g.add_edge(_order(row.id), _profile(row.billing_profile_id), role="billing")

            for row in conn.execute(select(shipments)):
                node = ("shipment", row.id)
                g.add_node(node, order_id=row.order_id)
                g.add_edge(_order(row.order_id), node, role="contains")
                if row.shipping_profile_id is not None:
                    g.add_edge(node, _profile(row.shipping_profile_id), role="shipping")
        return g
