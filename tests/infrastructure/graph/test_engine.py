"""Tests for the ReferenceGraph fan-out queries."""

import pytest

from profsplit.infrastructure.store import Store


@pytest.fixture
def dataset(store: Store) -> dict[str, int]:
    """Three orders: o1 shares p1 with itself and o2; o3 stands alone."""
    with store.transaction() as txn:
        p1 = txn.profiles.create("customer")
        p2 = txn.profiles.create("customer")
        p3 = txn.profiles.create("customer")
        p4 = txn.profiles.create("customer")
        o1 = txn.orders.create("default", p1)
        o2 = txn.orders.create("default", p2)
        o3 = txn.orders.create("default", p3)
        txn.orders.add_shipment(o1, p1)
        txn.orders.add_shipment(o2, p1)
        txn.orders.add_shipment(o3, p4)
    return {"p1": p1, "p2": p2, "p3": p3, "p4": p4, "o1": o1, "o2": o2, "o3": o3}


class TestReferenceGraph:
    def test_profile_roles(self, store: Store, dataset: dict[str, int]) -> None:
        roles = store.graph.profile_roles()
        assert roles[dataset["p1"]] == {
            "billing": {dataset["o1"]},
            "shipping": {dataset["o1"], dataset["o2"]},
        }
        assert roles[dataset["p4"]] == {"billing": set(), "shipping": {dataset["o3"]}}

    def test_shared_identities(self, store: Store, dataset: dict[str, int]) -> None:
        assert store.graph.shared_identities() == [dataset["p1"]]

    def test_cross_order_profiles(self, store: Store, dataset: dict[str, int]) -> None:
        assert store.graph.cross_order_profiles() == {
            dataset["p1"]: [dataset["o1"], dataset["o2"]]
        }

    def test_ownership_conflicts(self, store: Store, dataset: dict[str, int]) -> None:
        assert store.graph.ownership_conflicts() == [
            {
                "profile_id": dataset["p1"],
                "billing_orders": [dataset["o1"]],
                "shipping_orders": [dataset["o2"]],
            }
        ]

    def test_reference_groups(self, store: Store, dataset: dict[str, int]) -> None:
        assert store.graph.reference_groups() == [
            [dataset["o1"], dataset["o2"]],
            [dataset["o3"]],
        ]

    def test_reference_groups_filtered(self, store: Store, dataset: dict[str, int]) -> None:
        assert store.graph.reference_groups([dataset["o2"], dataset["o3"]]) == [
            [dataset["o2"]],
            [dataset["o3"]],
        ]

    def test_is_disjoint(self, store: Store, dataset: dict[str, int]) -> None:
        assert not store.graph.is_disjoint([dataset["o1"], dataset["o2"]])
        assert store.graph.is_disjoint([dataset["o1"], dataset["o3"]])

    def test_order_without_references(self, store: Store) -> None:
        with store.transaction() as txn:
            oid = txn.orders.create("default")
        assert store.graph.reference_groups() == [[oid]]

    def test_cache_rebuilt_after_invalidate(self, store: Store, dataset: dict[str, int]) -> None:
        first = store.graph.graph
        assert store.graph.graph is first
        store.graph.invalidate()
        assert store.graph.graph is not first
