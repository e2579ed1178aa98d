"""Tests for AnalyzeService."""

from profsplit.infrastructure.store import Store
from profsplit.services.analyze import AnalyzeService
from tests.conftest import make_order, make_profile


class TestAnalyze:
    def test_empty_order_type(self, store: Store) -> None:
        result = AnalyzeService(store).analyze("default")

        assert result.ok
        assert result.data["order_count"] == 0
        assert result.data["groups"] == []
        assert result.data["disjoint"] is True
        assert result.data["expected_duplicates"] == 0

    def test_disjoint_orders(self, store: Store) -> None:
        p1 = make_profile(store)
        o1, _ = make_order(store, p1, p1)
        o2, _ = make_order(store, make_profile(store), make_profile(store))

        data = AnalyzeService(store).analyze("default").data

        assert data["order_count"] == 2
        assert data["shared_identities"] == [p1]
        assert data["cross_order_profiles"] == []
        assert data["groups"] == [[o1], [o2]]
        assert data["disjoint"] is True
        assert data["expected_duplicates"] == 1

    def test_fan_out_links_orders(self, store: Store) -> None:
        p = make_profile(store)
        o1, _ = make_order(store, p, p)
        o2, _ = make_order(store, make_profile(store), p)

        result = AnalyzeService(store).analyze("default")

        data = result.data
        assert data["cross_order_profiles"] == [p]
        assert data["ownership_conflicts"] == [
            {"profile_id": p, "billing_orders": [o1], "shipping_orders": [o2]}
        ]
        assert data["groups"] == [[o1, o2]]
        assert data["group_count"] == 1
        assert data["disjoint"] is False
        assert data["expected_duplicates"] == 1
        assert len(result.warnings) == 1

    def test_scoped_to_order_type(self, store: Store) -> None:
        with store.transaction() as txn:
            txn.order_types.create("wholesale", "Wholesale")
        make_order(store, make_profile(store), order_type="wholesale")
        mine, _ = make_order(store, make_profile(store))

        data = AnalyzeService(store).analyze("default").data

        assert data["order_count"] == 1
        assert data["groups"] == [[mine]]

    def test_unknown(self, store: Store) -> None:
        result = AnalyzeService(store).analyze("nope")
        assert result.error is not None
        assert result.error.code == "UNKNOWN_ORDER_TYPE"
