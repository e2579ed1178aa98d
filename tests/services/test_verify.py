"""Tests for VerifyService."""

from profsplit.infrastructure.store import Store
from profsplit.services.order_types import OrderTypeService
from profsplit.services.verify import VerifyService
from tests.conftest import make_order, make_profile, migrate, provision


def _categories(result) -> list[str]:
    return [i["category"] for i in result.data["issues"]]


class TestVerify:
    def test_no_split_types_is_healthy(self, store: Store) -> None:
        make_order(store, make_profile(store))

        result = VerifyService(store).verify()

        assert result.ok
        assert result.data["order_types"] == []
        assert result.data["healthy"] is True
        # Nothing provisioned yet.
        assert _categories(result) == ["missing_profile_type", "missing_profile_type"]
        assert result.data["warning_count"] == 2

    def test_after_enable_split(self, store: Store) -> None:
        p = make_profile(store)
        make_order(store, p, p)
        make_order(store, make_profile(store), p)
        assert OrderTypeService(store).enable_split("default").ok

        result = VerifyService(store).verify()

        assert result.data["order_types"] == ["default"]
        assert result.data["count"] == 0
        assert result.data["healthy"] is True

    def test_unmigrated_order_type(self, store: Store) -> None:
        provision(store)
        p = make_profile(store)
        make_order(store, p, p)

        result = VerifyService(store).verify("default")

        assert result.data["healthy"] is False
        assert sorted(_categories(result)) == [
            "billing_category",
            "dual_use",
            "shipping_category",
        ]
        assert result.data["error_count"] == 3

    def test_migrated_orders_pass(self, store: Store) -> None:
        provision(store)
        p = make_profile(store)
        order_id, _ = make_order(store, p, p)
        migrate(store, [order_id])

        result = VerifyService(store).verify("default")

        assert result.data["healthy"] is True
        assert result.data["issues"] == []

    def test_unknown(self, store: Store) -> None:
        result = VerifyService(store).verify("nope")
        assert result.error is not None
        assert result.error.code == "UNKNOWN_ORDER_TYPE"
