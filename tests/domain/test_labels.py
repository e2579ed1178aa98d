"""Tests for customer profile labels."""

import pytest

from profsplit.domain.labels import profile_label


class TestProfileLabel:
    @pytest.mark.parametrize("ptype", ["customer", "customer_billing", "customer_shipping"])
    def test_first_address_line(self, ptype: str) -> None:
        assert profile_label(ptype, {"address_line1": "9 Elm Rd", "locality": "NY"}) == "9 Elm Rd"

    def test_other_profile_type(self) -> None:
        assert profile_label("supplier", {"address_line1": "9 Elm Rd"}) is None

    def test_missing_address(self) -> None:
        assert profile_label("customer", None) is None

    def test_empty_line(self) -> None:
        assert profile_label("customer", {"address_line1": ""}) is None
