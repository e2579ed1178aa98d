"""Tests for service payload contracts."""

import pytest
from pydantic import ValidationError

from profsplit.services.contracts import (
    MigrationReportData,
    PlanData,
    VerifyResultData,
    dump_validated,
)


class TestDumpValidated:
    def test_fills_defaults(self) -> None:
        data = dump_validated(MigrationReportData, {"order_type": "default"})
        assert data == {
            "order_type": "default",
            "succeeded": [],
            "failed": [],
            "created_profiles": [],
            "repointed_shipments": [],
            "writes": 0,
            "chunks": 0,
            "dry_run": False,
            "backup_path": None,
        }

    def test_failed_entry_requires_code(self) -> None:
        with pytest.raises(ValidationError):
            dump_validated(
                MigrationReportData,
                {"order_type": "default", "failed": [{"order_id": 1, "message": "x"}]},
            )

    def test_plan_action_is_closed(self) -> None:
        payload = {
            "order_id": 1,
            "order_type": "default",
            "billing_profile_id": 2,
            "billing_action": "delete",
            "target_billing": "customer_billing",
            "target_shipping": "customer_shipping",
            "steps": [],
            "duplicates": 0,
            "is_noop": True,
        }
        with pytest.raises(ValidationError):
            dump_validated(PlanData, payload)

    def test_verify_issue_category_is_closed(self) -> None:
        with pytest.raises(ValidationError):
            dump_validated(
                VerifyResultData,
                {
                    "order_types": [],
                    "issues": [{"category": "other", "severity": "error", "message": "m"}],
                    "count": 1,
                    "error_count": 1,
                    "warning_count": 0,
                    "healthy": False,
                },
            )
