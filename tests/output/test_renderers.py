"""Tests for operation-specific Rich renderers."""

from profsplit.output.renderers import render_quiet, render_result
from profsplit.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


def _report(**overrides: object) -> dict[str, object]:
    report: dict[str, object] = {
        "order_type": "default",
        "succeeded": [1, 2],
        "failed": [],
        "created_profiles": [10],
        "repointed_shipments": [5],
        "writes": 6,
        "chunks": 1,
        "dry_run": False,
        "backup_path": None,
    }
    report.update(overrides)
    return report


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("migrate", "LOCKED", "Run lock is held"))
        assert "ERROR" in output
        assert "migrate" in output
        assert "LOCKED" in output
        assert "Run lock is held" in output

    def test_verbose_shows_detail(self) -> None:
        result = _err("migrate", "LOCKED", "Held", holder="host:1:migrate")
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "host:1:migrate" in output

    def test_no_error_object(self) -> None:
        output = render_result(ServiceResult(ok=False, op="test"))
        assert "Unknown error" in output

    def test_partial_migration_lists_failures(self) -> None:
        report = _report(
            failed=[{"order_id": 42, "code": "UNKNOWN_CATEGORY", "message": "supplier"}]
        )
        result = _err("enable_split", "PARTIAL_MIGRATION", "1 order(s) failed", report=report)
        output = render_result(result)
        assert "42" in output
        assert "UNKNOWN_CATEGORY" in output


# ── Migration renderers ──────────────────────────────────────────────


class TestMigrateRenderer:
    def test_summary(self) -> None:
        output = render_result(_ok("migrate", **_report()))
        assert "OK" in output
        assert "succeeded: 2" in output
        assert "created_profiles: 1" in output
        assert "writes: 6" in output
        assert "dry run" not in output

    def test_dry_run_banner(self) -> None:
        output = render_result(_ok("migrate", **_report(dry_run=True)))
        assert "dry run" in output

    def test_failures_table(self) -> None:
        failed = [{"order_id": 7, "code": "PERSIST_FAILED", "message": "boom"}]
        output = render_result(_ok("migrate", **_report(failed=failed)))
        assert "failed: 1" in output
        assert "PERSIST_FAILED" in output
        assert "boom" in output

    def test_verbose_lists_ids(self) -> None:
        output = render_result(_ok("migrate", **_report()), verbose=True)
        assert "succeeded_ids: 1, 2" in output

    def test_backup_path_shown(self) -> None:
        output = render_result(_ok("migrate", **_report(backup_path="/tmp/b.db")))
        assert "/tmp/b.db" in output


class TestPlanRenderer:
    def _plan(self, **overrides: object) -> ServiceResult:
        data: dict[str, object] = {
            "order_id": 3,
            "order_type": "default",
            "billing_profile_id": 11,
            "billing_action": "retype",
            "billing_label": "Customer: 1 Main St",
            "target_billing": "customer_billing",
            "target_shipping": "customer_shipping",
            "steps": [
                {
                    "shipment_id": 5,
                    "shipping_profile_id": 11,
                    "action": "duplicate_and_repoint",
                    "current_category": "customer",
                    "target_category": "customer_shipping",
                    "label": "Customer: 1 Main St",
                    "reason": "same record",
                }
            ],
            "duplicates": 1,
            "is_noop": False,
        }
        data.update(overrides)
        return _ok("plan", **data)

    def test_steps_table(self) -> None:
        output = render_result(self._plan())
        assert "Plan for order 3" in output
        assert "duplicate_and_repoint" in output
        assert "1 duplicate(s) would be created" in output
        assert "same record" not in output

    def test_verbose_shows_reason(self) -> None:
        output = render_result(self._plan(), verbose=True)
        assert "same record" in output

    def test_noop(self) -> None:
        output = render_result(self._plan(steps=[], billing_action="noop", is_noop=True))
        assert "Nothing to do." in output


class TestProvisionRenderer:
    def test_types_listed(self) -> None:
        types = [
            {
                "profile_type": "customer_billing",
                "label": "Customer Billing",
                "created": True,
                "fields_copied": ["address"],
                "displays_synced": ["view.default"],
            },
            {
                "profile_type": "customer_shipping",
                "label": "Customer Shipping",
                "created": False,
                "fields_copied": [],
                "displays_synced": [],
            },
        ]
        output = render_result(_ok("provision", source="customer", types=types, writes=4))
        assert "customer_billing (created)" in output
        assert "customer_shipping (exists)" in output
        assert "fields: address" in output
        assert "writes: 4" in output


# ── Order types ──────────────────────────────────────────────────────


class TestOrderTypeRenderers:
    def _item(self, **overrides: object) -> dict[str, object]:
        item: dict[str, object] = {
            "id": "default",
            "label": "Default",
            "mode": "single",
            "billing_category": "customer",
            "shipping_category": "customer",
            "order_count": 2,
            "description": "The Default order type contains 2 orders.",
            "can_enable_split": True,
            "split_enabled_at": None,
        }
        item.update(overrides)
        return item

    def test_show(self) -> None:
        output = render_result(_ok("show_order_type", **self._item()))
        assert "mode: single" in output
        assert "The Default order type contains 2 orders." in output
        assert "cannot be undone" not in output

    def test_show_split(self) -> None:
        item = self._item(mode="split", can_enable_split=False, split_enabled_at="2026-01-01")
        output = render_result(_ok("show_order_type", **item))
        assert "split_enabled_at: 2026-01-01" in output
        assert "cannot be undone" in output

    def test_list(self) -> None:
        items = [self._item(), self._item(id="wholesale", label="Wholesale", order_count=0)]
        output = render_result(_ok("list_order_types", count=2, items=items))
        assert "wholesale" in output
        assert "2 order types" in output

    def test_enable_split_partial(self) -> None:
        failed = [{"order_id": 9, "code": "UNKNOWN_CATEGORY", "message": "x"}]
        output = render_result(
            _ok(
                "enable_split",
                order_type="default",
                mode="split",
                split_enabled_at="2026-01-01",
                partial=True,
                migration=_report(failed=failed),
            )
        )
        assert "migrated: 2" in output
        assert "accepted a partial migration" in output
        assert "UNKNOWN_CATEGORY" in output


# ── Analysis ─────────────────────────────────────────────────────────


class TestAnalyzeRenderer:
    def test_conflicts_table(self) -> None:
        data = {
            "order_type": "default",
            "order_count": 2,
            "shared_identities": [1],
            "cross_order_profiles": [1],
            "ownership_conflicts": [
                {"profile_id": 1, "billing_orders": [1], "shipping_orders": [2]}
            ],
            "groups": [[1, 2]],
            "group_count": 1,
            "disjoint": False,
            "expected_duplicates": 1,
        }
        output = render_result(_ok("analyze", **data), verbose=True)
        assert "Fan-out analysis for default" in output
        assert "disjoint: False" in output
        assert "Billing Orders" in output
        assert "group: 1, 2" in output


class TestVerifyRenderer:
    def test_healthy(self) -> None:
        output = render_result(_ok("verify", issues=[], count=0))
        assert "No issues found." in output

    def test_grouped_issues(self) -> None:
        issues = [
            {"category": "dual_use", "severity": "error", "message": "Profile 4 is both"},
            {"category": "missing_profile_type", "severity": "warning", "message": "Missing"},
        ]
        output = render_result(
            _ok("verify", issues=issues, count=2, error_count=1, warning_count=1)
        )
        assert "dual_use" in output
        assert "error: Profile 4 is both" in output
        assert "1 errors, 1 warnings" in output


class TestUpgradeRenderer:
    def test_pending(self) -> None:
        pending = [{"revision": "002_run_locks", "description": "Run locks"}]
        result = _ok("upgrade", pending_count=1, pending=pending, current=None, head="002")
        output = render_result(result, verbose=True)
        assert "pending_count: 1" in output
        assert "002_run_locks: Run locks" in output


class TestGenericRenderer:
    def test_unknown_op(self) -> None:
        output = render_result(_ok("unlock", removed=True, holder="h"))
        assert "OK" in output
        assert "removed: True" in output


# ── Quiet mode ───────────────────────────────────────────────────────


class TestQuiet:
    def test_migrate(self) -> None:
        failed = [{"order_id": 3, "code": "X", "message": "y"}]
        result = _ok("migrate", **_report(failed=failed))
        assert render_quiet(result) == "OK: migrate 2 ok, 1 failed"

    def test_items(self) -> None:
        result = _ok("list_order_types", items=[{"id": "default"}, {"id": "wholesale"}])
        assert render_quiet(result) == "default\nwholesale"

    def test_error(self) -> None:
        assert render_quiet(_err("plan", "ORDER_NOT_FOUND", "No order: 4")) == (
            "ERROR: plan — No order: 4"
        )

    def test_fallback(self) -> None:
        assert render_quiet(_ok("unlock")) == "OK: unlock"
