"""Tests for the migrate command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from profsplit.cli import cli
from profsplit.infrastructure.store import Store
from tests.conftest import (
    get_profile,
    make_order,
    make_profile,
    profile_count,
    provision,
    shipping_profile_of,
)


@pytest.mark.usefixtures("_isolated_store")
class TestMigrateCommand:
    def test_migrate_all(self, cli_runner: CliRunner, cli_store: Store) -> None:
        provision(cli_store)
        p = make_profile(cli_store)
        order_id, (s1,) = make_order(cli_store, p, p)

        result = cli_runner.invoke(cli, ["migrate"])

        assert result.exit_code == 0
        assert "succeeded: 1" in result.output
        assert "backup_path" in result.output
        assert get_profile(cli_store, p).type == "customer_billing"
        assert shipping_profile_of(cli_store, s1) != p

    def test_migrate_selected_json(self, cli_runner: CliRunner, cli_store: Store) -> None:
        provision(cli_store)
        o1, _ = make_order(cli_store, make_profile(cli_store))
        make_order(cli_store, make_profile(cli_store))

        result = cli_runner.invoke(cli, ["--json", "migrate", str(o1)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["data"]["succeeded"] == [o1]

    def test_dry_run(self, cli_runner: CliRunner, cli_store: Store) -> None:
        provision(cli_store)
        p = make_profile(cli_store)
        make_order(cli_store, p, p)
        before = profile_count(cli_store)

        result = cli_runner.invoke(cli, ["migrate", "--dry-run", "--chunk-size", "5"])

        assert result.exit_code == 0
        assert "dry run" in result.output
        assert "created_profiles: 1" in result.output
        assert profile_count(cli_store) == before
        assert get_profile(cli_store, p).type == "customer"

    def test_quiet(self, cli_runner: CliRunner, cli_store: Store) -> None:
        provision(cli_store)
        make_order(cli_store, make_profile(cli_store))
        result = cli_runner.invoke(cli, ["-q", "migrate"])
        assert result.exit_code == 0
        assert result.output.strip() == "OK: migrate 1 ok, 0 failed"

    def test_failures_warn_on_stderr(self, cli_runner: CliRunner, cli_store: Store) -> None:
        result = cli_runner.invoke(cli, ["migrate", "404"])
        assert result.exit_code == 0
        assert "ORDER_NOT_FOUND" in result.output
        assert "WARNING: 1 order(s) failed to migrate" in result.output

    def test_chunk_size_must_be_positive(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["migrate", "--chunk-size", "0"])
        assert result.exit_code == 2

    def test_unknown_order_type(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["migrate", "--order-type", "nope"])
        assert result.exit_code == 1
        assert "UNKNOWN_ORDER_TYPE" in result.output

    def test_locked(self, cli_runner: CliRunner, cli_store: Store) -> None:
        make_order(cli_store, make_profile(cli_store))
        with cli_store.run_lock("other"):
            result = cli_runner.invoke(cli, ["migrate"])
        assert result.exit_code == 1
        assert "LOCKED" in result.output
