"""Tests for the upgrade CLI command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from profsplit.cli import cli


@pytest.mark.usefixtures("_isolated_store")
class TestUpgradeCommand:
    def test_upgrade_check(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["upgrade", "--check"])
        assert result.exit_code == 0
        assert "pending_count: 2" in result.output

    def test_upgrade_check_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "upgrade", "--check"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["data"]["head"] == "002_run_locks"

    def test_upgrade_apply(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["upgrade"])
        assert result.exit_code == 0
        assert "applied_count: 2" in result.output

        again = cli_runner.invoke(cli, ["upgrade", "--check"])
        assert "pending_count: 0" in again.output
