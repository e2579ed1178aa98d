"""Tests for the analyze command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from profsplit.cli import cli
from profsplit.infrastructure.store import Store
from tests.conftest import make_order, make_profile


@pytest.mark.usefixtures("_isolated_store")
class TestAnalyzeCommand:
    def test_analyze(self, cli_runner: CliRunner, cli_store: Store) -> None:
        p = make_profile(cli_store)
        make_order(cli_store, p, p)
        make_order(cli_store, make_profile(cli_store), p)

        result = cli_runner.invoke(cli, ["analyze"])

        assert result.exit_code == 0
        assert "Fan-out analysis for default" in result.output
        assert "expected_duplicates: 1" in result.output
        assert "WARNING" in result.output

    def test_analyze_json(self, cli_runner: CliRunner, cli_store: Store) -> None:
        o1, _ = make_order(cli_store, make_profile(cli_store))
        result = cli_runner.invoke(cli, ["--json", "analyze", "default"])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["groups"] == [[o1]]

    def test_unknown(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["analyze", "nope"])
        assert result.exit_code == 1
