"""Tests for --examples flag on CLI commands.

Parametrized to cover all commands that define examples text.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from profsplit.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    # -- order-type --
    (["order-type", "--examples"], ["profsplit order-type list", "--accept-partial --yes"]),
    (["order-type", "list", "--examples"], ["profsplit -q order-type list"]),
    (["order-type", "show", "--examples"], ["profsplit order-type show default"]),
    (["order-type", "enable-split", "--examples"], ["--accept-partial --yes"]),
    # -- standalone commands --
    (["provision", "--examples"], ["profsplit provision wholesale"]),
    (["plan", "--examples"], ["profsplit plan 42"]),
    (["migrate", "--examples"], ["--dry-run --chunk-size 200", "profsplit migrate 12 15 19"]),
    (["analyze", "--examples"], ["profsplit analyze"]),
    (["verify", "--examples"], ["--order-type default"]),
    (["upgrade", "--examples"], ["profsplit upgrade --check"]),
    (["unlock", "--examples"], ["profsplit unlock"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    """Generate a readable test ID from args."""
    args, _ = item
    return "_".join(a for a in args if a != "--examples")


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Examples for" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


class TestExamplesEagerExit:
    """--examples exits before argument validation."""

    def test_examples_skips_required_args(self, cli_runner: CliRunner) -> None:
        # 'plan' requires ORDER_ID
        result = cli_runner.invoke(cli, ["plan", "--examples"])
        assert result.exit_code == 0

    def test_examples_skips_required_args_enable_split(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["order-type", "enable-split", "--examples"])
        assert result.exit_code == 0
