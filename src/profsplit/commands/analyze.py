"""Command: fan-out analysis before a migration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from profsplit.commands._base import ProfCommand

if TYPE_CHECKING:
    from profsplit.commands._context import AppContext


@click.command(
    cls=ProfCommand,
    examples="""\
  profsplit analyze
  profsplit -v analyze wholesale   # list linked order groups
  profsplit --json analyze""",
)
@click.argument("order_type", default="default")
@click.pass_obj
def analyze(app: AppContext, order_type: str) -> None:
    """Preview shared identities, fan-out and expected duplicates."""
    from profsplit.services.analyze import AnalyzeService

    app.emit(AnalyzeService(app.store).analyze(order_type))
