"""Command: inspect one order's migration plan."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from profsplit.commands._base import ProfCommand

if TYPE_CHECKING:
    from profsplit.commands._context import AppContext


@click.command(
    cls=ProfCommand,
    examples="""\
  profsplit plan 42
  profsplit -v plan 42          # include the reason for each step
  profsplit --json plan 42""",
)
@click.argument("order_id", type=int)
@click.option("--order-type", default=None, help="Resolve against this order type instead.")
@click.pass_obj
def plan(app: AppContext, order_id: int, order_type: str | None) -> None:
    """Show what migrating ORDER_ID would do, without writing."""
    from profsplit.services.migrate import MigrationService

    app.emit(MigrationService(app.store).plan(order_id, order_type_id=order_type))
