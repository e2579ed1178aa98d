"""Command: provision the split profile categories."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from profsplit.commands._base import ProfCommand

if TYPE_CHECKING:
    from profsplit.commands._context import AppContext


@click.command(
    cls=ProfCommand,
    examples="""\
  profsplit provision
  profsplit provision wholesale
  profsplit --json provision""",
)
@click.argument("order_type", default="default")
@click.pass_obj
def provision(app: AppContext, order_type: str) -> None:
    """Create the Billing and Shipping profile types from the shared one."""
    from profsplit.services.provision import ProvisionService

    app.emit(ProvisionService(app.store).provision_order_type(order_type))
