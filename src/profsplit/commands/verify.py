"""Command: post-migration integrity check."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from profsplit.commands._base import ProfCommand

if TYPE_CHECKING:
    from profsplit.commands._context import AppContext


@click.command(
    cls=ProfCommand,
    examples="""\
  profsplit verify
  profsplit verify --order-type default
  profsplit --json verify""",
)
@click.option("--order-type", default=None, help="Check this order type even if not split yet.")
@click.pass_obj
def verify(app: AppContext, order_type: str | None) -> None:
    """Check that split-mode orders reference correctly typed profiles."""
    from profsplit.services.verify import VerifyService

    app.emit(VerifyService(app.store).verify(order_type))
