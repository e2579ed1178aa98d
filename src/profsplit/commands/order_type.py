"""Command group: order type profile modes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from profsplit.commands._base import ProfGroup

if TYPE_CHECKING:
    from profsplit.commands._context import AppContext

_ORDER_TYPE_EXAMPLES = """\
  profsplit order-type list
  profsplit order-type show default
  profsplit order-type enable-split default
  profsplit order-type enable-split default --accept-partial --yes"""


@click.group("order-type", cls=ProfGroup, examples=_ORDER_TYPE_EXAMPLES)
@click.pass_obj
def order_type(app: AppContext) -> None:
    """Inspect order types and switch them to split profiles."""


@order_type.command(
    "list",
    examples="""\
  profsplit order-type list
  profsplit -q order-type list    # ids only""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List order types with their profile mode."""
    from profsplit.services.order_types import OrderTypeService

    app.emit(OrderTypeService(app.store).list_types())


@order_type.command(
    examples="""\
  profsplit order-type show default
  profsplit --json order-type show default""",
)
@click.argument("type_id")
@click.pass_obj
def show(app: AppContext, type_id: str) -> None:
    """Show one order type's mode and order count."""
    from profsplit.services.order_types import OrderTypeService

    app.emit(OrderTypeService(app.store).show(type_id))


@order_type.command(
    "enable-split",
    takes_lock=True,
    examples="""\
  profsplit order-type enable-split default
  profsplit order-type enable-split default --yes
  profsplit order-type enable-split default --accept-partial --yes""",
)
@click.argument("type_id")
@click.option(
    "--accept-partial",
    is_flag=True,
    help="Enable split mode even if some orders failed to migrate.",
)
@click.option("--chunk-size", type=click.IntRange(min=1), default=None, help="Orders per chunk.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def enable_split(
    app: AppContext,
    type_id: str,
    accept_partial: bool,
    chunk_size: int | None,
    yes: bool,
) -> None:
    """Provision, migrate every order of TYPE_ID, then enable split profiles.

    This cannot be undone.
    """
    from profsplit.services.order_types import OrderTypeService

    if not yes:
        if not app.interactive:
            raise click.UsageError("Pass --yes to enable split profiles non-interactively.")
        click.confirm(
            f"Enable split billing/shipping profiles for {type_id}? This cannot be undone.",
            abort=True,
        )

    app.emit(
        OrderTypeService(app.store).enable_split(
            type_id,
            accept_partial=accept_partial,
            chunk_size=chunk_size,
        )
    )
