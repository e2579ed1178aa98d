"""Command: run the shared-to-split batch migration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from profsplit.commands._base import ProfCommand

if TYPE_CHECKING:
    from profsplit.commands._context import AppContext


@click.command(
    cls=ProfCommand,
    takes_lock=True,
    examples="""\
  profsplit migrate                       # every order of the default type
  profsplit migrate --order-type wholesale
  profsplit migrate 12 15 19              # selected orders only
  profsplit migrate --dry-run --chunk-size 200
  profsplit --json migrate""",
)
@click.argument("order_ids", nargs=-1, type=int)
@click.option("--order-type", default="default", show_default=True, help="Order type to migrate.")
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=None,
    help="Orders per transaction (default from [migration] chunk_size).",
)
@click.option("--dry-run", is_flag=True, help="Report what would change, then roll back.")
@click.pass_obj
def migrate(
    app: AppContext,
    order_ids: tuple[int, ...],
    order_type: str,
    chunk_size: int | None,
    dry_run: bool,
) -> None:
    """Migrate orders from shared to split customer profiles.

    The order type's mode flag is not changed; use
    ``profsplit order-type enable-split`` for the full transition.
    """
    from profsplit.services.migrate import MigrationService

    app.emit(
        MigrationService(app.store).migrate_order_type(
            order_type,
            order_ids=list(order_ids) if order_ids else None,
            chunk_size=chunk_size,
            dry_run=dry_run,
        )
    )
