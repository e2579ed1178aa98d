"""Command: clear a stale run lock."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from profsplit.commands._base import ProfCommand

if TYPE_CHECKING:
    from profsplit.commands._context import AppContext


@click.command(
    cls=ProfCommand,
    examples="""\
  profsplit unlock""",
)
@click.pass_obj
def unlock(app: AppContext) -> None:
    """Remove the run lock left behind by an interrupted migration."""
    from profsplit.services.migrate import MigrationService

    app.emit(MigrationService(app.store).unlock())
