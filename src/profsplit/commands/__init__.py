"""Subcommand modules for profsplit.

Provides register_commands() which uses deferred imports to keep
``profsplit --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from profsplit.commands.order_type import order_type

    cli.add_command(order_type)

    # --- Standalone commands ---
    from profsplit.commands.analyze import analyze
    from profsplit.commands.migrate import migrate
    from profsplit.commands.plan import plan
    from profsplit.commands.provision import provision
    from profsplit.commands.unlock import unlock
    from profsplit.commands.upgrade import upgrade
    from profsplit.commands.verify import verify

    cli.add_command(provision)
    cli.add_command(plan)
    cli.add_command(migrate)
    cli.add_command(analyze)
    cli.add_command(verify)
    cli.add_command(upgrade)
    cli.add_command(unlock)
