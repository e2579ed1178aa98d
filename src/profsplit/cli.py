"""profsplit command line entry point.

Global flags shape output and locate the store. Everything else lives
in the subcommands that ``register_commands`` attaches.
"""

from __future__ import annotations

from pathlib import Path

import click

from profsplit import __version__
from profsplit.commands import register_commands
from profsplit.commands._context import AppContext
from profsplit.config.settings import ProfSettings

_EPILOG = (
    "Typical rollout: provision, analyze, migrate --dry-run, migrate, "
    "verify, then order-type enable-split."
)


@click.group(invoke_without_command=True, epilog=_EPILOG)
@click.version_option(version=__version__, prog_name="profsplit")
@click.option(
    "-s",
    "--store",
    "store_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Store root holding .profsplit/ (default: nearest enclosing store, else CWD).",
)
@click.option("-c", "--config", "config_path", default=None, help="Use this profsplit.toml.")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only ids and counts.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and per-chunk timings.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("--no-interact", is_flag=True, help="Never prompt; confirmations need --yes.")
@click.pass_context
def cli(
    ctx: click.Context,
    store_root: Path | None,
    config_path: str | None,
    **flags: bool,
) -> None:
    """Move orders from the shared customer profile to split billing and shipping profiles."""
    settings = ProfSettings.from_cli(config_path=config_path, store_root=store_root, **flags)
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
