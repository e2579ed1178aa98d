"""Click base classes shared by every profsplit command.

``examples=`` adds an eager ``--examples`` flag. It prints sample
invocations and exits before arguments are checked, so
``profsplit plan --examples`` works without an order id.

``takes_lock=True`` marks commands that hold the single-flight run lock.
Their ``--help`` ends with a note on clearing a stale lock.
"""

from __future__ import annotations

from typing import Any

import click

LOCK_NOTE = (
    "Holds the run lock while it runs. If a crashed run left the lock "
    "behind, remove it with 'profsplit unlock'."
)


def _examples_option(examples: str) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n\n{examples}")
            ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show sample invocations and exit.",
    )


class _ProfCommandMixin:
    """Shared ``examples``/``takes_lock`` handling for commands and groups."""

    params: list[click.Parameter]
    epilog: str | None

    def __init__(
        self,
        *args: Any,
        examples: str | None = None,
        takes_lock: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        self.takes_lock = takes_lock
        if examples:
            self.params.append(_examples_option(examples))
        if takes_lock:
            self.epilog = f"{self.epilog}\n\n{LOCK_NOTE}" if self.epilog else LOCK_NOTE


class ProfCommand(_ProfCommandMixin, click.Command):
    """A profsplit subcommand."""


class ProfGroup(_ProfCommandMixin, click.Group):
    """A profsplit command group; its subcommands default to ProfCommand."""

    command_class = ProfCommand
