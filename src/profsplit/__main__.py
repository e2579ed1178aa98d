"""Allow ``python -m profsplit``."""

from profsplit.cli import cli

cli()
