from __future__ import annotations

import sys

import click

# Restore the default excepthook so Rich (installed by Textual) doesn't
# hijack tracebacks with fancy formatting that breaks CI and log parsing.
sys.excepthook = sys.__excepthook__

from prsup.cli.admin import config
from prsup.cli.dashboard import dashboard_options, run_dashboard


@click.group(invoke_without_command=True)
@dashboard_options
@click.pass_context
def cli(ctx: click.Context, **options) -> None:
    """Browse open GitHub PRs and check one out."""
    if ctx.invoked_subcommand is None:
        run_dashboard(**options)


# Register admin commands
cli.add_command(config)

__all__ = ["cli"]
