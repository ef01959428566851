from __future__ import annotations

import os
import subprocess

import click

from prsup.config import ensure_config
from prsup.log import log_file


@click.command()
@click.option("--edit", is_flag=True, help="Open config in $EDITOR.")
@click.option("--path", "show_path", is_flag=True, help="Print config and log locations.")
def config(edit: bool, show_path: bool) -> None:
    """View or edit configuration."""
    config_path = ensure_config()

    if show_path:
        click.echo(f"config: {config_path}")
        click.echo(f"log:    {log_file()}")
    elif edit:
        editor = os.environ.get("EDITOR", "vi")
        subprocess.run([editor, str(config_path)])
    else:
        click.echo(config_path.read_text())
