"""Management commands for the hospital backend."""

from __future__ import annotations

import click

from hospital.cli import COMMANDS
from hospital.main import create_app

# Create the Flask application once so commands can share configuration.
app = create_app()


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Entry point for management commands."""
    ctx.with_resource(app.app_context())


for command in COMMANDS:
    cli.add_command(command)


if __name__ == "__main__":
    cli()
