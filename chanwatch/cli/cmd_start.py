"""Start command."""

import asyncio
import click

from . import cli
from .shared import console, load_or_exit


@cli.command()
@click.argument("config", type=click.Path(dir_okay=False), default="bot.toml")
@click.option("--debug", is_flag=True, help="Enable debug logging and event tracing")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Also write logs to this file")
def start(config, debug, log_file):
    """Start the watcher with CONFIG on the interactive console."""
    from chanwatch.main import run, setup_logging

    setup_logging(debug=debug, log_file=log_file)
    settings = load_or_exit(config)

    console.print("[bold blue]Starting chanwatch...[/bold blue]")
    try:
        asyncio.run(run(settings, debug=debug))
    except KeyboardInterrupt:
        pass
