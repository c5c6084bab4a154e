"""chanwatch CLI — command line interface."""

import click
from chanwatch import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="chanwatch")
@click.pass_context
def cli(ctx):
    """chanwatch — channel watcher bot with SMS notifications"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands."""
    console.print(f"[bold]chanwatch v{__version__}[/bold] — channel watcher bot with SMS notifications\n")

    commands = [
        ("check CONFIG", "Validate a config file and show a summary"),
        ("start CONFIG", "Start the watcher on the interactive console"),
    ]
    for name, desc in commands:
        console.print(f"    [bold]chanwatch {name:16s}[/bold] {desc}")
    console.print()
    console.print("[dim]Run 'chanwatch <command> --help' for details on a specific command.[/dim]")


# Import command modules (registers commands onto cli group)
from . import cmd_check  # noqa: E402, F401
from . import cmd_start  # noqa: E402, F401


@cli.command(name="help", hidden=True)
def help_cmd():
    """Show all available commands."""
    _show_help()
