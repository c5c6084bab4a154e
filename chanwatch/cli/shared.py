"""Shared utilities for chanwatch CLI commands."""

import click
from rich.console import Console

from chanwatch.config import WatcherSettings, load_settings
from chanwatch.errors import ConfigError

console = Console()


def load_or_exit(config_path: str) -> WatcherSettings:
    """Load settings, or print the configuration error and exit 1."""
    try:
        return load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}", highlight=False)
        raise click.exceptions.Exit(1)
