"""Config validation command."""

import click
from rich.table import Table

from . import cli
from .shared import console, load_or_exit


@cli.command()
@click.argument("config", type=click.Path(dir_okay=False), default="bot.toml")
def check(config):
    """Validate CONFIG and show what the watcher will do."""
    settings = load_or_exit(config)

    console.print(f"[green]✓[/green] {config} is valid\n")
    console.print(f"  Identity:      [bold]{settings.user.nick}[/bold] ({settings.user.user}, {settings.user.real})")
    console.print(f"  Server:        {settings.server.address}")
    console.print(f"  Admins:        {', '.join(settings.bot.admin) or '-'}")
    console.print(f"  Watch list:    {', '.join(settings.bot.watch_list) or '-'}")
    console.print(f"  Cooldown:      {settings.bot.message_frequency} min per subject")
    console.print(
        f"  Throttle:      {settings.throttle.max_count} per "
        f"{settings.throttle.period_seconds:g}s"
    )
    sms = "dry-run" if settings.twilio.dry_run else f"to {settings.twilio.recipient}"
    console.print(f"  SMS:           {sms}")
    console.print(f"  Chat logs:     {settings.logging.path if settings.logging else 'disabled'}\n")

    table = Table(title="Channels")
    table.add_column("Channel", style="bold")
    table.add_column("Home")
    table.add_column("Log")
    table.add_column("Greetings", justify="right")
    table.add_column("Topic")
    for channel in settings.server.channels:
        table.add_row(
            channel.name,
            "yes" if channel.admin else "",
            "yes" if channel.log_chat else "",
            str(len(channel.greeting_set)),
            channel.topic or "",
        )
    console.print(table)
