"""Console channel — drive a Watcher from the terminal.

Typed lines become protocol events; outbound actions are printed.

    /join <nick> <#channel>         someone joins a channel
    /msg <nick> <text>              private message to the bot
    /say <#channel> <nick> <text>   channel message
    /welcome                        connection registered
    /ping [server]                  keep-alive
    /quit
"""

import logging
from dataclasses import dataclass
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from ..errors import ChatClientError
from ..watcher import Watcher

logger = logging.getLogger("chanwatch.console")
console = Console()

HELP_TEXT = (
    "/join <nick> <#channel>   /msg <nick> <text>   /say <#channel> <nick> <text>\n"
    "/welcome   /ping [server]   /quit"
)


class ConsoleClient:
    """ChatClient that prints every outbound action."""

    def __init__(self, out: Optional[Console] = None):
        self.out = out or console
        self.joined: set[str] = set()

    @staticmethod
    def _require_channel(channel: str):
        if not channel.startswith("#"):
            raise ChatClientError(f"Not a channel: {channel}")

    async def join(self, channel: str) -> None:
        self._require_channel(channel)
        self.joined.add(channel)
        self.out.print(f"[dim]→ JOIN {escape(channel)}[/dim]")

    async def part(self, channel: str) -> None:
        if channel not in self.joined:
            raise ChatClientError(f"Not on channel: {channel}")
        self.joined.discard(channel)
        self.out.print(f"[dim]→ PART {escape(channel)}[/dim]")

    async def privmsg(self, target: str, message: str) -> None:
        self.out.print(f"[bold cyan]→ {escape(target)}[/bold cyan] {escape(message)}", highlight=False)

    async def set_topic(self, channel: str, topic: str) -> None:
        self._require_channel(channel)
        self.out.print(f"[dim]→ TOPIC {escape(channel)} :{escape(topic)}[/dim]")

    async def op(self, channel: str, nick: str) -> None:
        self._require_channel(channel)
        self.out.print(f"[dim]→ MODE {escape(channel)} +o {escape(nick)}[/dim]")

    async def nick(self, nick: str) -> None:
        if not nick or " " in nick:
            raise ChatClientError(f"Invalid nick: {nick!r}")
        self.out.print(f"[dim]→ NICK {escape(nick)}[/dim]")

    async def pong(self, server: str) -> None:
        self.out.print(f"[dim]→ PONG {escape(server)}[/dim]")


@dataclass(frozen=True)
class ConsoleEvent:
    kind: str
    args: tuple[str, ...] = ()


def parse_console_line(line: str) -> Optional[ConsoleEvent]:
    """Turn a typed line into an event. Returns None if it is not one."""
    line = line.strip()
    if not line.startswith("/"):
        return None

    head, _, rest = line.partition(" ")
    kind = head[1:].lower()

    if kind == "join":
        parts = rest.split()
        if len(parts) == 2:
            return ConsoleEvent("join", (parts[0], parts[1]))
    elif kind == "msg":
        nick, _, text = rest.partition(" ")
        if nick and text:
            return ConsoleEvent("msg", (nick, text))
    elif kind == "say":
        parts = rest.split(" ", 2)
        if len(parts) == 3 and all(parts):
            return ConsoleEvent("say", (parts[0], parts[1], parts[2]))
    elif kind == "ping":
        return ConsoleEvent("ping", (rest.strip() or "localhost",))
    elif kind in ("welcome", "quit"):
        return ConsoleEvent(kind)

    return None


async def handle_event(watcher: Watcher, event: ConsoleEvent):
    if event.kind == "join":
        await watcher.on_join(event.args[1], event.args[0])
    elif event.kind == "msg":
        await watcher.on_private_message(*event.args)
    elif event.kind == "say":
        await watcher.on_channel_message(*event.args)
    elif event.kind == "ping":
        await watcher.on_ping(event.args[0])
    elif event.kind == "welcome":
        await watcher.on_welcome()


async def run_console(watcher: Watcher):
    """Interactive loop. Each event is handled to completion before the next."""
    session = PromptSession(history=InMemoryHistory())

    console.print(Panel(
        Text(HELP_TEXT),
        title=f"chanwatch — {watcher.identity.nick}",
        border_style="blue",
    ))

    await watcher.on_welcome()

    while True:
        try:
            line = await session.prompt_async("> ")
        except (EOFError, KeyboardInterrupt):
            break

        event = parse_console_line(line)
        if event is None:
            if line.strip():
                console.print("[yellow]Unrecognized input.[/yellow] Lines must start with /join, /msg, /say, /ping, /welcome or /quit.")
            continue
        if event.kind == "quit":
            break

        await handle_event(watcher, event)

    await watcher.close()
    console.print("[dim]Goodbye![/dim]")
