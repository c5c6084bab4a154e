"""Outbound protocol actions the Watcher relies on.

The wire protocol lives outside this package. Any transport that can
join, part, talk, set topics, grant operator status, change nick and
answer pings can drive a Watcher. Failures raise ChatClientError.
"""

from typing import Protocol


class ChatClient(Protocol):
    async def join(self, channel: str) -> None:
        ...

    async def part(self, channel: str) -> None:
        ...

    async def privmsg(self, target: str, message: str) -> None:
        """Send to a channel or a nick."""
        ...

    async def set_topic(self, channel: str, topic: str) -> None:
        ...

    async def op(self, channel: str, nick: str) -> None:
        """Grant operator status (``MODE <channel> +o <nick>``)."""
        ...

    async def nick(self, nick: str) -> None:
        ...

    async def pong(self, server: str) -> None:
        ...
