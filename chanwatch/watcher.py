"""Watcher — reacts to chat events and administrator commands.

Event handling:
- Joins: auto-op administrators in the home channel, notify about joins
  to the home channel or by watched nicks, greet newcomers in the home
  channel.
- Private messages: commands are dispatched, everything else gets the
  away reply; both forward a notification.
- Channel messages: logged, and dispatched if they start with the
  command prefix.

Administrator commands from anyone else are dropped without a reply so
the command set and permissions stay invisible to non-administrators.
"""

import asyncio
import logging
import random
from enum import Enum
from typing import Awaitable, Optional

from .chatlog import ChatLog
from .client import ChatClient
from .command import (
    Chuck,
    Command,
    Cookie,
    JoinChannel,
    LeaveChannel,
    ListMessages,
    Quote,
    Roll,
    SetDebug,
    SetNick,
    SetTopic,
    format_roll,
    parse_command,
)
from .config import DEFAULT_AWAY_MESSAGE, ChannelConfig, UserSection, WatcherSettings
from .content import DEFAULT_COOKIE, DEFAULT_JOKE, DEFAULT_QUOTE, ContentService
from .errors import ChatClientError
from .notifications import NotificationResult, NotificationService

logger = logging.getLogger("chanwatch.watcher")


class DispatchOutcome(str, Enum):
    EXECUTED = "executed"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"


class Watcher:
    """Bot state plus the event → guard → action rules."""

    def __init__(
        self,
        client: ChatClient,
        identity: UserSection,
        notifications: NotificationService,
        *,
        admins=(),
        channels=(),
        watch_list=(),
        ignored=("StatServ",),
        prefix: str = ".",
        away_message: str = DEFAULT_AWAY_MESSAGE,
        content: Optional[ContentService] = None,
        chat_log: Optional[ChatLog] = None,
        debug: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self.client = client
        self.identity = identity
        self.notifications = notifications
        self.admins: set[str] = set(admins)
        self.channels: dict[str, ChannelConfig] = {c.name: c for c in channels}
        self.watch_list: set[str] = set(watch_list)
        self.ignored: set[str] = set(ignored)
        self.prefix = prefix
        self.away_message = away_message
        self.content = content or ContentService()
        self.chat_log = chat_log or ChatLog()
        self.debug = debug
        self._rng = rng or random.Random()
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: WatcherSettings,
        client: ChatClient,
        notifications: NotificationService,
        **kwargs,
    ) -> "Watcher":
        return cls(
            client,
            settings.user.model_copy(),
            notifications,
            admins=settings.bot.admin,
            channels=settings.server.channels,
            watch_list=settings.bot.watch_list,
            ignored=settings.bot.ignore,
            prefix=settings.bot.command_prefix,
            away_message=settings.bot.away_message,
            chat_log=ChatLog(settings.logging.path if settings.logging else None),
            **kwargs,
        )

    # ── Lookups ──

    def is_admin(self, nick: str) -> bool:
        return nick in self.admins

    def is_admin_channel(self, channel: str) -> bool:
        config = self.channels.get(channel)
        return config is not None and config.admin

    def is_watching(self, nick: str) -> bool:
        return nick in self.watch_list

    def is_logging(self, channel: str) -> bool:
        config = self.channels.get(channel)
        return config is not None and config.log_chat

    # ── Protocol events ──

    async def on_welcome(self):
        """Connected: join every configured channel, set home channel topics."""
        self._trace("welcome")
        for config in list(self.channels.values()):
            await self._act(self.client.join(config.name), f"join {config.name}")
            if config.admin and config.topic:
                await self._act(
                    self.client.set_topic(config.name, config.topic),
                    f"topic {config.name}: {config.topic}",
                )

    async def on_ping(self, server: str):
        self._trace("ping", server=server)
        await self._act(self.client.pong(server), f"pong {server}")

    async def on_join(self, channel: str, nick: str):
        self._trace("join", channel=channel, nick=nick)

        # Never greet or report ourselves
        if nick == self.identity.nick:
            return

        admin_channel = self.is_admin_channel(channel)

        if admin_channel and self.is_admin(nick):
            await self._act(self.client.op(channel, nick), f"+o {nick} in {channel}")
            await self.greet(channel, nick)
            return

        if admin_channel or self.is_watching(nick):
            if self.debug:
                logger.info(f"Sending notification for {nick} in {channel}")
            result = await self.notifications.notify_channel_join(nick, channel)
            self._log_result(result)

        if admin_channel:
            await self.greet(channel, nick)

    async def on_private_message(self, sender: str, content: str):
        self._trace("privmsg", sender=sender, content=content)

        if sender in self.ignored:
            return

        if content.startswith(self.prefix):
            await self.dispatch(sender, sender, content)
        else:
            await self._act(self.client.privmsg(sender, self.away_message), f"away reply to {sender}")

        result = await self.notifications.notify_private_message(sender, content)
        self._log_result(result)

    async def on_channel_message(self, channel: str, sender: str, content: str):
        self._trace("message", channel=channel, sender=sender, content=content)

        if self.is_logging(channel):
            self.chat_log.write(channel, sender, content)

        if content.startswith(self.prefix):
            await self.dispatch(channel, sender, content)

    # ── Greetings ──

    async def greet(self, channel: str, nick: str) -> list[str]:
        """Send the channel's greetings for ``nick``. Returns what was sent."""
        config = self.channels.get(channel)
        if config is None:
            return []

        sent = []
        for rule in config.greeting_set.for_subject(nick):
            message = rule.render(nick)
            await self._act(self.client.privmsg(channel, message), f"greeting in {channel}")
            sent.append(message)
        return sent

    # ── Commands ──

    def authorize(self, command: Command, nick: str) -> bool:
        return not command.admin_only or self.is_admin(nick)

    async def dispatch(self, channel: str, nick: str, text: str) -> DispatchOutcome:
        """Parse and execute a command issued by ``nick`` in ``channel``.

        Unknown and unauthorized commands produce no reply.
        """
        command = parse_command(text, self.prefix)
        if command is None:
            logger.debug(f"Ignoring unrecognized command from {nick}: {text!r}")
            return DispatchOutcome.UNKNOWN

        if not self.authorize(command, nick):
            logger.debug(f"Dropping {type(command).__name__} from non-admin {nick}")
            return DispatchOutcome.UNAUTHORIZED

        await self._execute(command, channel, nick)
        return DispatchOutcome.EXECUTED

    async def _execute(self, command: Command, channel: str, nick: str):
        if isinstance(command, Chuck):
            logger.info(f"{nick} has requested some CHUCK ACTION!")
            self._spawn(self._reply_with(channel, self.content.joke(), DEFAULT_JOKE))
        elif isinstance(command, Cookie):
            logger.info(f"{nick} has requested a FORTUNE COOKIE")
            self._spawn(self._reply_with(channel, self.content.cookie(), DEFAULT_COOKIE))
        elif isinstance(command, Quote):
            logger.info(f"{nick} has requested a QUOTE")
            self._spawn(self._reply_with(channel, self.content.quote(command.category), DEFAULT_QUOTE))
        elif isinstance(command, Roll):
            logger.info(f"{nick} has requested DICE ROLLS: {', '.join(str(d) for d in command.dice)}")
            results = [n for dice in command.dice for n in dice.roll(self._rng)]
            await self._act(self.client.privmsg(channel, format_roll(nick, results)), f"roll in {channel}")
        elif isinstance(command, SetNick):
            await self.set_nick(command.nick)
        elif isinstance(command, SetDebug):
            self.set_debug(command.enabled)
        elif isinstance(command, JoinChannel):
            await self.join_channel(command.channel)
        elif isinstance(command, LeaveChannel):
            await self.leave_channel(command.channel)
        elif isinstance(command, SetTopic):
            await self._act(self.client.set_topic(channel, command.topic), f"topic {channel}: {command.topic}")
        elif isinstance(command, ListMessages):
            await self.list_messages(nick)

    async def set_nick(self, nick: str) -> bool:
        if await self._act(self.client.nick(nick), f"nick {nick}"):
            self.identity.nick = nick
            return True
        return False

    def set_debug(self, enabled: bool):
        self.debug = enabled
        logger.info(f"debug mode {'enabled' if enabled else 'disabled'}")

    async def join_channel(self, channel: str) -> bool:
        if channel in self.channels:
            return False
        if not await self._act(self.client.join(channel), f"join {channel}"):
            return False
        self.channels[channel] = ChannelConfig(name=channel, admin=False, log_chat=True)
        return True

    async def leave_channel(self, channel: str) -> bool:
        if channel not in self.channels:
            return False
        if not await self._act(self.client.part(channel), f"part {channel}"):
            return False
        del self.channels[channel]
        return True

    async def list_messages(self, nick: str):
        """Reply privately with recent notification subjects and window status."""
        status = self.notifications.window_status()
        subjects = [subject for subject, _ in self.notifications.sent_items()]
        summary = (
            f"{status['in_window']}/{status['max_count']} notifications in window, "
            f"resets in {status['reset_in_seconds']}s"
        )
        lines = [summary]
        if subjects:
            lines.append("Recently notified: " + ", ".join(subjects[:10]))
        for line in lines:
            await self._act(self.client.privmsg(nick, line), f"messages reply to {nick}")

    # ── Background replies ──

    async def _reply_with(self, channel: str, text: Awaitable[str], default: str):
        try:
            message = await text
        except Exception as e:
            logger.error(f"Content fetch failed, sending default: {e}")
            message = default
        await self._act(self.client.privmsg(channel, message), f"reply in {channel}")

    def _spawn(self, coro) -> asyncio.Task:
        """Fire-and-forget; keeps a reference until the task finishes."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Background reply failed: {task.exception()}")

    async def close(self):
        """Wait for outstanding background replies."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Helpers ──

    async def _act(self, action: Awaitable[None], description: str) -> bool:
        """Run a protocol action. Failures are logged, never raised."""
        try:
            await action
        except ChatClientError as e:
            logger.warning(f"Protocol action failed ({description}): {e}")
            return False
        logger.debug(description)
        return True

    def _trace(self, event: str, **fields):
        if self.debug:
            logger.info(f"event={event} {fields}")

    def _log_result(self, result: NotificationResult):
        if self.debug:
            logger.info(result.describe())
