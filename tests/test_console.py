"""Tests for the interactive console channel."""

import io
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from chanwatch.channels.console import ConsoleClient, ConsoleEvent, handle_event, parse_console_line
from chanwatch.errors import ChatClientError


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console_client(output):
    return ConsoleClient(Console(file=output, width=200, color_system=None))


class TestParseConsoleLine:

    def test_join(self):
        assert parse_console_line("/join lana #home") == ConsoleEvent("join", ("lana", "#home"))

    def test_msg_keeps_spaces(self):
        assert parse_console_line("/msg bob hello  there") == ConsoleEvent("msg", ("bob", "hello  there"))

    def test_say(self):
        event = parse_console_line("/say #home archer .topic A new topic")
        assert event == ConsoleEvent("say", ("#home", "archer", ".topic A new topic"))

    def test_ping_default_server(self):
        assert parse_console_line("/ping") == ConsoleEvent("ping", ("localhost",))
        assert parse_console_line("/ping irc.example.net") == ConsoleEvent("ping", ("irc.example.net",))

    def test_simple_events(self):
        assert parse_console_line("/welcome") == ConsoleEvent("welcome")
        assert parse_console_line("  /QUIT  ") == ConsoleEvent("quit")

    @pytest.mark.parametrize("line", [
        "",
        "hello",
        "/join lana",
        "/msg bob",
        "/say #home archer",
        "/dance",
    ])
    def test_not_an_event(self, line):
        assert parse_console_line(line) is None


class TestHandleEvent:

    @pytest.mark.asyncio
    async def test_routes_to_watcher(self):
        watcher = AsyncMock()

        await handle_event(watcher, ConsoleEvent("join", ("lana", "#home")))
        await handle_event(watcher, ConsoleEvent("msg", ("bob", "hi")))
        await handle_event(watcher, ConsoleEvent("say", ("#home", "bob", "yo")))
        await handle_event(watcher, ConsoleEvent("ping", ("localhost",)))
        await handle_event(watcher, ConsoleEvent("welcome"))

        watcher.on_join.assert_awaited_once_with("#home", "lana")
        watcher.on_private_message.assert_awaited_once_with("bob", "hi")
        watcher.on_channel_message.assert_awaited_once_with("#home", "bob", "yo")
        watcher.on_ping.assert_awaited_once_with("localhost")
        watcher.on_welcome.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_drives_real_watcher(self, watcher, sink):
        await handle_event(watcher, ConsoleEvent("join", ("lana", "#lounge")))
        assert sink.messages == [("+15551111111", "lana has joined #lounge")]


class TestConsoleClient:

    @pytest.mark.asyncio
    async def test_prints_actions(self, console_client, output):
        await console_client.join("#home")
        await console_client.privmsg("#home", "[bold]not markup[/bold]")
        await console_client.op("#home", "archer")

        text = output.getvalue()
        assert "JOIN #home" in text
        assert "[bold]not markup[/bold]" in text
        assert "MODE #home +o archer" in text
        assert console_client.joined == {"#home"}

    @pytest.mark.asyncio
    async def test_join_requires_channel_name(self, console_client):
        with pytest.raises(ChatClientError):
            await console_client.join("home")

    @pytest.mark.asyncio
    async def test_part_requires_membership(self, console_client):
        with pytest.raises(ChatClientError):
            await console_client.part("#home")

        await console_client.join("#home")
        await console_client.part("#home")
        assert console_client.joined == set()

    @pytest.mark.asyncio
    async def test_invalid_nick(self, console_client):
        with pytest.raises(ChatClientError):
            await console_client.nick("two words")
        with pytest.raises(ChatClientError):
            await console_client.nick("")
