"""Pytest configuration and shared fixtures."""

import textwrap
from unittest.mock import AsyncMock

import pytest

from chanwatch.config import ChannelConfig, UserSection
from chanwatch.errors import NotificationSinkError
from chanwatch.notifications import NotificationService
from chanwatch.ratelimit import ThrottleWindow
from chanwatch.watcher import Watcher


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 10_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingSink:
    """Notification sink that remembers what it was asked to send."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []
        self.error: str | None = None

    async def send_message(self, recipient: str, message: str) -> None:
        self.messages.append((recipient, message))
        if self.error:
            raise NotificationSinkError(self.error)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def notifications(sink, clock):
    """Service with a 10 minute cooldown and a 3-per-hour window."""
    return NotificationService(
        sink,
        "+15551111111",
        frequency_seconds=600,
        window=ThrottleWindow(period_seconds=3600, max_count=3, clock=clock),
        clock=clock,
    )


@pytest.fixture
def client():
    """ChatClient double; every action is an AsyncMock."""
    return AsyncMock()


@pytest.fixture
def channels():
    return [
        ChannelConfig(
            name="#home",
            admin=True,
            log_chat=True,
            topic="Home sweet home",
            greetings=[
                {"filter": "^Jack$", "passthru": False, "message": "Hit the road, {name}."},
                {"filter": "^John$", "passthru": True, "message": "Hi {name}!"},
                {"message": "Welcome!"},
            ],
        ),
        ChannelConfig(name="#lounge"),
    ]


@pytest.fixture
def watcher(client, notifications, channels):
    return Watcher(
        client,
        UserSection(nick="Watcher", user="watcher", real="The Watcher"),
        notifications,
        admins=["archer"],
        channels=channels,
        watch_list=["lana"],
        ignored=["StatServ"],
    )


MINIMAL_CONFIG = textwrap.dedent("""
    [bot]
    admin = ["archer"]
    watch_list = ["lana"]
    message_frequency = 15

    [user]
    nick = "Watcher"
    user = "watcher"
    real = "The Watcher"

    [server]
    address = "irc.example.net:6667"

    [[server.channels]]
    name = "#home"
    admin = true
    log_chat = true

    [[server.channels.greetings]]
    filter = "^John"
    passthru = true
    message = "Hi {name}!"

    [[server.channels.greetings]]
    message = "Welcome!"

    [twilio]
    sid = "AC123"
    token = "secret"
    number = "+15550000000"
    recipient = "+15551111111"
""")


@pytest.fixture
def config_file(tmp_path):
    """Write a config file; returns a function taking the TOML text."""
    def _write(text: str = MINIMAL_CONFIG) -> str:
        path = tmp_path / "bot.toml"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def minimal_config():
    return MINIMAL_CONFIG
