"""chanwatch configuration management.

Settings come from a TOML file read once at startup. Environment
variables (``CHANWATCH_`` prefix, ``__`` between nested keys, e.g.
``CHANWATCH_TWILIO__TOKEN``) and ``.env`` override file values, which
keeps provider credentials out of the TOML.

Any problem aborts startup with ConfigError. There is no partial load.
"""

import logging
import os
import tomllib
from typing import Optional

from pydantic import BaseModel, Field, PrivateAttr, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .errors import ConfigError
from .greetings import GreetingRule, GreetingSet
from .ratelimit import DEFAULT_MAX_COUNT, DEFAULT_PERIOD_SECONDS

logger = logging.getLogger("chanwatch.config")

DEFAULT_CONFIG_PATH = "bot.toml"
DEFAULT_AWAY_MESSAGE = "Sorry, I'm AFK right now. Or a bot. Take your pick."


class BotSection(BaseModel):
    admin: list[str] = Field(default_factory=list, description="Administrator nicks")
    watch_list: list[str] = Field(default_factory=list, description="Nicks that trigger join notifications anywhere")
    message_frequency: int = Field(ge=0, description="Per-subject notification cooldown, minutes")
    command_prefix: str = Field(default=".", min_length=1, description="Marker that starts a command")
    ignore: list[str] = Field(default_factory=lambda: ["StatServ"], description="Service nicks whose PMs are dropped")
    away_message: str = Field(default=DEFAULT_AWAY_MESSAGE, description="Auto-reply to private messages")


class UserSection(BaseModel):
    nick: str = Field(min_length=1)
    user: str = Field(min_length=1)
    real: str


class GreetingConfig(BaseModel):
    message: str
    filter: Optional[str] = None
    passthru: bool = False


class ChannelConfig(BaseModel):
    name: str = Field(min_length=1)
    admin: bool = Field(default=False, description="Home channel: auto-op, greetings, join notifications")
    log_chat: bool = False
    topic: Optional[str] = None
    greetings: list[GreetingConfig] = Field(default_factory=list)

    _greeting_set: GreetingSet = PrivateAttr(default_factory=GreetingSet)

    def model_post_init(self, __context) -> None:
        # Compiles filters now so a bad pattern fails at startup.
        self._greeting_set = GreetingSet([
            GreetingRule.from_config(g.message, g.filter, g.passthru)
            for g in self.greetings
        ])

    @property
    def greeting_set(self) -> GreetingSet:
        return self._greeting_set


class ServerSection(BaseModel):
    address: str = Field(min_length=1)
    channels: list[ChannelConfig] = Field(default_factory=list)


class TwilioSection(BaseModel):
    sid: str
    token: str
    number: str
    recipient: str
    dry_run: bool = Field(default=False, description="Log notifications instead of sending SMS")
    timeout: float = Field(default=15.0, gt=0)


class ThrottleSection(BaseModel):
    period_seconds: float = Field(default=DEFAULT_PERIOD_SECONDS, gt=0)
    max_count: int = Field(default=DEFAULT_MAX_COUNT, ge=0)


class LoggingSection(BaseModel):
    path: str = Field(min_length=1, description="Directory for per-channel chat logs")


class WatcherSettings(BaseSettings):
    """Settings loaded from the TOML file, environment, or .env file."""

    bot: BotSection
    user: UserSection
    server: ServerSection
    twilio: TwilioSection
    throttle: ThrottleSection = Field(default_factory=ThrottleSection)
    logging: Optional[LoggingSection] = None

    model_config = SettingsConfigDict(
        env_prefix="CHANWATCH_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; the environment wins over them.
        return env_settings, dotenv_settings, init_settings

    @property
    def frequency_seconds(self) -> float:
        return self.bot.message_frequency * 60.0


def load_settings(path: str = DEFAULT_CONFIG_PATH) -> WatcherSettings:
    """Load and validate settings from a TOML file.

    Raises:
        ConfigError: On any missing, unreadable or invalid configuration
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Config file unreadable: {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Config file is not valid TOML: {path}: {e}") from e

    try:
        settings = WatcherSettings(**data)
    except ValidationError as e:
        raise ConfigError(_describe_validation_error(e)) from e

    if settings.logging is not None:
        try:
            os.makedirs(settings.logging.path, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Invalid logging path {settings.logging.path!r}: {e}") from e

    logger.debug(
        f"Loaded {path}: {len(settings.server.channels)} channels, "
        f"{len(settings.bot.admin)} admins, {len(settings.bot.watch_list)} watched"
    )
    return settings


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        loc = err.get("loc", ())
        if err.get("type") == "missing" and len(loc) == 1:
            problems.append(f"missing section [{loc[0]}]")
        else:
            where = ".".join(str(part) for part in loc) or "config"
            problems.append(f"{where}: {err.get('msg')}")
    return "Invalid configuration: " + "; ".join(problems)
