"""Text command parsing.

A command is a line starting with the command prefix (default ``.``)
followed by a keyword and whitespace-separated arguments. Anything that
does not match a known keyword and arity parses to None.
"""

import random
import re
from dataclasses import dataclass
from typing import Optional, Union

MAX_DICE = 100
MAX_SIDES = 1000

_DICE_RE = re.compile(r"^(\d*)d(\d+)$", re.IGNORECASE)


@dataclass(frozen=True)
class Dice:
    count: int
    sides: int

    @classmethod
    def parse(cls, token: str) -> Optional["Dice"]:
        """Parse ``NdM`` or ``dM``. Returns None for anything else."""
        match = _DICE_RE.match(token.strip())
        if not match:
            return None
        count = int(match.group(1)) if match.group(1) else 1
        sides = int(match.group(2))
        if not 1 <= count <= MAX_DICE or not 2 <= sides <= MAX_SIDES:
            return None
        return cls(count, sides)

    def roll(self, rng: Optional[random.Random] = None) -> list[int]:
        rng = rng or random
        return [rng.randint(1, self.sides) for _ in range(self.count)]

    def __str__(self) -> str:
        return f"{self.count}d{self.sides}"


# ── Public commands ──

@dataclass(frozen=True)
class Chuck:
    admin_only = False


@dataclass(frozen=True)
class Cookie:
    admin_only = False


@dataclass(frozen=True)
class Quote:
    category: Optional[str] = None
    admin_only = False


@dataclass(frozen=True)
class Roll:
    dice: tuple[Dice, ...] = (Dice(1, 6),)
    admin_only = False


# ── Administrator commands ──

@dataclass(frozen=True)
class SetNick:
    nick: str
    admin_only = True


@dataclass(frozen=True)
class SetDebug:
    enabled: bool
    admin_only = True


@dataclass(frozen=True)
class JoinChannel:
    channel: str
    admin_only = True


@dataclass(frozen=True)
class LeaveChannel:
    channel: str
    admin_only = True


@dataclass(frozen=True)
class SetTopic:
    topic: str
    admin_only = True


@dataclass(frozen=True)
class ListMessages:
    admin_only = True


Command = Union[
    Chuck, Cookie, Quote, Roll,
    SetNick, SetDebug, JoinChannel, LeaveChannel, SetTopic, ListMessages,
]

_LIST_MESSAGES_ALIASES = frozenset({"messages", "listmessages", "list-messages"})


def parse_command(text: str, prefix: str = ".") -> Optional[Command]:
    """Parse a line of chat text into a Command.

    Args:
        text: Raw message content
        prefix: Command marker the line must start with

    Returns:
        The parsed command, or None if the line is not a known command
    """
    if not prefix or not text.startswith(prefix):
        return None

    tokens = text[len(prefix):].split()
    if not tokens:
        return None

    keyword, args = tokens[0].lower(), tokens[1:]

    if keyword == "chuck" and not args:
        return Chuck()
    if keyword == "cookie" and not args:
        return Cookie()
    if keyword == "quote" and len(args) <= 1:
        return Quote(args[0] if args else None)
    if keyword == "roll":
        return Roll(_parse_dice(args))

    if keyword == "debug" and len(args) == 1:
        return SetDebug(args[0].lower() == "true")
    if keyword == "nick" and len(args) == 1:
        return SetNick(args[0])
    if keyword == "join" and len(args) == 1:
        return JoinChannel(args[0])
    if keyword == "leave" and len(args) == 1:
        return LeaveChannel(args[0])
    if keyword == "topic" and args:
        # Keep the topic's own spacing
        topic = text[len(prefix):].strip()[len(tokens[0]):].strip()
        return SetTopic(topic)
    if keyword in _LIST_MESSAGES_ALIASES and not args:
        return ListMessages()

    return None


def _parse_dice(tokens: list[str]) -> tuple[Dice, ...]:
    dice = tuple(d for d in (Dice.parse(t) for t in tokens) if d is not None)
    return dice or (Dice(1, 6),)


def format_roll(nick: str, results: list[int]) -> str:
    """Format dice results: ``"alice rolled 3, 5 (8)"``."""
    listed = ", ".join(str(n) for n in results)
    return f"{nick} rolled {listed} ({sum(results)})"
