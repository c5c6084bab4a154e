"""Greeting rules for participants joining the home channel.

Rules are evaluated in declaration order. A matching rule emits its
message; unless it is marked ``passthru`` the walk stops there. Rules
without a filter match everyone.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from .errors import ConfigError

logger = logging.getLogger("chanwatch.greetings")

# Both spellings are accepted in templates.
_PLACEHOLDERS = ("{name}", "{nick}")


@dataclass(frozen=True)
class GreetingRule:
    message: str
    filter: Optional[re.Pattern] = None
    passthru: bool = False

    def applies_to(self, name: str) -> bool:
        if self.filter is None:
            return True
        return self.filter.search(name) is not None

    def render(self, name: str) -> str:
        text = self.message
        for placeholder in _PLACEHOLDERS:
            text = text.replace(placeholder, name)
        return text

    @classmethod
    def from_config(cls, message: str, filter: Optional[str] = None, passthru: bool = False) -> "GreetingRule":
        """Build a rule from raw config values.

        Raises:
            ConfigError: If ``filter`` is not a valid regular expression
        """
        pattern = None
        if filter is not None:
            try:
                pattern = re.compile(filter)
            except re.error as e:
                raise ConfigError(f"Invalid greeting filter {filter!r}: {e}") from e
        return cls(message=message, filter=pattern, passthru=passthru)


class GreetingSet:
    """Ordered, immutable collection of greeting rules."""

    def __init__(self, rules: Sequence[GreetingRule] = ()):
        self._rules = tuple(rules)

    def for_subject(self, name: str) -> Iterator[GreetingRule]:
        """Yield the rules that greet ``name``, in declaration order.

        The first matching rule without ``passthru`` ends the walk.
        Single-pass; callers may stop consuming early.
        """
        for rule in self._rules:
            if not rule.applies_to(name):
                continue
            yield rule
            if not rule.passthru:
                return

    def messages_for(self, name: str) -> list[str]:
        """Rendered greeting messages for ``name``."""
        return [rule.render(name) for rule in self.for_subject(name)]

    def __iter__(self) -> Iterator[GreetingRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __bool__(self) -> bool:
        return bool(self._rules)

    def __repr__(self) -> str:
        return f"GreetingSet({len(self._rules)} rules)"
