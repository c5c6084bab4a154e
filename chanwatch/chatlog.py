"""Per-channel, per-day chat logs.

One file per channel per day, ``{path}/{YYYY-MM-DD}_{channel}.log``, one
``nick: message`` line per chat message. Without a configured path
logging is disabled.
"""

import logging
import os
from datetime import datetime
from typing import Optional

logger = logging.getLogger("chanwatch.chatlog")


class ChatLog:
    def __init__(self, path: Optional[str] = None):
        self.path = path

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def file_for(self, channel: str, when: Optional[datetime] = None) -> str:
        when = when or datetime.now()
        name = f"{when.strftime('%Y-%m-%d')}_{channel.lstrip('#')}.log"
        return os.path.join(self.path, name)

    def write(self, channel: str, nick: str, message: str, when: Optional[datetime] = None) -> bool:
        """Append one line. Returns True if it was written."""
        if not self.enabled:
            return False

        file_path = self.file_for(channel, when)
        try:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(f"{nick}: {message}\n")
        except OSError as e:
            logger.warning(f"Could not write chat log {file_path}: {e}")
            return False
        return True
