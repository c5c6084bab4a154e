"""Exception hierarchy for chanwatch.

Only configuration errors are fatal. Sink and protocol failures are
caught at the Watcher boundary, logged, and the bot keeps running.
"""


class ChanwatchError(Exception):
    """Base class for all chanwatch errors."""
    pass


class ConfigError(ChanwatchError):
    """Configuration file missing, unreadable, or invalid."""
    pass


class NotificationSinkError(ChanwatchError):
    """The notification sink (SMS provider) rejected or failed a send."""
    pass


class ChatClientError(ChanwatchError):
    """An outbound protocol action (join, part, topic, op...) failed."""
    pass
