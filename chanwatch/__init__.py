"""chanwatch — channel watcher bot with gated SMS notifications."""

__version__ = "0.3.0"
