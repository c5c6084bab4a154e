"""chanwatch — service wiring and entry point."""

import asyncio
import logging
import sys
from typing import Optional

from .client import ChatClient
from .config import DEFAULT_CONFIG_PATH, WatcherSettings, load_settings
from .errors import ConfigError
from .notifications import LogSink, NotificationService, NotificationSink, TwilioSink
from .ratelimit import ThrottleWindow
from .watcher import Watcher

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("chanwatch")


def setup_logging(debug: bool = False, log_file: Optional[str] = None):
    """Configure root logging once: stderr, plus a file if given."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=logging.INFO, format=_log_format, handlers=handlers)
    logging.getLogger("chanwatch").setLevel(logging.DEBUG if debug else logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_sink(settings: WatcherSettings) -> NotificationSink:
    twilio = settings.twilio
    if twilio.dry_run:
        logger.info("Twilio dry-run enabled: notifications are only logged.")
        return LogSink()
    return TwilioSink(twilio.sid, twilio.token, twilio.number, timeout=twilio.timeout)


def build_notification_service(
    settings: WatcherSettings,
    sink: Optional[NotificationSink] = None,
) -> NotificationService:
    window = ThrottleWindow(
        period_seconds=settings.throttle.period_seconds,
        max_count=settings.throttle.max_count,
    )
    return NotificationService(
        sink or build_sink(settings),
        settings.twilio.recipient,
        settings.frequency_seconds,
        window=window,
    )


def build_watcher(settings: WatcherSettings, client: ChatClient, debug: bool = False) -> Watcher:
    return Watcher.from_settings(
        settings,
        client,
        build_notification_service(settings),
        debug=debug,
    )


async def run(settings: WatcherSettings, debug: bool = False):
    """Main run loop: wire the Watcher and drive it from the console."""
    from .channels.console import ConsoleClient, run_console

    client = ConsoleClient()
    watcher = build_watcher(settings, client, debug=debug)

    logger.info(
        f"Watching {len(watcher.channels)} channels as {watcher.identity.nick} "
        f"({len(watcher.watch_list)} watched nicks)"
    )
    await run_console(watcher)


def main():
    """Entry point."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    setup_logging()
    try:
        settings = load_settings(config_path)
        asyncio.run(run(settings))
    except ConfigError as e:
        logger.critical(f"Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
