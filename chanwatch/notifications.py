"""Outbound notification gateway.

Every candidate notification passes two independent gates, window first:

1. Global throttle: the ThrottleWindow over every recorded send, across
   all subjects. A full window wins over everything else.
2. Per-subject cooldown: a subject notified less than ``frequency``
   seconds ago is skipped.

The decision and the record happen under one lock with no awaits in
between. The record is written before the sink is called, so a send that
later fails still spends the subject's cooldown and a window slot.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

import httpx

from .errors import NotificationSinkError
from .ratelimit import ThrottleWindow

logger = logging.getLogger("chanwatch.notifications")

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class NotificationStatus(str, Enum):
    SENT = "sent"
    THROTTLED = "throttled"
    RECENTLY_NOTIFIED = "recently_notified"
    FAILED = "failed"


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of one notify call. Gating outcomes are values, not errors."""

    status: NotificationStatus
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is NotificationStatus.SENT

    @classmethod
    def sent(cls) -> "NotificationResult":
        return cls(NotificationStatus.SENT)

    @classmethod
    def throttled(cls) -> "NotificationResult":
        return cls(NotificationStatus.THROTTLED)

    @classmethod
    def recently_notified(cls) -> "NotificationResult":
        return cls(NotificationStatus.RECENTLY_NOTIFIED)

    @classmethod
    def failed(cls, detail: str) -> "NotificationResult":
        return cls(NotificationStatus.FAILED, detail)

    def describe(self) -> str:
        if self.status is NotificationStatus.SENT:
            return "notification sent"
        if self.status is NotificationStatus.RECENTLY_NOTIFIED:
            return "notification withheld: recently notified"
        if self.status is NotificationStatus.THROTTLED:
            return "notification withheld: too many messages sent recently"
        return f"notification failed: {self.detail}"


class NotificationSink(Protocol):
    """Delivers one message. Raises NotificationSinkError on failure."""

    async def send_message(self, recipient: str, message: str) -> None:
        ...


class TwilioSink:
    """SMS sink backed by the Twilio Messages REST endpoint.

    One POST per message, no retries.
    """

    def __init__(
        self,
        sid: str,
        token: str,
        number: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.sid = sid
        self.number = number
        self._auth = (sid, token)
        self._timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{TWILIO_API_BASE}/Accounts/{self.sid}/Messages.json"

    async def send_message(self, recipient: str, message: str) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                auth=self._auth,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.url,
                    data={"From": self.number, "To": recipient, "Body": message},
                )
        except httpx.HTTPError as e:
            raise NotificationSinkError(f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise NotificationSinkError(_twilio_error_detail(response))

        logger.debug(f"SMS accepted by provider for {recipient}")


def _twilio_error_detail(response: httpx.Response) -> str:
    """Pull the provider's own error message out of a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code} - {response.reason_phrase}"
    message = payload.get("message") if isinstance(payload, dict) else None
    if message:
        return f"HTTP {response.status_code} - {message}"
    return f"HTTP {response.status_code} - {response.reason_phrase}"


class LogSink:
    """Dry-run sink: logs the notification instead of sending it."""

    async def send_message(self, recipient: str, message: str) -> None:
        logger.info(f"[dry-run] SMS to {recipient}: {message}")


class NotificationService:
    """Gates and forwards notifications about subjects to one recipient."""

    def __init__(
        self,
        sink: NotificationSink,
        recipient: str,
        frequency_seconds: float,
        window: Optional[ThrottleWindow] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the service.

        Args:
            sink: Delivery backend
            recipient: Who receives every notification
            frequency_seconds: Per-subject cooldown
            window: Global throttle (default: 30 per 3 hours)
            clock: Source of "now", monotonic seconds
        """
        self.sink = sink
        self.recipient = recipient
        self.frequency = frequency_seconds
        self.window = window or ThrottleWindow(clock=clock)
        self._clock = clock
        self._sent: dict[str, float] = {}
        self._lock = asyncio.Lock()

    async def notify_channel_join(self, subject: str, channel: str) -> NotificationResult:
        """Notify the recipient that a watched subject joined a channel."""
        return await self._notify(subject, f"{subject} has joined {channel}")

    async def notify_private_message(self, subject: str, message: str) -> NotificationResult:
        """Notify the recipient that the bot received a private message."""
        return await self._notify(subject, f"PM from {subject}: {message}")

    async def _notify(self, subject: str, text: str) -> NotificationResult:
        async with self._lock:
            gate = self._check_and_record(subject)
        if gate is not None:
            logger.debug(f"Notification about {subject} withheld: {gate.status.value}")
            return gate

        try:
            await self.sink.send_message(self.recipient, text)
        except NotificationSinkError as e:
            logger.warning(f"Notification about {subject} failed: {e}")
            return NotificationResult.failed(str(e))

        logger.info(f"Notification sent about {subject}")
        return NotificationResult.sent()

    def _check_and_record(self, subject: str) -> Optional[NotificationResult]:
        """Apply both gates; record ``now`` when the send may proceed.

        Must run under ``self._lock``. Returns the failing result, or None
        if the send should go ahead.
        """
        now = self._clock()

        if not self.window.can_send(self._sent.values(), now):
            return NotificationResult.throttled()

        previous = self._sent.get(subject)
        if previous is not None and now - previous < self.frequency:
            return NotificationResult.recently_notified()

        self._sent[subject] = now
        return None

    def sent_items(self) -> list[tuple[str, float]]:
        """Snapshot of (subject, last sent timestamp), most recent first."""
        return sorted(self._sent.items(), key=lambda item: item[1], reverse=True)

    def window_status(self) -> dict:
        """Global window status over every recorded send."""
        return self.window.status(self._sent.values(), self._clock())
