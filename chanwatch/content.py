"""Joke, fortune cookie and quote fetchers.

Each fetch is a single best-effort HTTP call. Any failure is logged and
replaced by a canned response, so callers always get text back.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger("chanwatch.content")

JOKE_URL = "https://api.chucknorris.io/jokes/random"
COOKIE_URL = "https://api.viewbits.com/v1/fortunecookie?mode=random"
QUOTE_URL = "https://quotes.rest/qod"

DEFAULT_JOKE = "No one really knows Chuck Norris. Not even Chuck Norris!"
DEFAULT_COOKIE = (
    "Man who run in front of car get tired. "
    "Man who run behind car get exhausted."
)
DEFAULT_QUOTE = "Talk low, talk slow, and don't say too much. -John Wayne"


class ContentService:
    """Fetches short text snippets for the public chat commands."""

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout
        self._transport = transport

    async def _get_json(self, url: str, params: Optional[dict] = None):
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            headers={"Accept": "application/json", "User-Agent": "chanwatch/1.0"},
            transport=self._transport,
        ) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()

    async def joke(self) -> str:
        try:
            payload = await self._get_json(JOKE_URL)
            return _non_empty(payload["value"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Joke fetch failed, using default: {e}")
            return DEFAULT_JOKE

    async def cookie(self) -> str:
        try:
            payload = await self._get_json(COOKIE_URL)
            return _non_empty(payload["text"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Fortune cookie fetch failed, using default: {e}")
            return DEFAULT_COOKIE

    async def quote(self, category: Optional[str] = None) -> str:
        """Quote of the day, optionally for a category, as ``"text -author"``."""
        params = {"category": category} if category else None
        try:
            payload = await self._get_json(QUOTE_URL, params)
            entry = payload["contents"]["quotes"][0]
            return f"{_non_empty(entry['quote'])} -{entry['author']}"
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Quote fetch failed, using default: {e}")
            return DEFAULT_QUOTE


def _non_empty(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("empty content")
    return value.strip()
