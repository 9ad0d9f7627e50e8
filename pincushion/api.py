"""Pinterest feed client – one shared async HTTP client plus RSS parsing."""

from __future__ import annotations

import asyncio
import logging

import feedparser
import httpx

from .config import HttpConfig
from .errors import FetchError, ParseError
from .models import FeedItem

logger = logging.getLogger("pincushion.api")


class PinterestAPI:
    """Thin wrapper around a board's RSS feed and the image host."""

    def __init__(self, cfg: HttpConfig | None = None, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.cfg = cfg or HttpConfig()
        self.client = httpx.AsyncClient(
            timeout=self.cfg.timeout,
            headers={"User-Agent": self.cfg.user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def fetch_feed(self, url: str) -> list[FeedItem]:
        """Fetch a board feed and return its items, newest first."""
        try:
            resp = await self.client.get(url)
        except httpx.TransportError as exc:
            raise FetchError(f"{url}: {exc}") from exc
        if not resp.is_success:
            raise FetchError(f"{url}: HTTP {resp.status_code}")

        parsed = await asyncio.to_thread(feedparser.parse, resp.content)
        if not parsed.entries and (parsed.bozo or not parsed.get("version")):
            raise ParseError(f"{url}: {parsed.get('bozo_exception', 'unreadable feed')}")

        items = [FeedItem(id=entry.get("id"), content=entry.get("summary")) for entry in parsed.entries]
        logger.debug("Fetched %d items from %s", len(items), url)
        return items

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> PinterestAPI:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
