"""Per-board incremental diff cycle – feed → new-item window → downloads → state."""

from __future__ import annotations

import asyncio
import logging

import httpx

from .api import PinterestAPI
from .download import download_item
from .errors import PinCushionError
from .models import Board, FeedItem, new_item_window
from .storage import BoardStore

logger = logging.getLogger("pincushion.board")


class BoardState:
    """Owns one board's check-and-download cycle.

    At most one cycle runs per instance at a time; the scheduler guarantees
    this by awaiting each cycle before looking at the next tick.
    """

    def __init__(self, board: Board, api: PinterestAPI, store: BoardStore, *, max_concurrent: int = 8) -> None:
        self.board = board
        self.api = api
        self.store = store
        self.max_concurrent = max(1, max_concurrent)
        self.stats = {"cycles": 0, "downloaded": 0, "failed": 0, "errors": 0}

    @property
    def label(self) -> str:
        return self.board.label

    # ── single item ──────────────────────────────────────────────

    async def _download(self, item: FeedItem) -> bool:
        """Download one item; any failure is logged and reported as False."""
        try:
            ok = await download_item(self.api.client, self.board.local_path, item)
        except (PinCushionError, httpx.HTTPError, OSError) as exc:
            kind = getattr(exc, "kind", type(exc).__name__)
            logger.warning("[%s] item %r not downloaded (%s): %s", self.label, item.id, kind, exc)
            self.stats["errors"] += 1
            return False
        if not ok:
            self.stats["failed"] += 1
        return ok

    async def _download_bounded(self, item: FeedItem, sem: asyncio.Semaphore) -> bool:
        async with sem:
            return await self._download(item)

    # ── cycle ────────────────────────────────────────────────────

    async def check_and_download(self) -> int:
        """Fetch the feed and download every item newer than the stored marker.

        Returns how many pins were downloaded. Feed errors propagate and
        leave the marker untouched.
        """
        items = await self.api.fetch_feed(self.board.feed_url)
        self.stats["cycles"] += 1

        window = new_item_window(items, self.board.last_item_id)
        if not window:
            logger.debug("[%s] nothing new", self.label)
            return 0

        previous = self.board.last_item_id
        boundary, rest = window[0], window[1:]

        # The newest item becomes the marker whether or not its own download worked.
        downloaded = 1 if await self._download(boundary) else 0
        self.board.last_item_id = boundary.marker

        if rest:
            sem = asyncio.Semaphore(self.max_concurrent)
            results = await asyncio.gather(*(self._download_bounded(item, sem) for item in rest))
            downloaded += sum(1 for ok in results if ok)

        if downloaded >= 1 or self.board.last_item_id != previous:
            await asyncio.to_thread(self.store.persist, self.board)

        self.stats["downloaded"] += downloaded
        logger.info("[%s] %d new, %d downloaded", self.label, len(window), downloaded)
        return downloaded
