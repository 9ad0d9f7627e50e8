"""Board and feed item records plus the new-item window computation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Iterable

from .errors import StorageError

FEED_HOST_PREFIX = "https://www.pinterest"
FEED_TEMPLATE = "https://www.pinterest.com/{owner}/{short}.rss"


def resolve_feed_url(owner: str, url_or_path: str) -> str:
    """Return the feed URL for either a full feed URL or a short board path."""
    if url_or_path.startswith(FEED_HOST_PREFIX) and url_or_path.endswith(".rss"):
        return url_or_path
    return FEED_TEMPLATE.format(owner=owner, short=url_or_path)


@dataclass
class Board:
    """One tracked board: where its feed lives, where its pins go, how far we got."""

    owner: str
    name: str
    feed_url: str
    local_path: str
    last_item_id: str = ""

    @property
    def label(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def create(cls, pin_dir: str, owner: str, name: str, url_or_path: str) -> Board:
        """Create a fresh board, making its download directory if needed."""
        local_path = os.path.join(pin_dir, owner, name)
        try:
            os.makedirs(local_path, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot create {local_path}: {exc}") from exc
        return cls(
            owner=owner,
            name=name,
            feed_url=resolve_feed_url(owner, url_or_path),
            local_path=local_path,
        )

    # ── persisted record ─────────────────────────────────────────

    def to_dict(self) -> dict[str, str]:
        return {
            "user": self.owner,
            "board": self.name,
            "url": self.feed_url,
            "path": self.local_path,
            "latest_download": self.last_item_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Board:
        return cls(
            owner=str(data["user"]),
            name=str(data["board"]),
            feed_url=str(data["url"]),
            local_path=str(data["path"]),
            last_item_id=str(data.get("latest_download", "")),
        )


@dataclass(frozen=True)
class FeedItem:
    id: str | None
    content: str | None

    @property
    def marker(self) -> str:
        """The value stored as a board's marker when this item is the newest one."""
        return self.id or ""


def new_item_window(items: Iterable[FeedItem], last_item_id: str) -> list[FeedItem]:
    """Return the items newer than ``last_item_id``.

    Feeds are newest-first, so this is the prefix up to (not including) the
    first item whose id equals the marker. Items without an id never match,
    and an empty marker (a board never checked before) matches nothing.
    """
    window: list[FeedItem] = []
    for item in items:
        if last_item_id and item.id is not None and item.id == last_item_id:
            break
        window.append(item)
    return window
