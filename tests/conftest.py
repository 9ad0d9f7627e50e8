"""Shared fixtures: fake feeds, fake image host, in-memory board stores."""

from __future__ import annotations

import html
from typing import Callable

import httpx
import pytest

from pincushion.api import PinterestAPI
from pincushion.models import Board
from pincushion.storage import BoardStore

FEED_URL = "https://www.pinterest.com/alice/cats.rss"


def pin_description(path: str) -> str:
    """Description markup as Pinterest emits it for a pin thumbnail at ``path``."""
    return (
        '<a href="https://www.pinterest.com/pin/534872893249331184/">'
        f'<img src="https://i.pinimg.com/236x/{path}.jpg"></a>'
    )


def rss(items: list[tuple[str | None, str | None]]) -> bytes:
    """Build an RSS document from ``(guid, description)`` pairs, newest first."""
    parts = []
    for guid, description in items:
        entry = "<item><title>pin</title>"
        if guid is not None:
            entry += f'<guid isPermaLink="false">{guid}</guid>'
        if description is not None:
            entry += f"<description>{html.escape(description)}</description>"
        parts.append(entry + "</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>cats</title>'
        "<link>https://www.pinterest.com/alice/cats/</link>"
        "<description>cats</description>"
        + "".join(parts)
        + "</channel></rss>"
    ).encode()


class RecordingStore(BoardStore):
    """A real store that also remembers every persisted snapshot."""

    def __init__(self, pin_dir: str) -> None:
        super().__init__(pin_dir)
        self.saved: list[dict[str, str]] = []

    def persist(self, board: Board) -> None:
        super().persist(board)
        self.saved.append(board.to_dict())


def make_api(handler: Callable) -> PinterestAPI:
    return PinterestAPI(transport=httpx.MockTransport(handler))


@pytest.fixture
def pin_dir(tmp_path) -> str:
    return str(tmp_path / "pins")


@pytest.fixture
def board(pin_dir) -> Board:
    return Board.create(pin_dir, "alice", "cats", "cats")


@pytest.fixture
def store(pin_dir) -> RecordingStore:
    return RecordingStore(pin_dir)
