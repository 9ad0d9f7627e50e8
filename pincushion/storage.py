"""Board state storage – one JSON state file inside each board's directory."""

from __future__ import annotations

import logging
import os
from typing import Iterable

import orjson

from .errors import StorageError
from .models import Board

logger = logging.getLogger("pincushion.storage")

STATE_FILENAME = ".cushion.json"


class BoardStore:
    """Persist and reload `Board` records under ``<pin_dir>/<owner>/<board>``."""

    def __init__(self, pin_dir: str) -> None:
        self.pin_dir = pin_dir

    # ── helpers ──────────────────────────────────────────────────

    def board_dir(self, owner: str, name: str) -> str:
        return os.path.join(self.pin_dir, owner, name)

    @staticmethod
    def state_path(board: Board) -> str:
        return os.path.join(board.local_path, STATE_FILENAME)

    # ── persist / load ───────────────────────────────────────────

    def persist(self, board: Board) -> None:
        """Write the board record atomically (temp file, then rename)."""
        path = self.state_path(board)
        tmp = path + ".tmp"
        data = orjson.dumps(board.to_dict(), option=orjson.OPT_INDENT_2)
        try:
            with open(tmp, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, path)
        except OSError as exc:
            raise StorageError(f"cannot save state for {board.label}: {exc}") from exc
        logger.debug("Saved %s (latest=%r)", board.label, board.last_item_id)

    def load(self, owner: str, name: str) -> Board:
        path = os.path.join(self.board_dir(owner, name), STATE_FILENAME)
        try:
            with open(path, "rb") as fh:
                data = orjson.loads(fh.read())
            return Board.from_dict(data)
        except OSError as exc:
            raise StorageError(f"cannot read state for {owner}/{name}: {exc}") from exc
        except (orjson.JSONDecodeError, KeyError, TypeError) as exc:
            raise StorageError(f"corrupt state for {owner}/{name}: {exc}") from exc

    def load_all(self, boards: Iterable[tuple[str, str]]) -> list[Board]:
        """Load every ``(owner, name)`` pair; the first failure is raised."""
        return [self.load(owner, name) for owner, name in boards]
