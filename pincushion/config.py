"""Configuration and environment settings for pin-cushion."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import orjson

from .errors import ConfigError, NotInitializedError, StorageError
from .models import Board

CONFIG_FILENAME = ".pin-cushion.json"


@dataclass(frozen=True)
class HttpConfig:
    """HTTP client settings shared by every board."""
    user_agent: str = "pin-cushion/0.2 (+https://github.com/pin-cushion/pin-cushion)"
    timeout: float = 30.0  # seconds per request
    max_concurrent_downloads: int = 8  # per board cycle

    @classmethod
    def from_env(cls) -> HttpConfig:
        return cls(
            timeout=float(os.getenv("PIN_CUSHION_TIMEOUT", "30")),
            max_concurrent_downloads=int(os.getenv("PIN_CUSHION_MAX_CONCURRENT", "8")),
        )


@dataclass(frozen=True)
class PollConfig:
    interval: float = 60.0  # seconds between ticks

    @classmethod
    def from_env(cls) -> PollConfig:
        return cls(interval=float(os.getenv("PIN_CUSHION_INTERVAL", "60")))


def config_path() -> Path:
    """Location of the config file: ``$PIN_CUSHION_CONFIG`` or ``~/.pin-cushion.json``."""
    override = os.getenv("PIN_CUSHION_CONFIG")
    if override:
        return Path(override)
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigError(f"cannot resolve home directory: {exc}") from exc
    return home / CONFIG_FILENAME


@dataclass
class Config:
    pin_dir: str
    default_user: str | None = None
    boards: dict[str, list[str]] = field(default_factory=dict)
    http: HttpConfig = field(default_factory=HttpConfig.from_env)
    poll: PollConfig = field(default_factory=PollConfig.from_env)

    @classmethod
    def init(cls, pin_dir: str | Path, default_user: str | None = None) -> Config:
        return cls(pin_dir=os.fspath(pin_dir), default_user=default_user)

    # ── boards ───────────────────────────────────────────────────

    def add_board(self, user: str, board: str, url: str) -> Board:
        """Register a board and create its directory.

        ``url`` is either the board's feed URL or the last path segment of
        the board's URL.
        """
        names = self.boards.setdefault(user, [])
        if board in names:
            raise ConfigError(f"board {user}/{board} is already tracked")
        created = Board.create(self.pin_dir, user, board, url)
        names.append(board)
        return created

    def iter_boards(self) -> list[tuple[str, str]]:
        return [(user, name) for user, names in self.boards.items() for name in names]

    # ── load / save ──────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "pin_dir": self.pin_dir,
            "default_user": self.default_user,
            "boards": self.boards,
        }

    def save(self, path: Path | None = None) -> None:
        target = path or config_path()
        try:
            target.write_bytes(orjson.dumps(self.to_dict(), option=orjson.OPT_INDENT_2))
        except OSError as exc:
            raise StorageError(f"cannot write config {target}: {exc}") from exc

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        source = path or config_path()
        try:
            raw = source.read_bytes()
        except FileNotFoundError as exc:
            raise NotInitializedError(f"no config at {source}; run `pin-cushion init` first") from exc
        except OSError as exc:
            raise StorageError(f"cannot read config {source}: {exc}") from exc
        try:
            data = orjson.loads(raw)
            return cls(
                pin_dir=str(data["pin_dir"]),
                default_user=data.get("default_user"),
                boards={str(k): [str(b) for b in v] for k, v in (data.get("boards") or {}).items()},
            )
        except (orjson.JSONDecodeError, KeyError, TypeError, AttributeError) as exc:
            raise ConfigError(f"malformed config {source}: {exc}") from exc
