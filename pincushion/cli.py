"""CLI entry-point for pin-cushion."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .api import PinterestAPI
from .board import BoardState
from .config import Config
from .errors import PinCushionError
from .scheduler import PollScheduler
from .storage import BoardStore

console = Console()

STOP_WORD = "stop"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_config() -> Config:
    try:
        return Config.load()
    except PinCushionError as exc:
        raise click.ClickException(str(exc)) from exc


def _load_states(cfg: Config, api: PinterestAPI) -> list[BoardState]:
    store = BoardStore(cfg.pin_dir)
    try:
        boards = store.load_all(cfg.iter_boards())
    except PinCushionError as exc:
        raise click.ClickException(str(exc)) from exc
    return [
        BoardState(board, api, store, max_concurrent=cfg.http.max_concurrent_downloads)
        for board in boards
    ]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """pin-cushion – mirror Pinterest boards to local directories.

    Watches the RSS feed of every tracked board and downloads the original
    image of each new pin into <pin_dir>/<user>/<board>.
    """
    _setup_logging(verbose)


# ─── Commands ────────────────────────────────────────────────────


@cli.command()
@click.argument("pin_dir", type=click.Path(file_okay=False))
@click.option("--default-user", help="User assumed by `add` when --user is omitted")
def init(pin_dir: str, default_user: str | None) -> None:
    """Create the config file.

    Example: pin-cushion init ~/pins --default-user alice
    """
    cfg = Config.init(pin_dir, default_user)
    try:
        cfg.save()
    except PinCushionError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]✓[/green] Pins will be stored in [cyan]{pin_dir}[/cyan]")


@cli.command()
@click.argument("board")
@click.argument("url")
@click.option("--user", help="Owner of the board (defaults to the configured default user)")
def add(board: str, url: str, user: str | None) -> None:
    """Track a new board.

    URL is either the board's feed URL or the last path segment of the
    board's URL.

    Example: pin-cushion add --user alice cats cats-and-more-cats
    """
    cfg = _load_config()
    owner = user or cfg.default_user
    if not owner:
        raise click.UsageError("no --user given and no default user configured")
    try:
        created = cfg.add_board(owner, board, url)
        BoardStore(cfg.pin_dir).persist(created)
        cfg.save()
    except PinCushionError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]✓[/green] Tracking [cyan]{created.label}[/cyan] ({created.feed_url})")


@cli.command(name="list")
def list_boards() -> None:
    """List all tracked boards."""
    cfg = _load_config()
    store = BoardStore(cfg.pin_dir)
    table = Table(title="Tracked Boards", show_header=True, header_style="bold cyan")
    table.add_column("Board", style="bold")
    table.add_column("Feed")
    table.add_column("Latest Pin")
    for owner, name in cfg.iter_boards():
        try:
            b = store.load(owner, name)
        except PinCushionError as exc:
            table.add_row(f"{owner}/{name}", f"[red]{exc.kind}[/red]", "")
            continue
        table.add_row(b.label, b.feed_url, b.last_item_id or "–")
    console.print(table)


@cli.command()
def check() -> None:
    """Check every board once and exit."""
    cfg = _load_config()

    async def _run() -> dict[str, int | None]:
        async with PinterestAPI(cfg.http) as api:
            states = _load_states(cfg, api)
            return await PollScheduler(cfg.poll.interval).run_once(states)

    results = asyncio.run(_run())
    table = Table(title="Check Summary", show_header=True, header_style="bold cyan")
    table.add_column("Board", style="bold")
    table.add_column("Downloaded", justify="right")
    for label, count in results.items():
        table.add_row(label, "[red]failed[/red]" if count is None else str(count))
    console.print(table)


async def _wait_for_stop() -> None:
    """Return once "stop" is typed or stdin closes."""
    loop = asyncio.get_running_loop()
    lines: asyncio.Queue[str] = asyncio.Queue()

    def _reader() -> None:
        try:
            for line in sys.stdin:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            loop.call_soon_threadsafe(lines.put_nowait, "")
        except RuntimeError:
            pass  # loop already closed

    # daemon: a blocked readline must not keep the process alive
    threading.Thread(target=_reader, name="stdin-reader", daemon=True).start()
    while True:
        line = await lines.get()
        if not line or line.strip() == STOP_WORD:
            return
        console.print(f'To stop listening to your feeds, type "{STOP_WORD}".')


@cli.command()
def start() -> None:
    """Poll every board until "stop" is typed."""
    cfg = _load_config()

    async def _run() -> None:
        async with PinterestAPI(cfg.http) as api:
            states = _load_states(cfg, api)
            handle = PollScheduler(cfg.poll.interval).start(states)
            console.print("[bold]listening...[/bold]")
            try:
                await _wait_for_stop()
            finally:
                console.print("[bold]waiting for running checks to finish...[/bold]")
                await handle.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        sys.exit(130)
    console.print("[green]✓[/green] Stopped")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
