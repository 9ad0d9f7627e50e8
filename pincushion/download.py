"""Single-pin downloader: find the original image behind a feed item."""

from __future__ import annotations

import asyncio
import logging
import os
import re

import httpx

from .errors import MissingContentError, StorageError, TransportError
from .models import FeedItem

logger = logging.getLogger("pincushion.download")

# Feed thumbnails are always .jpg; originals may use any of these. Probed in order.
EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "webm", "tiff", "gif", "jfif", "jiff")

_IMG_RE = re.compile(r'img src="(https://i\.pinimg\.com)/\S*?/(\S*\.).*"', re.MULTILINE)


def extract_asset_base(content: str) -> str | None:
    """Turn a pin description into the original image URL sans extension.

    ``<img src="https://i.pinimg.com/236x/e1/5f/eb/e15feb.jpg">`` becomes
    ``https://i.pinimg.com/originals/e1/5f/eb/e15feb.``. Returns None when
    the description holds no pinimg reference.
    """
    match = _IMG_RE.search(content)
    if match is None:
        return None
    return f"{match.group(1)}/originals/{match.group(2)}"


def _write_atomic(path: str, body: bytes) -> None:
    """Write to a temp file beside ``path`` and rename, so no partial pin is left behind."""
    tmp = path + ".part"
    try:
        with open(tmp, "wb") as fh:
            fh.write(body)
        os.replace(tmp, path)
    except OSError as exc:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise StorageError(f"cannot write {path}: {exc}") from exc


async def probe_and_download(client: httpx.AsyncClient, base_url: str, target_dir: str) -> bool:
    """Try every known extension until one resolves, then save it.

    Returns False when no extension answered with a success status.
    """
    for ext in EXTENSIONS:
        url = base_url + ext
        try:
            async with client.stream("GET", url) as resp:
                if not resp.is_success:
                    logger.debug("%s: HTTP %d", url, resp.status_code)
                    continue
                try:
                    body = await resp.aread()
                except httpx.RequestError as exc:
                    raise TransportError(f"{url}: {exc}") from exc
        except httpx.RequestError as exc:
            logger.debug("%s: %s", url, exc)
            continue

        file_name = url.rsplit("/", 1)[-1]
        path = os.path.join(target_dir, file_name)
        await asyncio.to_thread(_write_atomic, path, body)
        logger.info("Getting: %s", file_name)
        return True
    return False


async def download_item(client: httpx.AsyncClient, target_dir: str, item: FeedItem) -> bool:
    """Download the pin behind one feed item. Returns whether a file was saved."""
    if item.content is None:
        raise MissingContentError(f"item {item.id!r} has no description")
    base_url = extract_asset_base(item.content)
    if base_url is None:
        logger.debug("No image reference in item %r", item.id)
        return False
    return await probe_and_download(client, base_url, target_dir)
