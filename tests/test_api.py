"""Tests for feed fetching and parsing."""

import asyncio

import httpx
import pytest

from pincushion.errors import FetchError, ParseError

from .conftest import FEED_URL, make_api, pin_description, rss


def _fetch(handler, url=FEED_URL):
    async def go():
        async with make_api(handler) as api:
            return await api.fetch_feed(url)

    return asyncio.run(go())


def test_items_in_feed_order():
    body = rss([("c", pin_description("cc/cc/cc/c3")), ("b", pin_description("bb/bb/bb/b2")), ("a", "plain")])
    items = _fetch(lambda request: httpx.Response(200, content=body))
    assert [i.id for i in items] == ["c", "b", "a"]
    assert "i.pinimg.com/236x/cc/cc/cc/c3.jpg" in items[0].content
    assert items[2].content == "plain"


def test_missing_guid_and_description():
    body = rss([(None, "text"), ("b", None)])
    items = _fetch(lambda request: httpx.Response(200, content=body))
    assert items[0].id is None
    assert items[1].content is None


def test_empty_channel():
    assert _fetch(lambda request: httpx.Response(200, content=rss([]))) == []


def test_sends_user_agent():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers.get("user-agent", "")
        return httpx.Response(200, content=rss([]))

    _fetch(handler)
    assert seen["ua"].startswith("pin-cushion/")


def test_http_error_status():
    with pytest.raises(FetchError):
        _fetch(lambda request: httpx.Response(503))


def test_unreachable():
    def handler(request):
        raise httpx.ConnectError("no route to host", request=request)

    with pytest.raises(FetchError):
        _fetch(handler)


def test_not_a_feed():
    with pytest.raises(ParseError):
        _fetch(lambda request: httpx.Response(200, content=b"<html><body>Board not found</body></html>"))
