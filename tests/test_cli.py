"""End-to-end tests for the command-line interface."""

import os

import httpx
import pytest
from click.testing import CliRunner

from pincushion import cli as cli_module
from pincushion.config import Config
from pincushion.storage import BoardStore

from .conftest import make_api, pin_description, rss


@pytest.fixture
def env(monkeypatch, tmp_path):
    cfg_path = tmp_path / "config.json"
    monkeypatch.setenv("PIN_CUSHION_CONFIG", str(cfg_path))
    return {"config": cfg_path, "pins": str(tmp_path / "pins")}


@pytest.fixture
def fake_pinterest(monkeypatch):
    def handler(request):
        url = str(request.url)
        if url.endswith(".rss"):
            return httpx.Response(200, content=rss([("2", pin_description("aa/bb/cc/two")), ("1", pin_description("aa/bb/cc/one"))]))
        if url.endswith(".jpg"):
            return httpx.Response(200, content=b"jpeg")
        return httpx.Response(404)

    monkeypatch.setattr(cli_module, "PinterestAPI", lambda cfg=None: make_api(handler))


def _invoke(*args, input=None):
    return CliRunner().invoke(cli_module.cli, list(args), input=input)


def test_commands_need_init(env):
    result = _invoke("list")
    assert result.exit_code != 0
    assert "init" in result.output


def test_init_and_add_with_default_user(env):
    assert _invoke("init", env["pins"], "--default-user", "alice").exit_code == 0
    result = _invoke("add", "cats", "cats-and-more")
    assert result.exit_code == 0, result.output

    cfg = Config.load(env["config"])
    assert cfg.boards == {"alice": ["cats"]}
    board = BoardStore(env["pins"]).load("alice", "cats")
    assert board.feed_url == "https://www.pinterest.com/alice/cats-and-more.rss"
    assert board.last_item_id == ""


def test_add_with_explicit_user(env):
    _invoke("init", env["pins"])
    result = _invoke("add", "--user", "bob", "dogs", "https://www.pinterest.de/bob/dogs.rss")
    assert result.exit_code == 0, result.output
    assert BoardStore(env["pins"]).load("bob", "dogs").feed_url == "https://www.pinterest.de/bob/dogs.rss"


def test_add_without_any_user_fails(env):
    _invoke("init", env["pins"])
    result = _invoke("add", "dogs", "dogs")
    assert result.exit_code != 0
    assert Config.load(env["config"]).boards == {}


def test_add_duplicate_fails(env):
    _invoke("init", env["pins"], "--default-user", "alice")
    _invoke("add", "cats", "cats")
    assert _invoke("add", "cats", "cats").exit_code != 0


def test_list(env):
    _invoke("init", env["pins"], "--default-user", "alice")
    _invoke("add", "cats", "cats")
    result = _invoke("list")
    assert result.exit_code == 0
    assert "alice/cats" in result.output


def test_check_downloads_new_pins(env, fake_pinterest):
    _invoke("init", env["pins"], "--default-user", "alice")
    _invoke("add", "cats", "cats")
    result = _invoke("check")
    assert result.exit_code == 0, result.output
    board_dir = os.path.join(env["pins"], "alice", "cats")
    assert sorted(f for f in os.listdir(board_dir) if not f.startswith(".")) == ["one.jpg", "two.jpg"]
    assert BoardStore(env["pins"]).load("alice", "cats").last_item_id == "2"


def test_start_runs_until_stop(env, fake_pinterest):
    _invoke("init", env["pins"], "--default-user", "alice")
    _invoke("add", "cats", "cats")
    result = _invoke("start", input="hello\nstop\n")
    assert result.exit_code == 0, result.output
    assert 'type "stop"' in result.output
    assert "Stopped" in result.output
