"""Shared fixtures: a small view root and a session factory."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from burrow.app import DevServer
from burrow.config import ServerConfig


@pytest.fixture
def view_root(tmp_path: Path) -> Path:
    """A view root with pages, mock data, API data and plain directories."""
    root = tmp_path / "views"
    root.mkdir()

    (root / "index.html").write_text("<html><body><h1>{{ title | default('') }}</h1></body></html>")
    (root / "about.html").write_text("<p>About {{ name | default('') }}</p>")
    (root / "notes.txt").write_text("plain notes")

    user = root / "user"
    user.mkdir()
    (user / "detail.html").write_text("<p>{{ name }} #{{ id }}</p>")

    mock = root / "mock"
    mock.mkdir()
    (mock / "index.json").write_text(json.dumps({"title": "Home"}))
    (mock / "user").mkdir()
    (mock / "user" / "detail.json").write_text(json.dumps({"name": "Fox", "id": "0"}))

    api = root / "api"
    api.mkdir()
    (api / "users.json").write_text(json.dumps([{"id": 1, "name": "Fox"}]))

    docs = root / "docs"
    docs.mkdir()
    (docs / "b.txt").write_text("b")
    (docs / "a.txt").write_text("a")
    (docs / "zeta").mkdir()
    (docs / "alpha").mkdir()

    return root


def page_data(template: str) -> str:
    """Maps ``user/detail.html`` to ``mock/user/detail.json``."""
    return "mock/" + template.rsplit(".", 1)[0] + ".json"


def api_data(path: str) -> str:
    """Maps ``/api/users`` to ``api/users.json``."""
    return path.strip("/") + ".json"


@pytest.fixture
def make_server(view_root: Path) -> Callable[..., DevServer]:
    """Build a session over ``view_root``; keyword arguments override config."""

    def factory(**overrides: Any) -> DevServer:
        options: dict[str, Any] = {
            "view_root": view_root,
            "notify": False,
            "sync_data_match": page_data,
            "async_data_match": api_data,
        }
        options.update(overrides)
        return DevServer(ServerConfig(**options))

    return factory


@pytest.fixture(autouse=True)
def no_network_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the post-listen banner deterministic."""
    monkeypatch.setattr("burrow.server.system.local_ip", lambda: "")
