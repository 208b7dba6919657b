"""Shared test fixtures for vksdk.

Provides isolated config directories, quiet output, a CLI runner, and
helpers that build gateways over :class:`httpx.MockTransport` with a pinned
clock and nonce so signatures are reproducible.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from urllib.parse import parse_qsl, urlsplit

import httpx
import pytest

from vksdk.client import AsyncVK, VK
from vksdk.output import OutputFormat, OutputManager, reset_output, set_output
from vksdk.transport import AsyncHttpxTransport, HttpxTransport

APP_ID = "42"
API_SECRET = "s3cr3t"
FIXED_TIMESTAMP = 1700000000
FIXED_NONCE = 4242

Handler = Callable[[httpx.Request], httpx.Response]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    CliRunner swaps sys.stdout/sys.stderr; a manager created during one
    test must not leak its stale stream references into the next.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME / XDG_DATA_HOME into tmp_path.

    Also forces the XDG code path and clears VKSDK_* variables so tests
    never touch real user config.
    """
    monkeypatch.setattr("vksdk.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["VKSDK_PROFILE", "VKSDK_API_VERSION"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Network helpers
# ---------------------------------------------------------------------------


def query_of(request: httpx.Request) -> dict[str, str]:
    """Decode a request's query string into a flat dict."""
    return dict(parse_qsl(urlsplit(str(request.url)).query, keep_blank_values=True))


def form_of(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body into a flat dict."""
    return dict(parse_qsl(request.content.decode("utf-8"), keep_blank_values=True))


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


class Recorder:
    """An httpx handler that records requests and answers from a queue or a function."""

    def __init__(self, responder: Any = None) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self._responder):
            return self._responder(request)
        if isinstance(self._responder, list):
            return self._responder.pop(0)
        if isinstance(self._responder, httpx.Response):
            return self._responder
        return httpx.Response(200, content=json.dumps(self._responder or {}).encode())

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_vk(handler: Handler, **kwargs: Any) -> VK:
    """A :class:`VK` over a mock transport with a pinned clock and nonce."""
    options: dict[str, Any] = {
        "clock": lambda: FIXED_TIMESTAMP,
        "nonce": lambda: FIXED_NONCE,
    }
    options.update(kwargs)
    transport = HttpxTransport(transport=httpx.MockTransport(handler))
    return VK(APP_ID, API_SECRET, transport=transport, **options)


def make_async_vk(handler: Handler, **kwargs: Any) -> AsyncVK:
    """An :class:`AsyncVK` over a mock transport with a pinned clock and nonce."""
    options: dict[str, Any] = {
        "clock": lambda: FIXED_TIMESTAMP,
        "nonce": lambda: FIXED_NONCE,
    }
    options.update(kwargs)
    transport = AsyncHttpxTransport(transport=httpx.MockTransport(handler))
    return AsyncVK(APP_ID, API_SECRET, transport=transport, **options)


@pytest.fixture
def mock_network(monkeypatch: pytest.MonkeyPatch) -> Callable[[Any], Recorder]:
    """Route every default :class:`HttpxTransport` through a :class:`Recorder`.

    Usage::

        recorder = mock_network({"response": {}})
    """

    def _install(responder: Any = None) -> Recorder:
        recorder = Recorder(responder)
        original = HttpxTransport

        def _factory(**kwargs: Any) -> HttpxTransport:
            return original(transport=httpx.MockTransport(recorder), **kwargs)

        monkeypatch.setattr("vksdk.client.sync_client.HttpxTransport", _factory)
        return recorder

    return _install


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
