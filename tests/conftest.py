"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
an in-process HTTP transport so fetch tests never touch the network.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, URLs, parsing, and services")
    config.addinivalue_line("markers", "http: Fetch client over a stub transport")
    config.addinivalue_line("markers", "cache: Response and blob cache adapters")
    config.addinivalue_line("markers", "config: Settings and default client")
    config.addinivalue_line("markers", "progress: Rich progress integration")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "property: Property-based tests (hypothesis)")
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow, 4=manual)",
    )


@dataclass
class Reply:
    """A scripted HTTP response."""

    status: int = 200
    body: bytes | io.RawIOBase = b""
    headers: dict[str, str] = field(default_factory=dict)


class StubTransport(BaseAdapter):
    """requests transport adapter that serves scripted replies.

    Each URL holds a queue of replies (or exceptions to raise). The last
    reply in a queue is repeated. Unknown URLs get a 404.
    """

    def __init__(self) -> None:
        super().__init__()
        self.routes: dict[str, list[Reply | Exception]] = {}
        self.requests: list[requests.PreparedRequest] = []
        self.timeouts: list[Any] = []

    def add(
        self,
        url: str,
        body: bytes | io.RawIOBase = b"",
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes.setdefault(url, []).append(Reply(status, body, headers or {}))

    def add_error(self, url: str, error: Exception) -> None:
        self.routes.setdefault(url, []).append(error)

    def urls(self) -> list[str]:
        """URLs requested so far, in order."""
        return [r.url for r in self.requests]

    def send(  # type: ignore[override]
        self,
        request: requests.PreparedRequest,
        stream: bool = False,
        timeout: Any = None,
        verify: Any = True,
        cert: Any = None,
        proxies: Any = None,
    ) -> requests.Response:
        self.requests.append(request)
        self.timeouts.append(timeout)

        queue = self.routes.get(request.url or "")
        if not queue:
            reply: Reply | Exception = Reply(404, b"404: Not Found")
        elif len(queue) > 1:
            reply = queue.pop(0)
        else:
            reply = queue[0]
        if isinstance(reply, Exception):
            raise reply

        body = reply.body
        headers = dict(reply.headers)
        if isinstance(body, bytes):
            headers.setdefault("Content-Length", str(len(body)))
            body = io.BytesIO(body)

        response = requests.Response()
        response.status_code = reply.status
        response.headers = CaseInsensitiveDict(headers)
        response.raw = body
        response.url = request.url or ""
        response.request = request
        response.reason = "stub"
        return response

    def close(self) -> None:
        pass


@pytest.fixture
def transport() -> StubTransport:
    """Scripted transport; register replies before fetching."""
    return StubTransport()


@pytest.fixture
def session(transport: StubTransport) -> requests.Session:
    """requests session whose http(s) traffic goes to the stub transport."""
    s = requests.Session()
    s.mount("https://", transport)
    s.mount("http://", transport)
    return s


class RecordingProgress:
    """ProgressReporter that records every call."""

    def __init__(self) -> None:
        self.started: list[tuple[str, int]] = []
        self.updates: list[tuple[int, int]] = []
        self.finished: list[str] = []

    def start_task(self, name: str, total: int):  # noqa: ANN201
        self.started.append((name, total))
        return lambda downloaded, total: self.updates.append((downloaded, total))

    def finish_task(self, name: str) -> None:
        self.finished.append(name)


@pytest.fixture
def recording_progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    """Keep NFLFETCH_* variables and stray .env files out of every test."""
    import os

    for key in list(os.environ):
        if key.startswith("NFLFETCH_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
    monkeypatch.setenv("NFLFETCH_CACHE_DIR", str(tmp_path_factory.mktemp("cache")))


@pytest.fixture(autouse=True)
def _reset_default_client() -> Any:
    yield
    from nflfetch.defaults import reset_default_client

    reset_default_client()
