"""Process-wide default client and loader.

The convenience functions ``nflfetch.fetch`` and ``nflfetch.load_from_source``
use a FetchClient built lazily from ``load_settings()`` on first use.
Applications that need a specific cache or timeout should either pass an
explicit client around or install one with ``set_default_client`` before
the first call.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from nflfetch.config import build_client, build_loader, load_settings


if TYPE_CHECKING:
    from nflfetch.adapters.http.client import FetchClient
    from nflfetch.core.context import CallContext
    from nflfetch.core.models import FetchResponse
    from nflfetch.core.services import DatasetLoader


_lock = threading.Lock()
_client: FetchClient | None = None
_loader: DatasetLoader | None = None


def get_default_client() -> FetchClient:
    """Return the default client, building it from settings on first use."""
    global _client
    with _lock:
        if _client is None:
            _client = build_client(load_settings())
        return _client


def get_default_loader() -> DatasetLoader:
    """Return a loader bound to the default client."""
    global _loader
    client = get_default_client()
    with _lock:
        if _loader is None or _loader.client is not client:
            _loader = build_loader(load_settings(), client=client)
        return _loader


def set_default_client(client: FetchClient) -> None:
    """Install client as the process-wide default."""
    global _client, _loader
    with _lock:
        _client = client
        _loader = None


def reset_default_client() -> None:
    """Forget the default client so the next use rebuilds it."""
    global _client, _loader
    with _lock:
        if _client is not None:
            _client.close()
        _client = None
        _loader = None


def fetch(url: str, *, ctx: CallContext | None = None) -> FetchResponse:
    """Fetch url with the default client."""
    return get_default_client().fetch(url, ctx=ctx)
