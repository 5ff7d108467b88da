"""In-memory response cache implementing ResponseCachePort."""

from __future__ import annotations

import io
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nflfetch.core.exceptions import CacheMissError


if TYPE_CHECKING:
    from typing import BinaryIO

    from nflfetch.core.models import ResponseMetadata, Validators


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Entry:
    body: bytes
    metadata: ResponseMetadata
    stored_at: float


class MemoryResponseCache:
    """Process-local response cache with a TTL.

    Entries live in a dict guarded by a lock, so one instance can be shared
    by threads. Bodies are stored as immutable bytes and every read gets its
    own stream, so callers cannot alter what is cached. There is no size
    bound; the cache lives as long as the process.

    Attributes:
        ttl: Seconds an entry stays valid. None or <= 0 disables expiry.
    """

    def __init__(
        self,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty cache.

        Args:
            ttl: Seconds an entry stays valid. None or <= 0 disables expiry.
            clock: Monotonic time source, replaceable in tests.
        """
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def _expired(self, entry: _Entry) -> bool:
        if not self.ttl or self.ttl <= 0:
            return False
        return self._clock() - entry.stored_at > self.ttl

    def _live_entry(self, url: str) -> _Entry | None:
        """Return the entry for url, evicting it if expired. Caller holds the lock."""
        entry = self._entries.get(url)
        if entry is None:
            return None
        if self._expired(entry):
            del self._entries[url]
            logger.debug("evicted expired entry for %s", url)
            return None
        return entry

    def validators(self, url: str) -> Validators | None:
        """Return validators for url, or None if absent or expired."""
        with self._lock:
            entry = self._live_entry(url)
        if entry is None:
            return None
        return entry.metadata.validators

    def store_stream(
        self, url: str, metadata: ResponseMetadata, body: BinaryIO
    ) -> BinaryIO:
        """Read body fully, keep a copy, and return a fresh reader."""
        try:
            data = bytes(body.read())
        finally:
            body.close()

        entry = _Entry(body=data, metadata=metadata, stored_at=self._clock())
        with self._lock:
            self._entries[url] = entry
        return io.BytesIO(data)

    def open(self, url: str) -> tuple[BinaryIO, ResponseMetadata]:
        """Return a stored body and metadata.

        Raises:
            CacheMissError: If url is not cached or its entry expired.
        """
        with self._lock:
            entry = self._live_entry(url)
        if entry is None:
            raise CacheMissError(url)
        return io.BytesIO(entry.body), entry.metadata

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        """Evict all expired entries.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            expired = [url for url, e in self._entries.items() if self._expired(e)]
            for url in expired:
                del self._entries[url]
        return len(expired)

    def __contains__(self, url: object) -> bool:
        """Report whether url has an entry, expired or not."""
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
