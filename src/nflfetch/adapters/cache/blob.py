"""General-purpose byte cache with memory and disk tiers.

This cache is independent of the response caches used by the fetch
client: keys are arbitrary strings (URLs, "repo/path" pairs, dataset
names) and values are raw bytes. It is not wired into the fetch pipeline.

Pattern clearing differs per tier. Memory entries remember their keys and
are matched with fnmatch. Disk files are named by SHA-1 of the key and
keep no reverse index, so a glob pattern wipes the whole disk tier.
"""

from __future__ import annotations

import fnmatch
import hashlib
import logging
import os
import threading
import time
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from nflfetch.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

_GLOB_METACHARACTERS = frozenset("*?[")


class BlobCacheMode(StrEnum):
    """Which tiers a BlobCache uses."""

    OFF = "off"
    MEMORY = "memory"
    DISK = "disk"
    BOTH = "both"


@dataclass(slots=True)
class _MemoryEntry:
    data: bytes
    expires_at: float


class BlobCache:
    """Byte cache with TTL over a memory tier, a disk tier, or both.

    Disk freshness is file mtime + TTL. With both tiers enabled, disk hits
    are copied into memory.

    Example:
        >>> cache = BlobCache(BlobCacheMode.MEMORY, ttl=60)
        >>> cache.set("players", b"gsis_id,name\\n")
        >>> cache.get("players")
        b'gsis_id,name\\n'
    """

    def __init__(
        self,
        mode: BlobCacheMode = BlobCacheMode.MEMORY,
        ttl: float = 24 * 60 * 60,
        directory: Path | None = None,
        max_memory_entries: int = 0,
    ) -> None:
        """Initialize the cache.

        Args:
            mode: Tiers to use.
            ttl: Seconds an entry stays fresh.
            directory: Disk tier location, required for DISK and BOTH.
            max_memory_entries: Memory capacity; 0 means unbounded. When full,
                the oldest inserted entry is evicted.

        Raises:
            ConfigurationError: If a disk mode has no directory.
        """
        self.mode = BlobCacheMode(mode)
        self.ttl = ttl
        self.directory = Path(directory) if directory is not None else None
        self.max_memory_entries = max_memory_entries
        self._lock = threading.Lock()
        self._memory: dict[str, _MemoryEntry] = {}

        if self._uses_disk:
            if self.directory is None:
                raise ConfigurationError(f"cache directory required for {self.mode} mode")
            self.directory.mkdir(parents=True, exist_ok=True)

    @property
    def _uses_memory(self) -> bool:
        return self.mode in (BlobCacheMode.MEMORY, BlobCacheMode.BOTH)

    @property
    def _uses_disk(self) -> bool:
        return self.mode in (BlobCacheMode.DISK, BlobCacheMode.BOTH)

    def _disk_path(self, key: str) -> Path:
        if self.directory is None:
            raise ConfigurationError(f"cache directory required for {self.mode} mode")
        return self.directory / hashlib.sha1(key.encode("utf-8")).hexdigest()  # noqa: S324

    def _disk_files(self) -> list[Path]:
        if self.directory is None or not self.directory.exists():
            return []
        return [p for p in self.directory.iterdir() if p.is_file()]

    def get(self, key: str) -> bytes | None:
        """Return cached bytes for key, or None if absent or expired."""
        if self.mode is BlobCacheMode.OFF:
            return None

        if self._uses_memory:
            with self._lock:
                entry = self._memory.get(key)
                if entry is not None:
                    if time.time() < entry.expires_at:
                        return entry.data
                    del self._memory[key]

        if self._uses_disk:
            path = self._disk_path(key)
            try:
                age = time.time() - path.stat().st_mtime
            except FileNotFoundError:
                return None
            if age <= self.ttl:
                data = path.read_bytes()
                if self.mode is BlobCacheMode.BOTH:
                    self._remember(key, data)
                return data
            path.unlink(missing_ok=True)
        return None

    def _remember(self, key: str, data: bytes) -> None:
        with self._lock:
            if (
                self.max_memory_entries > 0
                and key not in self._memory
                and len(self._memory) >= self.max_memory_entries
            ):
                oldest = next(iter(self._memory))
                del self._memory[oldest]
            self._memory[key] = _MemoryEntry(bytes(data), time.time() + self.ttl)

    def set(self, key: str, data: bytes) -> None:
        """Store data under key in every enabled tier."""
        if self.mode is BlobCacheMode.OFF:
            return
        if self._uses_memory:
            self._remember(key, data)
        if self._uses_disk:
            path = self._disk_path(key)
            path.write_bytes(data)
            now = time.time()
            os.utime(path, (now, now))

    def delete(self, key: str) -> None:
        """Remove key from every tier."""
        with self._lock:
            self._memory.pop(key, None)
        if self._uses_disk:
            self._disk_path(key).unlink(missing_ok=True)

    def clear(self, pattern: str = "") -> None:
        """Remove entries matching pattern.

        An empty pattern or "*" clears everything. Otherwise memory keys are
        matched with fnmatch; the disk tier is wiped entirely when pattern
        contains glob characters, or loses only the exact key otherwise.
        """
        if pattern in ("", "*"):
            with self._lock:
                self._memory.clear()
            self._wipe_disk()
            return

        with self._lock:
            for key in [k for k in self._memory if fnmatch.fnmatchcase(k, pattern)]:
                del self._memory[key]

        if not self._uses_disk:
            return
        if any(char in pattern for char in _GLOB_METACHARACTERS):
            logger.debug("disk tier has no key index; wiping it for %r", pattern)
            self._wipe_disk()
        else:
            self._disk_path(pattern).unlink(missing_ok=True)

    def _wipe_disk(self) -> None:
        for path in self._disk_files():
            path.unlink(missing_ok=True)

    def cleanup(self) -> int:
        """Remove expired entries from both tiers.

        Returns:
            Number of entries removed.
        """
        removed = 0
        now = time.time()
        with self._lock:
            for key in [k for k, e in self._memory.items() if now >= e.expires_at]:
                del self._memory[key]
                removed += 1
        for path in self._disk_files():
            try:
                expired = now - path.stat().st_mtime > self.ttl
            except FileNotFoundError:
                continue
            if expired:
                path.unlink(missing_ok=True)
                removed += 1
        return removed
