"""Unit tests for BlobCache."""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.cache
class TestModes:
    """Tests for tier selection."""

    def test_off_stores_nothing(self) -> None:
        """OFF mode ignores writes."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.OFF)
        cache.set("k", b"v")
        assert cache.get("k") is None

    def test_memory_round_trip(self) -> None:
        """MEMORY mode returns what was set."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.MEMORY)
        cache.set("k", b"v")
        assert cache.get("k") == b"v"

    def test_disk_requires_directory(self) -> None:
        """DISK and BOTH modes need a directory."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode
        from nflfetch.core.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            BlobCache(BlobCacheMode.DISK)

    def test_directory_removed_after_construction(self, tmp_path: Path) -> None:
        """Disk access without a directory raises ConfigurationError, not AssertionError."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode
        from nflfetch.core.exceptions import ConfigurationError

        cache = BlobCache(BlobCacheMode.DISK, directory=tmp_path)
        cache.directory = None

        with pytest.raises(ConfigurationError, match="disk"):
            cache.set("k", b"v")
        with pytest.raises(ConfigurationError):
            cache.get("k")

    def test_disk_round_trip(self, tmp_path: Path) -> None:
        """DISK mode persists across instances."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        BlobCache(BlobCacheMode.DISK, directory=tmp_path).set("k", b"v")
        assert BlobCache(BlobCacheMode.DISK, directory=tmp_path).get("k") == b"v"

    def test_both_hydrates_memory_from_disk(self, tmp_path: Path) -> None:
        """A disk hit in BOTH mode is served from memory afterwards."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        BlobCache(BlobCacheMode.DISK, directory=tmp_path).set("k", b"v")
        cache = BlobCache(BlobCacheMode.BOTH, directory=tmp_path)

        assert cache.get("k") == b"v"
        for path in tmp_path.iterdir():
            path.unlink()
        assert cache.get("k") == b"v"


@pytest.mark.cache
class TestExpiry:
    """Tests for TTL handling."""

    def test_stale_disk_file_is_miss(self, tmp_path: Path) -> None:
        """Files older than TTL by mtime are misses and are removed."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.DISK, ttl=60, directory=tmp_path)
        cache.set("k", b"v")
        (path,) = tmp_path.iterdir()
        old = time.time() - 120
        os.utime(path, (old, old))

        assert cache.get("k") is None
        assert not path.exists()

    def test_cleanup_counts_both_tiers(self, tmp_path: Path) -> None:
        """cleanup() removes expired memory entries and stale files."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.BOTH, ttl=60, directory=tmp_path)
        cache.set("k", b"v")
        cache._memory["k"].expires_at = time.time() - 1
        (path,) = tmp_path.iterdir()
        old = time.time() - 120
        os.utime(path, (old, old))

        assert cache.cleanup() == 2


@pytest.mark.cache
class TestEviction:
    """Tests for memory capacity."""

    def test_oldest_inserted_entry_evicted(self) -> None:
        """At capacity the first-inserted key is dropped."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.MEMORY, max_memory_entries=2)
        cache.set("a", b"1")
        cache.set("b", b"2")
        cache.set("c", b"3")

        assert cache.get("a") is None
        assert cache.get("b") == b"2"
        assert cache.get("c") == b"3"


@pytest.mark.cache
class TestClear:
    """Tests for delete() and clear(pattern)."""

    def test_delete(self, tmp_path: Path) -> None:
        """delete() removes a key from both tiers."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.BOTH, directory=tmp_path)
        cache.set("k", b"v")
        cache.delete("k")

        assert cache.get("k") is None
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.parametrize("pattern", ["", "*"])
    def test_clear_everything(self, tmp_path: Path, pattern: str) -> None:
        """An empty pattern or '*' wipes both tiers."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.BOTH, directory=tmp_path)
        cache.set("a", b"1")
        cache.set("b", b"2")
        cache.clear(pattern)

        assert cache.get("a") is None
        assert list(tmp_path.iterdir()) == []

    def test_glob_matches_memory_keys(self) -> None:
        """Patterns are matched against memory keys."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.MEMORY)
        cache.set("snap_counts_2023", b"1")
        cache.set("snap_counts_2024", b"2")
        cache.set("players", b"3")
        cache.clear("snap_counts_*")

        assert cache.get("snap_counts_2023") is None
        assert cache.get("snap_counts_2024") is None
        assert cache.get("players") == b"3"

    def test_glob_wipes_disk_tier(self, tmp_path: Path) -> None:
        """Disk files carry no key, so a glob pattern clears the disk tier."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.DISK, directory=tmp_path)
        cache.set("snap_counts_2024", b"1")
        cache.set("players", b"2")
        cache.clear("snap_*")

        assert cache.get("players") is None

    def test_exact_key_on_disk(self, tmp_path: Path) -> None:
        """A pattern without glob characters removes only that key's file."""
        from nflfetch.adapters.cache import BlobCache, BlobCacheMode

        cache = BlobCache(BlobCacheMode.DISK, directory=tmp_path)
        cache.set("a", b"1")
        cache.set("b", b"2")
        cache.clear("a")

        assert cache.get("a") is None
        assert cache.get("b") == b"2"
