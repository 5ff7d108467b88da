"""File-based response cache implementing ResponseCachePort."""

from __future__ import annotations

import contextlib
import hashlib
import io
import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from nflfetch.core.exceptions import CacheCorruptError, CacheMissError
from nflfetch.core.models import ResponseMetadata, Validators


if TYPE_CHECKING:
    from typing import BinaryIO


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def cache_key(url: str) -> str:
    """SHA-1 hex digest of the exact request URL."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()  # noqa: S324


def _aware(value: datetime) -> datetime:
    # Offset-less timestamps are taken as UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _decode_sidecar(data: Any) -> tuple[ResponseMetadata, datetime]:
    """Turn a sidecar JSON object into (metadata, saved_at).

    Raises:
        TypeError, KeyError, ValueError: If a field is missing or malformed.
    """
    if not isinstance(data, dict):
        raise TypeError(f"sidecar must be an object, got {type(data).__name__}")
    saved_at = _aware(datetime.fromisoformat(data["saved_at"]))

    etag = data.get("etag") or None
    if etag is not None and not isinstance(etag, str):
        raise TypeError(f"etag must be a string, got {etag!r}")
    last_modified = None
    if raw := data.get("last_modified"):
        last_modified = _aware(datetime.fromisoformat(raw))
    size = data.get("size")
    if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
        raise TypeError(f"size must be an integer, got {size!r}")

    metadata = ResponseMetadata(etag=etag, last_modified=last_modified, content_length=size)
    return metadata, saved_at


class FilesystemResponseCache:
    """Response cache on disk with JSON metadata sidecars.

    Each URL maps to two files named after the SHA-1 of the URL:
    ``<hash>.data`` holds the body and ``<hash>.json`` holds the etag,
    last_modified, size and saved_at fields. Freshness is judged from
    saved_at, not file mtime.

    There is no in-process locking; concurrent writers of the same URL
    race at the file level and the last writer wins.

    Attributes:
        cache_dir: Directory where cached files are stored.
        ttl: TTL in seconds. None or <= 0 disables expiry.
    """

    def __init__(
        self,
        cache_dir: Path,
        ttl: float | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the cache with a directory path.

        Args:
            cache_dir: Directory where cached files will be stored.
            ttl: Seconds an entry stays valid. None or <= 0 disables expiry.
            now: Clock returning aware UTC datetimes, replaceable in tests.
        """
        self.cache_dir = Path(cache_dir)
        self.ttl = ttl
        self._now = now

    def _data_path(self, url: str) -> Path:
        """Get the path for a cached body."""
        return self.cache_dir / f"{cache_key(url)}.data"

    def _meta_path(self, url: str) -> Path:
        """Get the path for a metadata sidecar file."""
        return self.cache_dir / f"{cache_key(url)}.json"

    def _read_sidecar(self, url: str) -> tuple[ResponseMetadata, datetime] | None:
        """Load the sidecar for url as (metadata, saved_at).

        Returns None when the sidecar does not exist.

        Raises:
            CacheCorruptError: If the sidecar exists but cannot be decoded.
        """
        meta_path = self._meta_path(url)
        try:
            with meta_path.open() as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CacheCorruptError(
                f"Cache metadata corrupt for '{url}'",
                key=url,
                path=meta_path,
                cause=e,
            ) from e
        try:
            return _decode_sidecar(data)
        except (TypeError, KeyError, ValueError) as e:
            raise CacheCorruptError(
                f"Cache metadata incomplete for '{url}'",
                key=url,
                path=meta_path,
                cause=e,
            ) from e

    def _is_expired(self, saved_at: datetime) -> bool:
        if not self.ttl or self.ttl <= 0:
            return False
        return self._now() - saved_at > timedelta(seconds=self.ttl)

    def invalidate(self, url: str) -> None:
        """Remove the body and sidecar for url."""
        self._data_path(url).unlink(missing_ok=True)
        self._meta_path(url).unlink(missing_ok=True)

    def validators(self, url: str) -> Validators | None:
        """Return validators for url, or None if absent, expired or unreadable.

        Expired entries are deleted here.
        """
        try:
            sidecar = self._read_sidecar(url)
        except CacheCorruptError as e:
            logger.warning("%s; ignoring cached copy", e)
            return None
        if sidecar is None or not self._data_path(url).exists():
            return None

        metadata, saved_at = sidecar
        if self._is_expired(saved_at):
            logger.debug("cache entry for %s expired (saved %s)", url, saved_at)
            self.invalidate(url)
            return None
        return metadata.validators

    def store_stream(
        self, url: str, metadata: ResponseMetadata, body: BinaryIO
    ) -> BinaryIO:
        """Read body fully, write body and sidecar, and return a fresh reader."""
        try:
            payload = body.read()
        finally:
            body.close()

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._data_path(url).write_bytes(payload)

        sidecar = {
            "etag": metadata.etag,
            "last_modified": (
                metadata.last_modified.isoformat() if metadata.last_modified else None
            ),
            "size": len(payload),
            "saved_at": self._now().isoformat(),
        }
        with self._meta_path(url).open("w") as f:
            json.dump(sidecar, f)

        logger.debug("cached %d bytes for %s", len(payload), url)
        return io.BytesIO(payload)

    def open(self, url: str) -> tuple[BinaryIO, ResponseMetadata]:
        """Return a stored body and metadata.

        Raises:
            CacheMissError: If no body is stored for url.
            CacheCorruptError: If the sidecar is unreadable.
        """
        data_path = self._data_path(url)
        try:
            payload = data_path.read_bytes()
        except FileNotFoundError:
            raise CacheMissError(url) from None

        sidecar = self._read_sidecar(url)
        metadata = sidecar[0] if sidecar is not None else ResponseMetadata()
        return io.BytesIO(payload), metadata

    def _sidecars(self) -> list[Path]:
        if not self.cache_dir.exists():
            return []
        return sorted(self.cache_dir.glob("*.json"))

    def clear(self) -> int:
        """Remove every cached entry.

        Returns:
            Number of entries removed.
        """
        count = 0
        for meta_path in self._sidecars():
            meta_path.with_suffix(".data").unlink(missing_ok=True)
            meta_path.unlink(missing_ok=True)
            count += 1
        # Bodies whose sidecar never got written.
        if self.cache_dir.exists():
            for data_path in self.cache_dir.glob("*.data"):
                data_path.unlink(missing_ok=True)
        return count

    def cleanup(self) -> int:
        """Remove expired and unreadable entries.

        Returns:
            Number of entries removed.
        """
        count = 0
        for meta_path in self._sidecars():
            try:
                with meta_path.open() as f:
                    _, saved_at = _decode_sidecar(json.load(f))
            except (OSError, ValueError, KeyError, TypeError):
                expired = True
            else:
                expired = self._is_expired(saved_at)
            if expired:
                meta_path.with_suffix(".data").unlink(missing_ok=True)
                meta_path.unlink(missing_ok=True)
                count += 1
        return count

    def statistics(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with 'entries', 'total_size' (bytes) and 'file_count'.
        """
        total_size = 0
        file_count = 0

        if not self.cache_dir.exists():
            return {"entries": 0, "total_size": 0, "file_count": 0}

        for file_path in self.cache_dir.iterdir():
            if file_path.is_file():
                with contextlib.suppress(OSError):
                    total_size += file_path.stat().st_size
                    file_count += 1

        return {
            "entries": len(self._sidecars()),
            "total_size": total_size,
            "file_count": file_count,
        }
