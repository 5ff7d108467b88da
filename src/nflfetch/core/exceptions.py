"""Domain exceptions for nflfetch.

All library errors inherit from NflfetchError, allowing users to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error.

The hierarchy mirrors how callers are expected to react:

- ConfigurationError: fix the setup, retrying will not help.
- NotFoundError: the resource is not published; the loader widens a
  season-scoped request to the base file on this kind.
- TransientError: network failure, timeout or cancellation; retry policy
  belongs to the caller.
- FormatError: the payload cannot be parsed.
- CacheError: local cache bookkeeping failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


# Upper bound on the response body kept for diagnostics.
MAX_BODY_PREVIEW = 8 * 1024


class NflfetchError(Exception):
    """Base class for all nflfetch exceptions.

    Catch this to handle any error from the library.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class ConfigurationError(NflfetchError):
    """Raised for configuration problems (missing cache, bad settings)."""

    pass


class NotFoundError(NflfetchError):
    """Raised when a requested resource does not exist upstream."""

    @property
    def recovery_hint(self) -> str:
        """Suggest checking the published asset name."""
        return "Check that the repository publishes this file (and season)"


class HTTPStatusError(NflfetchError):
    """Raised for any unexpected HTTP status.

    Attributes:
        url: The requested URL.
        status_code: HTTP status code returned by the server.
        body: Bounded preview of the response body.
    """

    def __init__(self, url: str, status_code: int, body: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.body = body[:MAX_BODY_PREVIEW]
        message = f"http error: {status_code} for {url}"
        if self.body:
            message = f"{message}: {self.body}"
        super().__init__(message)

    @property
    def recovery_hint(self) -> str | None:
        """Suggest waiting on server errors."""
        if self.status_code >= 500:
            return "The server failed; try again later"
        return None


class HTTPNotFoundError(HTTPStatusError, NotFoundError):
    """Raised when the server answers 404 Not Found."""

    def __init__(self, url: str, body: str = "") -> None:
        super().__init__(url, 404, body)

    @property
    def recovery_hint(self) -> str:
        """Suggest verifying the URL."""
        return f"Verify the file exists: {self.url}"


class TransientError(NflfetchError):
    """Base class for I/O failures that may succeed when retried.

    Attributes:
        url: The URL being fetched when the failure occurred.
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, url: str, cause: Exception | None = None) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest retrying."""
        return "Retry the request; nflfetch does not retry on its own"


class NetworkError(TransientError):
    """Raised when the connection fails or the transfer is interrupted."""

    pass


class FetchTimeoutError(TransientError):
    """Raised when the call deadline elapses before the fetch completes."""

    @property
    def recovery_hint(self) -> str:
        """Suggest a longer timeout."""
        return "Increase the timeout (NFLFETCH_TIMEOUT or CallContext(timeout=...))"


class FetchCancelledError(TransientError):
    """Raised when the caller cancels an in-flight fetch."""

    pass


class FormatError(NflfetchError):
    """Raised when a payload cannot be parsed.

    Attributes:
        source_url: URL the payload came from (may be empty).
    """

    def __init__(self, message: str, source_url: str = "") -> None:
        self.source_url = source_url
        super().__init__(message)


class UnsupportedFormatError(FormatError):
    """Raised for formats nflfetch recognizes but cannot decode yet."""

    @property
    def recovery_hint(self) -> str:
        """Suggest requesting the CSV asset."""
        return "Request the .csv variant of this dataset"


class CacheError(NflfetchError):
    """Base class for cache-related errors."""

    pass


class CacheMissError(CacheError):
    """Raised when a cache entry is absent or expired.

    Attributes:
        key: The cache key (request URL) that was looked up.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No cached response for '{key}'")


class CacheCorruptError(CacheError):
    """Raised when cache metadata is corrupt or unreadable.

    Attributes:
        key: The cache key for the corrupt entry.
        path: The path to the corrupt file.
    """

    def __init__(
        self,
        message: str,
        key: str,
        path: Path,
        cause: Exception | None = None,
    ) -> None:
        self.key = key
        self.path = path
        self.cause = cause
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest deleting the corrupt cache entry."""
        return f"Delete {self.path.with_suffix('.*')} and re-fetch"
