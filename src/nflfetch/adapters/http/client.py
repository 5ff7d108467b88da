"""Conditional-GET fetch client using requests."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import TYPE_CHECKING

import requests

from nflfetch.core.context import CallContext
from nflfetch.core.exceptions import (
    MAX_BODY_PREVIEW,
    ConfigurationError,
    FetchTimeoutError,
    HTTPNotFoundError,
    HTTPStatusError,
    NetworkError,
    TransientError,
)
from nflfetch.core.models import FetchResponse, ResponseMetadata
from nflfetch.core.ports import NullProgressReporter


if TYPE_CHECKING:
    from typing import BinaryIO

    from nflfetch.core.ports import ProgressCallback, ProgressReporter, ResponseCachePort


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "nflfetch (+https://github.com/nflverse)"
ACCEPT = "application/octet-stream, text/csv, */*"

# Chunk size for streaming downloads (64KB)
_CHUNK_SIZE = 64 * 1024


def format_http_date(value: datetime) -> str:
    """Format a datetime as an RFC 7231 HTTP-date (always GMT)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC), usegmt=True)


def parse_http_date(value: str) -> datetime | None:
    """Parse an HTTP-date header, returning None when malformed."""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_response_metadata(response: requests.Response) -> ResponseMetadata:
    """Extract ETag, Last-Modified and Content-Length from a response.

    Weak ETags (W/"...") are kept as sent. Unparseable dates or lengths are
    dropped rather than treated as errors.
    """
    etag = response.headers.get("ETag", "").strip() or None

    last_modified = None
    if lm := response.headers.get("Last-Modified"):
        last_modified = parse_http_date(lm)

    content_length = None
    if cl := response.headers.get("Content-Length"):
        try:
            content_length = int(cl)
        except ValueError:
            content_length = None
        else:
            if content_length < 0:
                content_length = None

    return ResponseMetadata(
        etag=etag, last_modified=last_modified, content_length=content_length
    )


def _translate_request_error(exc: Exception, url: str) -> TransientError:
    """Map a requests failure onto the transient error taxonomy."""
    if isinstance(exc, requests.Timeout):
        return FetchTimeoutError(f"timed out fetching {url}: {exc}", url=url, cause=exc)
    if isinstance(exc, requests.ConnectionError) and "timed out" in str(exc).lower():
        # iter_content reports read timeouts as ConnectionError.
        return FetchTimeoutError(f"timed out fetching {url}: {exc}", url=url, cause=exc)
    return NetworkError(f"failed to fetch {url}: {exc}", url=url, cause=exc)


class _ResponseStream(io.RawIOBase):
    """Readable stream over a streaming response body.

    Checks the call context before pulling each chunk so cancellation and
    deadlines interrupt long transfers, and reports bytes read to a
    progress callback. Closing the stream releases the connection.
    """

    def __init__(
        self,
        response: requests.Response,
        url: str,
        ctx: CallContext,
        progress: ProgressReporter,
    ) -> None:
        super().__init__()
        self._response = response
        self._url = url
        self._ctx = ctx
        self._chunks: Iterator[bytes] = response.iter_content(chunk_size=_CHUNK_SIZE)
        self._pending = b""
        self._bytes_read = 0
        self._progress = progress
        self._total = parse_response_metadata(response).content_length or 0
        self._callback: ProgressCallback | None = progress.start_task(url, self._total)

    def readable(self) -> bool:
        return True

    def _next_chunk(self) -> bytes:
        self._ctx.check(self._url)
        try:
            chunk = next(self._chunks, b"")
        except requests.RequestException as e:
            raise _translate_request_error(e, self._url) from e
        if chunk:
            self._bytes_read += len(chunk)
            if self._callback is not None:
                self._callback(self._bytes_read, self._total)
        else:
            self._finish()
        return chunk

    def _finish(self) -> None:
        if self._callback is not None:
            self._progress.finish_task(self._url)
            self._callback = None

    def readinto(self, buffer: memoryview) -> int:  # type: ignore[override]
        if not self._pending:
            self._pending = self._next_chunk()
            if not self._pending:
                return 0
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def close(self) -> None:
        if not self.closed:
            self._finish()
            self._response.close()
        super().close()


class FetchClient:
    """Issues GET requests with conditional headers and an optional cache.

    Attributes:
        cache: Response cache consulted for validators and fed with bodies.
        user_agent: User-Agent header sent with every request.
        timeout: Default per-call deadline in seconds.

    Example:
        >>> client = FetchClient(cache=MemoryResponseCache(ttl=3600))  # doctest: +SKIP
        >>> with client.fetch(url) as response:  # doctest: +SKIP
        ...     data = response.read()
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        cache: ResponseCachePort | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = DEFAULT_TIMEOUT,
        progress: ProgressReporter | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            session: Optional requests session. If not provided, creates one.
            cache: Optional response cache; None disables caching.
            user_agent: User-Agent header value.
            timeout: Default deadline for calls made without a CallContext.
            progress: Optional progress reporter for body downloads.
        """
        self._session = session or requests.Session()
        self.cache = cache
        self.user_agent = user_agent
        self.timeout = timeout
        self._progress: ProgressReporter = progress or NullProgressReporter()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def _headers(self, url: str) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent, "Accept": ACCEPT}
        if self.cache is None:
            return headers
        validators = self.cache.validators(url)
        if validators:
            if validators.etag:
                headers["If-None-Match"] = validators.etag
            if validators.last_modified is not None:
                headers["If-Modified-Since"] = format_http_date(validators.last_modified)
        return headers

    def _socket_timeout(self, ctx: CallContext) -> float | None:
        remaining = ctx.remaining()
        if remaining is None:
            return self.timeout
        if self.timeout is None:
            return remaining
        return min(remaining, self.timeout)

    def fetch(
        self,
        url: str,
        *,
        ctx: CallContext | None = None,
        progress: ProgressReporter | None = None,
    ) -> FetchResponse:
        """Fetch url, revalidating a cached copy when one is available.

        Args:
            url: Absolute URL to GET.
            ctx: Deadline and cancellation for this call. Defaults to a
                context with the client's timeout.
            progress: Overrides the client's progress reporter for this call.

        Returns:
            FetchResponse whose body must be read and closed by the caller.

        Raises:
            ConfigurationError: On 304 Not Modified with no cache attached.
            HTTPNotFoundError: On 404.
            HTTPStatusError: On any other status besides 200 and 304.
            FetchTimeoutError: If the deadline elapses.
            FetchCancelledError: If ctx is cancelled.
            NetworkError: On connection failures.
        """
        if ctx is None:
            ctx = CallContext(timeout=self.timeout)
        ctx.check(url)

        headers = self._headers(url)
        conditional = "If-None-Match" in headers or "If-Modified-Since" in headers
        logger.debug("GET %s%s", url, " (conditional)" if conditional else "")

        socket_timeout = self._socket_timeout(ctx)
        if socket_timeout is not None and socket_timeout <= 0:
            # Deadline reached while reading the cache; urllib3 rejects a zero timeout.
            raise FetchTimeoutError(f"deadline of {ctx.timeout}s exceeded: {url}", url=url)

        try:
            response = self._session.get(
                url,
                headers=headers,
                stream=True,
                timeout=socket_timeout,
            )
        except requests.RequestException as e:
            raise _translate_request_error(e, url) from e

        try:
            ctx.check(url)
        except TransientError:
            response.close()
            raise

        status = response.status_code
        if status == requests.codes.ok:
            return self._handle_ok(url, response, ctx, progress or self._progress)
        if status == requests.codes.not_modified:
            response.close()
            return self._handle_not_modified(url)

        preview = self._body_preview(response, url)
        logger.debug("GET %s -> %d", url, status)
        if status == requests.codes.not_found:
            raise HTTPNotFoundError(url, preview)
        raise HTTPStatusError(url, status, preview)

    def _handle_ok(
        self,
        url: str,
        response: requests.Response,
        ctx: CallContext,
        progress: ProgressReporter,
    ) -> FetchResponse:
        metadata = parse_response_metadata(response)
        stream: BinaryIO = _ResponseStream(response, url, ctx, progress)  # type: ignore[assignment]
        if self.cache is None:
            return FetchResponse(url=url, body=stream, metadata=metadata)
        body = self.cache.store_stream(url, metadata, stream)
        logger.info("fetched %s", url)
        return FetchResponse(url=url, body=body, metadata=metadata)

    def _handle_not_modified(self, url: str) -> FetchResponse:
        if self.cache is None:
            raise ConfigurationError(
                f"received 304 Not Modified for {url} but no cache is attached"
            )
        body, metadata = self.cache.open(url)
        logger.info("not modified, serving cached copy of %s", url)
        return FetchResponse(url=url, body=body, metadata=metadata, from_cache=True)

    @staticmethod
    def _body_preview(response: requests.Response, url: str) -> str:
        """Read at most MAX_BODY_PREVIEW bytes of an error body."""
        try:
            raw = b""
            for chunk in response.iter_content(chunk_size=MAX_BODY_PREVIEW):
                raw += chunk
                if len(raw) >= MAX_BODY_PREVIEW:
                    break
        except requests.RequestException as e:
            logger.debug("could not read error body for %s: %s", url, e)
            raw = b""
        finally:
            response.close()
        return raw[:MAX_BODY_PREVIEW].decode("utf-8", errors="replace").strip()
