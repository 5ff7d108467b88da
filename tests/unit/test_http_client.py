"""Unit tests for FetchClient over a stub transport."""

from __future__ import annotations

import io
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
import requests


if TYPE_CHECKING:
    from tests.conftest import RecordingProgress, StubTransport


URL = "https://raw.githubusercontent.com/nflverse/nflverse-data/master/data/injuries/injuries_2024.csv"
BODY = b"season,week,team\n2024,1,KC\n"
HEADERS = {"ETag": '"abc123"', "Last-Modified": "Tue, 02 Jan 2024 03:04:05 GMT"}


class _BrokenBody(io.RawIOBase):
    """Body that yields some bytes, then fails like a dropped connection."""

    def __init__(self) -> None:
        self._sent = False

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if not self._sent:
            self._sent = True
            return b"season,week\n"
        raise requests.exceptions.ChunkedEncodingError("connection broken")


@pytest.mark.http
@pytest.mark.tier(1)
class TestFetchOk:
    """Tests for 200 responses."""

    def test_returns_body_and_metadata_without_cache(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """A 200 without a cache returns the streamed body and parsed metadata."""
        from nflfetch.adapters.http import FetchClient

        transport.add(URL, BODY, headers=HEADERS)
        client = FetchClient(session=session)

        with client.fetch(URL) as response:
            assert response.read() == BODY

        assert response.from_cache is False
        assert response.metadata.etag == '"abc123"'
        assert response.metadata.last_modified == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert response.metadata.content_length == len(BODY)

    def test_sends_user_agent_and_accept(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """Every request carries User-Agent and Accept and no validators when uncached."""
        from nflfetch.adapters.http import FetchClient

        transport.add(URL, BODY)
        client = FetchClient(session=session, user_agent="tests/1.0")
        client.fetch(URL).close()

        sent = transport.requests[0].headers
        assert sent["User-Agent"] == "tests/1.0"
        assert "Accept" in sent
        assert "If-None-Match" not in sent
        assert "If-Modified-Since" not in sent

    def test_stores_body_in_cache(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """With a cache attached the body is persisted and a fresh reader returned."""
        from nflfetch.adapters.cache import MemoryResponseCache
        from nflfetch.adapters.http import FetchClient

        transport.add(URL, BODY, headers=HEADERS)
        cache = MemoryResponseCache()
        client = FetchClient(session=session, cache=cache)

        with client.fetch(URL) as response:
            assert response.read() == BODY

        body, metadata = cache.open(URL)
        assert body.read() == BODY
        assert metadata.etag == '"abc123"'

    def test_reports_progress(
        self,
        session: requests.Session,
        transport: StubTransport,
        recording_progress: RecordingProgress,
    ) -> None:
        """Bytes read are reported against Content-Length and the task is finished."""
        from nflfetch.adapters.http import FetchClient

        transport.add(URL, BODY)
        client = FetchClient(session=session, progress=recording_progress)

        with client.fetch(URL) as response:
            response.read()

        assert recording_progress.started == [(URL, len(BODY))]
        assert recording_progress.updates[-1] == (len(BODY), len(BODY))
        assert recording_progress.finished == [URL]


@pytest.mark.http
@pytest.mark.tier(1)
class TestConditionalRequests:
    """Tests for validator headers and 304 handling."""

    def test_second_fetch_revalidates_and_serves_cached_body(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """A cached entry produces If-None-Match/If-Modified-Since; 304 serves the cache."""
        from nflfetch.adapters.cache import MemoryResponseCache
        from nflfetch.adapters.http import FetchClient

        transport.add(URL, BODY, headers=HEADERS)
        transport.add(URL, b"", status=304)
        client = FetchClient(session=session, cache=MemoryResponseCache())

        client.fetch(URL).close()
        with client.fetch(URL) as second:
            assert second.read() == BODY

        assert second.from_cache is True
        assert second.metadata.etag == '"abc123"'
        sent = transport.requests[1].headers
        assert sent["If-None-Match"] == '"abc123"'
        assert sent["If-Modified-Since"] == "Tue, 02 Jan 2024 03:04:05 GMT"

    def test_expired_entry_sends_unconditional_request(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """Past its TTL an entry contributes no validators."""
        from nflfetch.adapters.cache import MemoryResponseCache
        from nflfetch.adapters.http import FetchClient

        now = [100.0]
        transport.add(URL, BODY, headers=HEADERS)
        client = FetchClient(
            session=session, cache=MemoryResponseCache(ttl=1, clock=lambda: now[0])
        )

        client.fetch(URL).close()
        now[0] += 2
        client.fetch(URL).close()

        assert "If-None-Match" not in transport.requests[1].headers

    def test_not_modified_without_cache_is_configuration_error(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """A 304 with nothing to serve it from is a setup problem."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.exceptions import ConfigurationError

        transport.add(URL, b"", status=304)
        client = FetchClient(session=session)

        with pytest.raises(ConfigurationError, match="304"):
            client.fetch(URL)


@pytest.mark.http
@pytest.mark.tier(1)
class TestFetchErrors:
    """Tests for error statuses and transport failures."""

    def test_404_is_not_found_kind(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """404 raises HTTPNotFoundError, which is also a NotFoundError."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.exceptions import HTTPNotFoundError, NotFoundError

        client = FetchClient(session=session)

        with pytest.raises(HTTPNotFoundError) as exc_info:
            client.fetch(URL)

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL
        assert "404: Not Found" in exc_info.value.body

    def test_server_error_preview_is_bounded(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """Other statuses raise HTTPStatusError with at most 8 KiB of body."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.exceptions import MAX_BODY_PREVIEW, HTTPStatusError, NotFoundError

        transport.add(URL, b"x" * (MAX_BODY_PREVIEW * 3), status=503)
        client = FetchClient(session=session)

        with pytest.raises(HTTPStatusError) as exc_info:
            client.fetch(URL)

        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 503
        assert len(exc_info.value.body) == MAX_BODY_PREVIEW
        assert "http error: 503" in str(exc_info.value)

    def test_read_timeout_maps_to_fetch_timeout(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """requests timeouts become FetchTimeoutError."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.exceptions import FetchTimeoutError

        transport.add_error(URL, requests.exceptions.ReadTimeout("read timed out"))
        client = FetchClient(session=session)

        with pytest.raises(FetchTimeoutError) as exc_info:
            client.fetch(URL)
        assert isinstance(exc_info.value.cause, requests.Timeout)

    def test_connection_error_maps_to_network_error(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """Connection failures become NetworkError."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.exceptions import NetworkError

        transport.add_error(URL, requests.exceptions.ConnectionError("refused"))
        client = FetchClient(session=session)

        with pytest.raises(NetworkError, match="refused"):
            client.fetch(URL)

    def test_broken_body_maps_to_network_error(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """A transfer interrupted mid-body surfaces as NetworkError on read."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.exceptions import NetworkError

        transport.add(URL, _BrokenBody())
        client = FetchClient(session=session)

        with client.fetch(URL) as response, pytest.raises(NetworkError):
            response.read()

    def test_broken_body_is_not_cached(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """A failed transfer leaves nothing behind in the cache."""
        from nflfetch.adapters.cache import MemoryResponseCache
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.exceptions import NetworkError

        transport.add(URL, _BrokenBody())
        cache = MemoryResponseCache()
        client = FetchClient(session=session, cache=cache)

        with pytest.raises(NetworkError):
            client.fetch(URL)
        assert URL not in cache


@pytest.mark.http
@pytest.mark.tier(1)
class TestCallContext:
    """Tests for deadlines and cancellation."""

    def test_cancelled_context_sends_nothing(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """A context cancelled up front fails before any request."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.context import CallContext
        from nflfetch.core.exceptions import FetchCancelledError

        ctx = CallContext()
        ctx.cancel()
        client = FetchClient(session=session)

        with pytest.raises(FetchCancelledError):
            client.fetch(URL, ctx=ctx)
        assert transport.requests == []

    def test_cancel_between_chunks_aborts_read(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """Cancelling after the headers arrive aborts the body read."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.context import CallContext
        from nflfetch.core.exceptions import FetchCancelledError

        transport.add(URL, BODY)
        ctx = CallContext()
        client = FetchClient(session=session)

        with client.fetch(URL, ctx=ctx) as response:
            ctx.cancel()
            with pytest.raises(FetchCancelledError):
                response.read()

    def test_socket_timeout_bounded_by_deadline(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """The per-request timeout never exceeds the time left on the context."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.context import CallContext

        transport.add(URL, BODY)
        client = FetchClient(session=session, timeout=30.0)
        client.fetch(URL, ctx=CallContext(timeout=2.0)).close()

        assert transport.timeouts[0] <= 2.0

    def test_deadline_spent_before_send_is_timeout(
        self, session: requests.Session, transport: StubTransport
    ) -> None:
        """No time left when the request is built raises FetchTimeoutError, not ValueError."""
        from nflfetch.adapters.http import FetchClient
        from nflfetch.core.context import CallContext
        from nflfetch.core.exceptions import FetchTimeoutError

        class SpentContext(CallContext):
            def remaining(self) -> float | None:
                return 0.0

        transport.add(URL, BODY)
        client = FetchClient(session=session, timeout=30.0)

        with pytest.raises(FetchTimeoutError) as exc_info:
            client.fetch(URL, ctx=SpentContext(timeout=5.0))
        assert exc_info.value.url == URL
        assert transport.requests == []


@pytest.mark.http
@pytest.mark.tier(0)
class TestHeaderHelpers:
    """Tests for header parsing and formatting helpers."""

    def test_format_http_date_uses_gmt(self) -> None:
        """Datetimes render as RFC 7231 dates."""
        from nflfetch.adapters.http import format_http_date

        value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert format_http_date(value) == "Tue, 02 Jan 2024 03:04:05 GMT"

    def test_naive_datetime_treated_as_utc(self) -> None:
        """Naive datetimes are assumed to be UTC."""
        from nflfetch.adapters.http import format_http_date

        assert format_http_date(datetime(2024, 1, 2, 3, 4, 5)).endswith("03:04:05 GMT")

    def test_parse_metadata_keeps_weak_etag(self) -> None:
        """Weak ETags are passed through untouched."""
        from nflfetch.adapters.http import parse_response_metadata

        response = requests.Response()
        response.headers["ETag"] = 'W/"v1"'
        assert parse_response_metadata(response).etag == 'W/"v1"'

    def test_parse_metadata_drops_malformed_values(self) -> None:
        """Bad dates and lengths become None instead of raising."""
        from nflfetch.adapters.http import parse_response_metadata

        response = requests.Response()
        response.headers["Last-Modified"] = "yesterday-ish"
        response.headers["Content-Length"] = "lots"
        metadata = parse_response_metadata(response)

        assert metadata.last_modified is None
        assert metadata.content_length is None
        assert metadata.etag is None
