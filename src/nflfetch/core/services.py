"""Dataset loading orchestrator for nflfetch."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, TypeVar

from nflfetch.core.exceptions import NotFoundError
from nflfetch.core.models import Format, LoadResult, Source
from nflfetch.core.parsing import auto_parse
from nflfetch.core.urls import raw_url, resolve_source_url


if TYPE_CHECKING:
    from nflfetch.adapters.http.client import FetchClient
    from nflfetch.core.context import CallContext
    from nflfetch.core.models import Row
    from nflfetch.core.ports import Mapper


logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatasetLoader:
    """Resolves sources to URLs, fetches, parses and maps records.

    Season-scoped requests fall back to the source's base (all-seasons) file
    when the season file is not published. Only a NotFoundError triggers the
    fallback; timeouts, network failures, other HTTP statuses and parse
    errors propagate unchanged. A call either returns every record or raises.

    Example:
        >>> loader = DatasetLoader(FetchClient())  # doctest: +SKIP
        >>> rows = loader.load_from_source(source, 2024, dict)  # doctest: +SKIP
    """

    def __init__(
        self,
        client: FetchClient,
        default_format: Format | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            client: Fetch client used for every request.
            default_format: Extension appended to sources that declare none
                and whose base path has no extension.
        """
        self._client = client
        self._default_format = default_format

    @property
    def client(self) -> FetchClient:
        return self._client

    def fetch_bytes(self, url: str, *, ctx: CallContext | None = None) -> bytes:
        """Fetch url and return the whole body."""
        with self._client.fetch(url, ctx=ctx) as response:
            return response.read()

    def fetch_rows(self, url: str, *, ctx: CallContext | None = None) -> list[Row]:
        """Fetch url and parse it into rows."""
        return auto_parse(self.fetch_bytes(url, ctx=ctx), url)

    def _resolve(self, source: Source, season: int) -> str:
        return resolve_source_url(source, season, default_format=self._default_format)

    def load_with_provenance(
        self,
        source: Source,
        season: int,
        mapper: Mapper[T],
        *,
        ctx: CallContext | None = None,
    ) -> LoadResult[T]:
        """Load records for source and season, reporting which URL served them.

        Args:
            source: Repository and base path of the dataset family.
            season: Season to load; values <= 0 request the base file.
            mapper: Converts each parsed row into a record.
            ctx: Deadline and cancellation for the whole call, fallback
                included.

        Returns:
            LoadResult with records in file row order.

        Raises:
            NotFoundError: If neither the season file nor the base file exists.
            NflfetchError: Any other failure, without a fallback attempt.
        """
        url = self._resolve(source, season)
        try:
            rows = self.fetch_rows(url, ctx=ctx)
        except NotFoundError:
            if season <= 0:
                raise
            base_url = self._resolve(source, 0)
            logger.info("%s not found, falling back to %s", url, base_url)
            rows = self.fetch_rows(base_url, ctx=ctx)
            return LoadResult([mapper(row) for row in rows], base_url, fell_back=True)
        return LoadResult([mapper(row) for row in rows], url)

    def load_from_source(
        self,
        source: Source,
        season: int,
        mapper: Mapper[T],
        *,
        ctx: CallContext | None = None,
    ) -> list[T]:
        """Load records for source and season, falling back to the base file.

        See load_with_provenance() for details.
        """
        return self.load_with_provenance(source, season, mapper, ctx=ctx).records

    def load_from_path(
        self,
        repository: str,
        path: str,
        mapper: Mapper[T],
        *,
        ctx: CallContext | None = None,
    ) -> list[T]:
        """Load records from an exact path, with no season logic or fallback."""
        rows = self.fetch_rows(raw_url(repository, path), ctx=ctx)
        return [mapper(row) for row in rows]

    def load_seasons(
        self,
        source: Source,
        seasons: Iterable[int],
        mapper: Mapper[T],
        *,
        ctx: CallContext | None = None,
    ) -> list[T]:
        """Load several seasons one after another and concatenate the records.

        Seasons are deduplicated and fetched in increasing order. There is no
        base-file fallback here: the base file holds every season, so falling
        back per season would repeat it.

        Raises:
            NotFoundError: If any season file is missing.
        """
        records: list[T] = []
        for season in sorted(set(seasons)):
            url = self._resolve(source, season)
            rows = self.fetch_rows(url, ctx=ctx)
            logger.debug("season %d: %d rows from %s", season, len(rows), url)
            records.extend(mapper(row) for row in rows)
        return records


def load_from_source(
    source: Source,
    season: int,
    mapper: Mapper[T],
    *,
    ctx: CallContext | None = None,
) -> list[T]:
    """Load records with the process-wide default client.

    See DatasetLoader.load_with_provenance() for the fallback rules.
    """
    from nflfetch.defaults import get_default_loader

    return get_default_loader().load_from_source(source, season, mapper, ctx=ctx)
