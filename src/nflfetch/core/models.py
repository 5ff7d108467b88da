"""Core domain models for nflfetch.

These models are pure Python dataclasses with no I/O dependencies.
They describe where datasets live, what the HTTP layer learned about a
response, and what the loader hands back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

from nflfetch.core.exceptions import ConfigurationError


if TYPE_CHECKING:
    from datetime import datetime
    from types import TracebackType
    from typing import BinaryIO


T = TypeVar("T")

# One parsed record before dataset-specific conversion.
Row = dict[str, str]


class Format(StrEnum):
    """Serialization formats published by the data repositories."""

    CSV = "csv"
    PARQUET = "parquet"

    @property
    def extension(self) -> str:
        """File extension including the leading dot."""
        return f".{self.value}"

    @classmethod
    def parse(cls, text: str) -> Format:
        """Parse a format name, ignoring case and surrounding whitespace.

        Raises:
            ConfigurationError: If the name is not a known format.
        """
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ConfigurationError(f"unknown format {text!r}") from None


@dataclass(frozen=True, slots=True)
class Source:
    """Where a dataset family lives in a GitHub repository.

    Attributes:
        repository: "owner/name", or a bare "name" (owner defaults to nflverse).
        base: Logical path of the all-seasons file inside the repository.
        format: Optional format whose extension is appended when the resolved
            path carries none. Leave unset when base already has an extension.

    Example:
        >>> injuries = Source("nflverse/nflverse-data", "data/injuries/injuries", Format.CSV)
        >>> injuries.repository
        'nflverse/nflverse-data'
    """

    repository: str
    base: str
    format: Format | None = None

    def __post_init__(self) -> None:
        """Validate source fields after initialization."""
        if not self.repository:
            raise ConfigurationError("Source repository cannot be empty")
        if not self.base:
            raise ConfigurationError("Source base path cannot be empty")


@dataclass(frozen=True, slots=True)
class Validators:
    """Conditional-request validators remembered for a cached response."""

    etag: str | None = None
    last_modified: datetime | None = None

    def __bool__(self) -> bool:
        return bool(self.etag) or self.last_modified is not None


@dataclass(frozen=True, slots=True)
class ResponseMetadata:
    """What the server told us about a response body.

    Attributes:
        etag: ETag header value, weak validators kept intact.
        last_modified: Parsed Last-Modified header.
        content_length: Body size in bytes when known.
    """

    etag: str | None = None
    last_modified: datetime | None = None
    content_length: int | None = None

    @property
    def validators(self) -> Validators:
        """The subset of metadata usable for conditional requests."""
        return Validators(etag=self.etag, last_modified=self.last_modified)


@dataclass(frozen=True, slots=True)
class FetchResponse:
    """Readable body plus metadata returned by the fetch client.

    Use as a context manager so the body (and the underlying connection,
    when the body is still streaming) is released:

        >>> with client.fetch(url) as response:  # doctest: +SKIP
        ...     data = response.body.read()

    Attributes:
        url: The URL that was requested.
        body: Binary stream with the response bytes.
        metadata: Validators and size reported for the body.
        from_cache: True when the body was served after a 304.
    """

    url: str
    body: BinaryIO
    metadata: ResponseMetadata
    from_cache: bool = False

    def read(self) -> bytes:
        """Read the remaining body bytes."""
        return self.body.read()

    def close(self) -> None:
        """Release the body stream."""
        self.body.close()

    def __enter__(self) -> FetchResponse:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


@dataclass(frozen=True, slots=True)
class LoadResult(Generic[T]):
    """Records loaded for a source, with the URL they came from.

    Attributes:
        records: Mapped records in source-file row order.
        url: The URL whose body produced the records.
        fell_back: True when a season-scoped file was missing and the base
            (all-seasons) file was used instead.
    """

    records: list[T]
    url: str
    fell_back: bool = False
