"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The core domain
depends only on these protocols, never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable


if TYPE_CHECKING:
    from typing import BinaryIO

    from nflfetch.core.models import ResponseMetadata, Validators

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]

# Converts one parsed row into a typed record. Must not raise on bad input.
Mapper = Callable[[Mapping[str, object]], T]


@runtime_checkable
class ResponseCachePort(Protocol):
    """Byte-level store for HTTP responses, keyed by the exact request URL."""

    def validators(self, url: str) -> Validators | None:
        """Return ETag/Last-Modified for a conditional GET.

        Returns None when nothing is cached or the entry is past its TTL,
        which forces an unconditional request.
        """
        ...

    def store_stream(
        self, url: str, metadata: ResponseMetadata, body: BinaryIO
    ) -> BinaryIO:
        """Consume body once, persist it with metadata, return a fresh reader.

        The input stream is read to the end and closed. Closing the returned
        stream releases the copy.
        """
        ...

    def open(self, url: str) -> tuple[BinaryIO, ResponseMetadata]:
        """Return a previously stored body and its metadata.

        Raises:
            CacheMissError: If no entry exists for url.
        """
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Reports download progress to the user.

    This protocol defines the contract for progress display adapters.
    The fetch client uses this to report bytes read without depending
    on any specific UI library.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a download task.

        Args:
            name: Human-readable name for the task (usually the URL).
            total: Total bytes expected, 0 when the server sent no length.

        Returns:
            A ProgressCallback to call with (bytes_downloaded, total_bytes).
        """
        ...

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name passed to start_task().
        """
        ...


class NullProgressReporter:
    """A ProgressReporter that produces no output.

    Used as the default when no progress reporting is desired.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:  # noqa: ARG002
        """Return a no-op callback."""
        return lambda _downloaded, _total: None

    def finish_task(self, name: str) -> None:
        """Do nothing."""
        _ = name  # Unused but required by protocol
