"""Deadline and cancellation carried through every public entry point."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from nflfetch.core.exceptions import FetchCancelledError, FetchTimeoutError


@dataclass
class CallContext:
    """Deadline plus cancellation flag for one logical call.

    The deadline starts when the context is created. Blocking operations
    consult ``remaining()`` to bound socket timeouts and call ``check()``
    between chunks, so an in-flight transfer aborts promptly once the
    deadline passes or ``cancel()`` is called from another thread.

    Attributes:
        timeout: Seconds until the deadline, or None for no deadline.
        cancel_event: Event that signals cancellation. Share one event between
            contexts to cancel several calls at once.

    Example:
        >>> ctx = CallContext(timeout=45)
        >>> rows = loader.load_from_source(source, 2024, dict, ctx=ctx)  # doctest: +SKIP
    """

    timeout: float | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event)
    _deadline: float | None = field(init=False, repr=False, default=None)

    def __post_init__(self) -> None:
        if self.timeout is not None:
            if self.timeout <= 0:
                raise ValueError("timeout must be positive")
            self._deadline = time.monotonic() + self.timeout

    def cancel(self) -> None:
        """Request cancellation of work running under this context."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), None if unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self, url: str = "") -> None:
        """Raise if the call was cancelled or ran past its deadline.

        Raises:
            FetchCancelledError: If cancel() was called.
            FetchTimeoutError: If the deadline elapsed.
        """
        if self.cancelled:
            raise FetchCancelledError(f"fetch cancelled: {url}", url=url)
        if self.expired:
            raise FetchTimeoutError(
                f"deadline of {self.timeout}s exceeded: {url}", url=url
            )
