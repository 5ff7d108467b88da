"""Error handling patterns with recovery hints.

This example demonstrates how to handle common errors and use
the recovery_hint property to provide actionable guidance.
"""

from nflfetch import (
    CallContext,
    DatasetLoader,
    FetchClient,
    FetchTimeoutError,
    Format,
    HTTPStatusError,
    MemoryResponseCache,
    NflfetchError,
    NotFoundError,
    Row,
    Source,
    TransientError,
)


loader = DatasetLoader(FetchClient(cache=MemoryResponseCache()))

rosters = Source("nflverse/nflverse-data", "data/rosters/roster", Format.CSV)


# Pattern 1: Missing files
def load_or_none(source: Source, season: int) -> list[Row] | None:
    """Load a season, returning None if neither the season nor base file exists."""
    try:
        return loader.load_from_source(source, season, dict)
    except NotFoundError as e:
        print(f"Not published: {e}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 2: Deadlines
def load_within(source: Source, season: int, seconds: float) -> list[Row] | None:
    """Load a season, giving up after seconds (fallback request included)."""
    try:
        return loader.load_from_source(source, season, dict, ctx=CallContext(timeout=seconds))
    except FetchTimeoutError as e:
        print(f"Timed out fetching {e.url}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 3: Retrying transient failures (nflfetch never retries itself)
def load_with_retries(source: Source, season: int, attempts: int = 3) -> list[Row]:
    """Retry network failures and timeouts a few times."""
    for attempt in range(1, attempts + 1):
        try:
            return loader.load_from_source(source, season, dict)
        except TransientError as e:
            if attempt == attempts:
                raise
            print(f"Attempt {attempt} failed ({e}); retrying")
    raise AssertionError("unreachable")


# Pattern 4: Catch-all for any library error
def load_safe(source: Source, season: int) -> list[Row] | None:
    """Load with comprehensive error handling."""
    try:
        return loader.load_from_source(source, season, dict)
    except HTTPStatusError as e:
        print(f"HTTP {e.status_code} from {e.url}")
        if e.body:
            print(f"Server said: {e.body[:200]}")
        return None
    except NflfetchError as e:
        # Catch any other library errors
        print(f"Unexpected error: {e}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Example usage
if __name__ == "__main__":
    load_or_none(Source("nflverse/nflverse-data", "data/not_a_dataset/nothing"), 2024)
