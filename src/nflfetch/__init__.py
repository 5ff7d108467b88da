"""nflfetch - Cached loading of nflverse datasets from GitHub.

This library fetches dataset files from raw.githubusercontent.com with
conditional requests (ETag/Last-Modified) against a pluggable response
cache, parses them into rows, and maps rows into typed records. A request
for a season that is not published falls back to the all-seasons file.

Example:
    >>> from nflfetch import DatasetLoader, FetchClient, Format, MemoryResponseCache, Source
    >>> client = FetchClient(cache=MemoryResponseCache(ttl=3600))
    >>> loader = DatasetLoader(client)
    >>> injuries = Source("nflverse/nflverse-data", "data/injuries/injuries", Format.CSV)
    >>> rows = loader.load_from_source(injuries, 2024, dict)  # doctest: +SKIP
"""

from nflfetch.adapters.cache import (
    BlobCache,
    BlobCacheMode,
    FilesystemResponseCache,
    MemoryResponseCache,
)
from nflfetch.adapters.http import FetchClient
from nflfetch.config import (
    CacheMode,
    Settings,
    build_client,
    build_loader,
    find_project_root,
    load_settings,
)
from nflfetch.core.context import CallContext
from nflfetch.core.exceptions import (
    CacheCorruptError,
    CacheError,
    CacheMissError,
    ConfigurationError,
    FetchCancelledError,
    FetchTimeoutError,
    FormatError,
    HTTPNotFoundError,
    HTTPStatusError,
    NetworkError,
    NflfetchError,
    NotFoundError,
    TransientError,
    UnsupportedFormatError,
)
from nflfetch.core.models import (
    FetchResponse,
    Format,
    LoadResult,
    ResponseMetadata,
    Row,
    Source,
    Validators,
)
from nflfetch.core.parsing import auto_parse
from nflfetch.core.ports import (
    Mapper,
    NullProgressReporter,
    ProgressCallback,
    ProgressReporter,
    ResponseCachePort,
)
from nflfetch.core.services import DatasetLoader, load_from_source
from nflfetch.core.urls import raw_url, season_path
from nflfetch.defaults import (
    fetch,
    get_default_client,
    reset_default_client,
    set_default_client,
)
from nflfetch.progress import RichProgressReporter


__version__ = "0.1.0"

__all__ = [
    "BlobCache",
    "BlobCacheMode",
    "CacheCorruptError",
    "CacheError",
    "CacheMissError",
    "CacheMode",
    "CallContext",
    "ConfigurationError",
    "DatasetLoader",
    "FetchCancelledError",
    "FetchClient",
    "FetchResponse",
    "FetchTimeoutError",
    "FilesystemResponseCache",
    "Format",
    "FormatError",
    "HTTPNotFoundError",
    "HTTPStatusError",
    "LoadResult",
    "Mapper",
    "MemoryResponseCache",
    "NetworkError",
    "NflfetchError",
    "NotFoundError",
    "NullProgressReporter",
    "ProgressCallback",
    "ProgressReporter",
    "ResponseCachePort",
    "ResponseMetadata",
    "RichProgressReporter",
    "Row",
    "Settings",
    "Source",
    "TransientError",
    "UnsupportedFormatError",
    "Validators",
    "__version__",
    "auto_parse",
    "build_client",
    "build_loader",
    "fetch",
    "find_project_root",
    "get_default_client",
    "load_from_source",
    "load_settings",
    "raw_url",
    "reset_default_client",
    "season_path",
]
