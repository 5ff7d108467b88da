"""Core domain module for nflfetch.

This module contains domain models, port definitions, URL resolution,
parsing and the dataset loader. Apart from the loader, which drives an
injected fetch client, nothing here performs I/O.
"""

from nflfetch.core.context import CallContext
from nflfetch.core.models import Format, LoadResult, ResponseMetadata, Source, Validators
from nflfetch.core.ports import Mapper, ProgressCallback, ResponseCachePort


__all__ = [
    "CallContext",
    "Format",
    "LoadResult",
    "Mapper",
    "ProgressCallback",
    "ResponseCachePort",
    "ResponseMetadata",
    "Source",
    "Validators",
]
