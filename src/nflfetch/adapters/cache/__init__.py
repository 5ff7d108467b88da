"""Cache adapters.

Response caches implement ResponseCachePort for the fetch client. BlobCache
is a standalone byte cache with memory and disk tiers.
"""

from nflfetch.adapters.cache.blob import BlobCache, BlobCacheMode
from nflfetch.adapters.cache.filesystem import FilesystemResponseCache
from nflfetch.adapters.cache.memory import MemoryResponseCache


__all__ = ["BlobCache", "BlobCacheMode", "FilesystemResponseCache", "MemoryResponseCache"]
