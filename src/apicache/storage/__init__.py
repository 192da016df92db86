"""Storage backends for cache entries.

Every backend implements :class:`CacheStorage`, a synchronous key to
:class:`~apicache.models.CacheEntry` mapping. Two implementations ship
with apicache:

* :class:`InMemoryCacheStorage` -- the default, with optional LRU
  eviction bounded by entry count.
* :class:`DiskCacheStorage` -- persistent, backed by :mod:`diskcache`.

Each :class:`~apicache.plugins.cache.CachePlugin` owns exactly one
backend instance; there is no shared module-level store.
"""

from apicache.storage.base import CacheStorage
from apicache.storage.disk import DiskCacheStorage
from apicache.storage.memory import InMemoryCacheStorage

__all__ = ["CacheStorage", "DiskCacheStorage", "InMemoryCacheStorage"]
