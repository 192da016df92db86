"""apicache -- TTL and LRU response caching for request-dispatch hosts.

This package caches the results of calls made through a host's dispatch
path. A :class:`~apicache.plugins.cache.CachePlugin` wraps the host's
origin operation; cacheable calls come back as
:class:`~apicache.wrapper.CachedResult` objects carrying the data, its
timestamps, live staleness, and ``refresh()`` / ``invalidate()``.

Typical use with the bundled httpx host adapter::

    from apicache import AsyncClient, CachePlugin

    async with AsyncClient("https://api.example.com", plugins=[CachePlugin(ttl=300)]) as api:
        users = await api.get("/users")
        users.data, users.cached_at, users.is_stale
        api.plugins.cache.invalidate("GET", "/users")

Modules:
    keys: Cache key derivation.
    storage: Storage backends (in-memory LRU, diskcache).
    wrapper: Result wrappers and the factory that builds them.
    plugins: Plugin base class, manager, and the cache plugin.
    client: httpx-based host adapter.
    config: Environment-driven configuration resolution.
    app: The ``apicache`` command-line tool.
"""

__version__ = "0.1.0"

from apicache.client import AsyncClient  # noqa: E402
from apicache.exceptions import ApicacheError  # noqa: E402
from apicache.keys import default_key_generator  # noqa: E402
from apicache.models import CacheConfig, CacheEntry, CallContext  # noqa: E402
from apicache.plugins import CachePlugin, Plugin, PluginManager  # noqa: E402
from apicache.storage import CacheStorage, DiskCacheStorage, InMemoryCacheStorage  # noqa: E402
from apicache.wrapper import CachedResult, is_stale  # noqa: E402

__all__ = [
    "__version__",
    "ApicacheError",
    "AsyncClient",
    "CacheConfig",
    "CacheEntry",
    "CachePlugin",
    "CacheStorage",
    "CachedResult",
    "CallContext",
    "DiskCacheStorage",
    "InMemoryCacheStorage",
    "Plugin",
    "PluginManager",
    "default_key_generator",
    "is_stale",
]
