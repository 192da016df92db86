"""HTTP host adapter for apicache.

Provides :class:`AsyncClient`, a thin wrapper over :class:`httpx.AsyncClient`
that dispatches every request through a
:class:`~apicache.plugins.manager.PluginManager`, so plugins such as
:class:`~apicache.plugins.cache.CachePlugin` can answer calls without
touching the network.

Example::

    from apicache.client import AsyncClient
    from apicache.plugins import CachePlugin

    async with AsyncClient("https://api.example.com", plugins=[CachePlugin()]) as client:
        users = await client.get("/users")
        users.data
        client.plugins.cache.invalidate("GET", "/users")
"""

from apicache.client.async_client import AsyncClient
from apicache.client.response import extract_response_data

__all__ = ["AsyncClient", "extract_response_data"]
