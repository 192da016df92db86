"""Plugin system for apicache -- handler wrapping and plugin registry.

A host dispatches each call through a chain of handlers built by
:class:`PluginManager`. Plugins join the chain by wrapping the handler
that follows them; the innermost handler is the origin operation.

Key classes:

* :class:`Plugin` -- Abstract base class that all plugins must extend.
* :class:`PluginManager` -- Registers plugins and composes their wrappers.
* :class:`CachePlugin` -- The TTL/LRU response cache.

Example:
    Wiring a cache in front of an origin::

        from apicache.plugins import CachePlugin, PluginManager

        manager = PluginManager([CachePlugin(ttl=60, max_size=500)])
        handler = manager.wrap_handler(fetch_from_api)
"""

from apicache.plugins.base import Handler, Plugin
from apicache.plugins.cache import CachePlugin
from apicache.plugins.manager import PluginManager

__all__ = ["Handler", "Plugin", "PluginManager", "CachePlugin"]
