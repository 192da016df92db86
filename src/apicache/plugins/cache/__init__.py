"""Response caching plugin.

Serves repeated calls from a per-plugin store for a configurable TTL and
hands back :class:`~apicache.wrapper.CachedResult` wrappers with refresh
and invalidate capabilities.

See Also:
    :class:`~apicache.plugins.cache.plugin.CachePlugin`
    :mod:`apicache.storage` for the backends the plugin can store into.
"""

from apicache.plugins.cache.plugin import CachePlugin

__all__ = ["CachePlugin"]
