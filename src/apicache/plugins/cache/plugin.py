"""Cache plugin -- intercepts cacheable calls and serves them from storage.

This module provides :class:`CachePlugin`. Wrapped around a handler, it
decides for every call whether to answer from its store or to call
through:

* **Ineligible** -- the verb is not in ``methods``. The call goes straight
  to the origin and the raw origin result is returned, *not* a
  :class:`~apicache.wrapper.CachedResult`. Callers dispatching mixed
  verbs through one handler must expect both shapes.
* **Hit** -- a stored entry exists and ``now <= expires_at``. A wrapper
  over the stored entry is returned without calling the origin.
* **Miss** -- no entry, or the entry has expired. The origin is awaited;
  its result is stored and wrapped. If the origin raises, the exception
  propagates unchanged and nothing is stored.

Concurrent misses on the same key are not coalesced: each one calls the
origin and the last write wins. A fetch that completes after
:meth:`CachePlugin.invalidate` or :meth:`CachePlugin.clear` still writes
its entry.

See Also:
    :mod:`apicache.keys` for how cache keys are derived.
    :class:`~apicache.wrapper.WrapperFactory` for refresh semantics.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from apicache.exceptions import ConfigError
from apicache.keys import KeyGenerator, default_key_generator
from apicache.models import DEFAULT_METHODS, DEFAULT_TTL_SECONDS, CacheConfig, CallContext
from apicache.plugins.base import Handler, Plugin
from apicache.storage.base import CacheStorage
from apicache.storage.memory import InMemoryCacheStorage
from apicache.wrapper import Clock, PendingCall, WrapperFactory, is_stale, utc_now

logger = logging.getLogger(__name__)


class CachePlugin(Plugin):
    """TTL cache with least-recently-used eviction, exposed as a plugin.

    Each instance owns exactly one storage backend. When no ``storage`` is
    given, an :class:`~apicache.storage.InMemoryCacheStorage` bounded by
    ``max_size`` is created for this instance alone.

    The control surface (:meth:`clear`, :meth:`invalidate`,
    :meth:`invalidate_key`) addresses the same store and derives keys with
    the same generator as the interceptor.

    Args:
        ttl: Seconds an entry stays fresh. Defaults to 300.
        methods: Verbs to cache, case-insensitive. Defaults to ``GET`` only.
        max_size: Entry limit for the default in-memory store. Ignored when
            ``storage`` is given; the backend decides its own bounds.
        key_generator: Replaces :func:`~apicache.keys.default_key_generator`.
            Receives the upper-cased verb.
        storage: Backend implementing
            :class:`~apicache.storage.base.CacheStorage`.
        clock: Source of the current time. Defaults to UTC wall-clock time.

    Raises:
        ConfigError: If ``ttl``, ``methods`` or ``max_size`` are invalid.

    Example::

        cache = CachePlugin(ttl=600, methods=["GET", "POST"], max_size=100)
        get_user = cache.wrap_handler(fetch_user)
        result = await get_user({"id": 7}, CallContext("GET", "/users/7"))
        result.data
        cache.invalidate("GET", "/users/7", {"id": 7})
    """

    def __init__(
        self,
        *,
        ttl: float = DEFAULT_TTL_SECONDS,
        methods: Iterable[str] = DEFAULT_METHODS,
        max_size: Optional[int] = None,
        key_generator: Optional[KeyGenerator] = None,
        storage: Optional[CacheStorage] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        try:
            config = CacheConfig(ttl=ttl, methods=list(methods), max_size=max_size)
        except ValidationError as exc:
            raise ConfigError(f"Invalid cache configuration: {exc}") from exc
        self._config = config
        self._key_generator = key_generator or default_key_generator
        self._storage = storage if storage is not None else InMemoryCacheStorage(config.max_size)
        self._clock = clock or utc_now
        self._wrappers = WrapperFactory(self._storage, config.ttl, self._clock)
        self._hits = 0
        self._misses = 0
        self._bypassed = 0

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        *,
        key_generator: Optional[KeyGenerator] = None,
        storage: Optional[CacheStorage] = None,
        clock: Optional[Clock] = None,
    ) -> CachePlugin:
        """Build a plugin from a resolved :class:`~apicache.models.CacheConfig`.

        See :func:`apicache.config.resolve_config` for building *config*
        from environment variables.
        """
        return cls(
            ttl=config.ttl,
            methods=config.methods,
            max_size=config.max_size,
            key_generator=key_generator,
            storage=storage,
            clock=clock,
        )

    # ------------------------------------------------------------------ #
    # Plugin metadata
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return "cache"

    @property
    def description(self) -> str:
        return "Serve repeated calls from a TTL cache with LRU eviction"

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def storage(self) -> CacheStorage:
        return self._storage

    # ------------------------------------------------------------------ #
    # Keys and eligibility
    # ------------------------------------------------------------------ #

    def is_cacheable(self, verb: str) -> bool:
        """Return ``True`` if calls with *verb* go through the cache."""
        return verb.upper() in self._config.methods

    def make_key(self, verb: str, path: str, input: Any = None) -> str:
        """Derive the cache key the interceptor uses for a call."""
        return self._key_generator(verb.upper(), path, input)

    # ------------------------------------------------------------------ #
    # Interceptor
    # ------------------------------------------------------------------ #

    def wrap_handler(self, handler: Handler) -> Handler:
        """Return a handler that answers cacheable calls from the store.

        Args:
            handler: The origin operation, ``(input, context) -> awaitable``.

        Returns:
            A handler with the same signature. For cacheable verbs it
            returns :class:`~apicache.wrapper.CachedResult` objects; for
            all other verbs, the origin's raw result.
        """

        async def cached_handler(input: Any, context: CallContext) -> Any:
            if not self.is_cacheable(context.verb):
                self._bypassed += 1
                logger.debug("Not caching %s %s", context.verb, context.path)
                return await handler(input, context)

            key = self.make_key(context.verb, context.path, input)
            call = PendingCall(handler, input, context)

            entry = self._storage.get(key)
            if entry is not None:
                if not is_stale(self._clock(), entry.expires_at):
                    self._hits += 1
                    logger.debug("Cache hit for %r", key)
                    return self._wrappers.build(
                        entry.data, entry.cached_at, entry.expires_at, key, call
                    )
                logger.debug("Cache entry for %r expired at %s", key, entry.expires_at.isoformat())

            self._misses += 1
            logger.debug("Cache miss for %r, calling origin", key)
            data = await handler(input, context)
            entry = self._wrappers.new_entry(key, data)
            self._storage.set(key, entry)
            return self._wrappers.from_entry(entry, call)

        return cached_handler

    # ------------------------------------------------------------------ #
    # Control surface
    # ------------------------------------------------------------------ #

    def clear(self) -> None:
        """Remove every entry from this plugin's store."""
        self._storage.clear()
        logger.debug("Cleared cache")

    def invalidate(self, verb: str, path: str, input: Any = None) -> None:
        """Remove the entry a call with these arguments would be served from.

        Args:
            verb: Request verb, case-insensitive.
            path: Request path.
            input: The call input, ``None`` for calls without input.
        """
        self.invalidate_key(self.make_key(verb, path, input))

    def invalidate_key(self, key: str) -> None:
        """Remove the entry stored under the literal *key*.

        Use this when the key is already known, e.g. from
        :attr:`CachedResult.key <apicache.wrapper.CachedResult.key>`.
        """
        self._storage.delete(key)
        logger.debug("Invalidated cache key %r", key)

    def stats(self) -> dict[str, Any]:
        """Return cache configuration and counters.

        Returns:
            A ``dict`` with ``ttl``, ``methods``, ``max_size``, ``size``
            (entries currently stored, expired ones included), and the
            ``hits``, ``misses`` and ``bypassed`` counters.
        """
        return {
            "ttl": self._config.ttl,
            "methods": list(self._config.methods),
            "max_size": self._config.max_size,
            "size": len(self._storage),
            "hits": self._hits,
            "misses": self._misses,
            "bypassed": self._bypassed,
        }
