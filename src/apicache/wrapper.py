"""Result wrappers handed back for cached calls.

Every cacheable call returns a :class:`CachedResult` instead of the raw
origin result. The wrapper is a snapshot: ``data``, ``cached_at`` and
``expires_at`` are copied from the entry when the wrapper is built and never
change afterwards. Staleness is not a snapshot; :attr:`CachedResult.is_stale`
asks the clock on every access, so a wrapper kept around flips to stale on
its own once its entry expires.

Wrappers also carry two capabilities bound to the call that produced them:

* :meth:`CachedResult.refresh` fetches the origin again, replaces the stored
  entry, and returns a *new* wrapper.
* :meth:`CachedResult.invalidate` drops the stored entry. Wrappers already
  handed out keep their data.

Example::

    result = await get_users(None, CallContext("GET", "/users"))
    result.data          # the origin payload
    result.is_stale      # False until ttl seconds have passed
    newer = await result.refresh()
    result.invalidate()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from apicache.models import CacheEntry, CallContext
from apicache.storage.base import CacheStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]
"""Returns the current instant. Injected so tests can control time."""

Origin = Callable[[Any, CallContext], Awaitable[Any]]
"""An origin operation: ``(input, context) -> awaitable result``."""

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Default clock: the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def is_stale(now: datetime, expires_at: datetime) -> bool:
    """Return ``True`` once *now* is strictly past *expires_at*."""
    return now > expires_at


@dataclass(frozen=True)
class PendingCall:
    """The origin operation and arguments a wrapper can replay on refresh."""

    origin: Origin
    input: Any
    context: CallContext

    async def invoke(self) -> Any:
        return await self.origin(self.input, self.context)


class CachedResult(Generic[T]):
    """A read-only view of one cache entry plus refresh/invalidate capabilities.

    Instances are built by :class:`WrapperFactory`; callers never construct
    them directly. A ``CachedResult[T]`` always wraps a payload of type
    ``T``: an endpoint whose origin returns ``list[User]`` yields
    ``CachedResult[list[User]]`` from the cache.

    Attributes:
        data: The cached origin payload.
        cached_at: When the payload was fetched.
        expires_at: When the payload stops being fresh.
        key: The cache key the payload is stored under.
    """

    __slots__ = ("_data", "_cached_at", "_expires_at", "_key", "_clock", "_refresh", "_invalidate")

    def __init__(
        self,
        data: T,
        cached_at: datetime,
        expires_at: datetime,
        key: str,
        *,
        clock: Clock,
        refresh: Callable[[], Awaitable[CachedResult[T]]],
        invalidate: Callable[[], None],
    ) -> None:
        self._data = data
        self._cached_at = cached_at
        self._expires_at = expires_at
        self._key = key
        self._clock = clock
        self._refresh = refresh
        self._invalidate = invalidate

    @property
    def data(self) -> T:
        return self._data

    @property
    def cached_at(self) -> datetime:
        return self._cached_at

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    @property
    def key(self) -> str:
        return self._key

    @property
    def is_stale(self) -> bool:
        """Whether the entry has expired, evaluated against the clock right now."""
        return is_stale(self._clock(), self._expires_at)

    async def refresh(self) -> CachedResult[T]:
        """Fetch the origin again and return a wrapper over the new entry.

        The origin is called even if the current entry is still fresh. The
        new ``cached_at`` is always later than this wrapper's, by at least
        one microsecond when the clock has not moved. The stored entry is
        replaced only once the origin succeeds; if the origin raises, the
        exception propagates and the store is left as it was. This wrapper
        is not modified.

        Returns:
            A new :class:`CachedResult` with a later ``cached_at``.
        """
        return await self._refresh()

    def invalidate(self) -> None:
        """Remove this key's entry from the store."""
        self._invalidate()

    def __repr__(self) -> str:
        return (
            f"CachedResult(key={self._key!r}, cached_at={self._cached_at.isoformat()}, "
            f"expires_at={self._expires_at.isoformat()}, data={self._data!r})"
        )


class WrapperFactory:
    """Builds :class:`CachedResult` objects and the entries behind them.

    One factory serves one cache plugin: it shares the plugin's storage,
    TTL, and clock, so refreshes write to the same store the plugin reads.

    Args:
        storage: Backend that refreshed entries are written to.
        ttl: Seconds a newly written entry stays fresh.
        clock: Source of the current time.
    """

    def __init__(self, storage: CacheStorage, ttl: float, clock: Clock = utc_now) -> None:
        self._storage = storage
        self._ttl = timedelta(seconds=ttl)
        self._clock = clock

    def new_entry(self, key: str, data: Any, after: Optional[datetime] = None) -> CacheEntry:
        """Stamp *data* with the current time and expiry.

        When *after* is given, ``cached_at`` is strictly later than it even if
        the clock has not advanced (coarse clocks, back-to-back refreshes).
        """
        cached_at = self._clock()
        if after is not None and cached_at <= after:
            cached_at = after + _TICK
        return CacheEntry(key=key, data=data, cached_at=cached_at, expires_at=cached_at + self._ttl)

    def from_entry(self, entry: CacheEntry, call: PendingCall) -> CachedResult[Any]:
        """Wrap a stored *entry* for the call that read it."""
        return self.build(entry.data, entry.cached_at, entry.expires_at, entry.key, call)

    def build(
        self,
        data: Any,
        cached_at: datetime,
        expires_at: datetime,
        key: str,
        call: PendingCall,
    ) -> CachedResult[Any]:
        """Create a wrapper whose capabilities are bound to *key* and *call*."""
        storage = self._storage

        async def refresh() -> CachedResult[Any]:
            logger.debug("Refreshing cache key %r", key)
            fresh = await call.invoke()
            entry = self.new_entry(key, fresh, after=cached_at)
            storage.set(key, entry)
            return self.from_entry(entry, call)

        def invalidate() -> None:
            logger.debug("Invalidating cache key %r", key)
            storage.delete(key)

        return CachedResult(
            data,
            cached_at,
            expires_at,
            key,
            clock=self._clock,
            refresh=refresh,
            invalidate=invalidate,
        )
