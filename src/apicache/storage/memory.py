"""Default in-process storage with least-recently-used eviction.

Entries live in an :class:`~collections.OrderedDict` ordered oldest-first
by access. A read hit or a write moves the key to the most-recently-used
end; when a new key arrives and the store already holds ``max_size``
entries, the key at the least-recently-used end is dropped first. Ties are
broken strictly by access history, with no secondary ranking.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Optional

from apicache.models import CacheEntry
from apicache.storage.base import CacheStorage

logger = logging.getLogger(__name__)


class InMemoryCacheStorage(CacheStorage):
    """Bounded, thread-safe in-memory storage.

    Every operation that reads and then writes the access order (promotion
    on :meth:`get`, eviction then insertion on :meth:`set`) runs under a
    single per-instance lock, so each key holds one entry and one LRU
    position at all times.

    Args:
        max_size: Maximum number of entries. ``None`` means unbounded.

    Example::

        storage = InMemoryCacheStorage(max_size=2)
        storage.set("k1", e1)
        storage.set("k2", e2)
        storage.get("k1")        # k1 is now most recently used
        storage.set("k3", e3)    # evicts k2
    """

    def __init__(self, max_size: Optional[int] = None) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

    @property
    def max_size(self) -> Optional[int]:
        """The configured entry limit, or ``None`` when unbounded."""
        return self._max_size

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def set(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif self._max_size is not None and len(self._entries) >= self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted least recently used key %r", evicted)
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        """Return stored keys, least recently used first."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        # Membership checks do not count as an access.
        with self._lock:
            return key in self._entries
