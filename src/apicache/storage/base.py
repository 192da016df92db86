"""Abstract base class for cache storage backends.

Backends are synchronous from the caller's point of view, even when they
are backed by slower media: the cache never awaits a storage call.

Example:
    Minimal dict-backed backend::

        class DictStorage(CacheStorage):
            def __init__(self):
                self._data = {}

            def get(self, key):
                return self._data.get(key)

            def set(self, key, entry):
                self._data[key] = entry

            def delete(self, key):
                self._data.pop(key, None)

            def clear(self):
                self._data.clear()

            def keys(self):
                return list(self._data)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from apicache.models import CacheEntry


class CacheStorage(ABC):
    """Key to :class:`~apicache.models.CacheEntry` storage contract.

    Implementations decide how entries are kept and whether the number of
    entries is bounded. Expiry is not a storage concern: backends return
    expired entries like any other, and the caller compares
    ``expires_at`` against its clock.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry stored under *key*, or ``None`` if there is none."""
        ...

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        """Store *entry* under *key*, replacing any existing entry."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the entry under *key*. Deleting a missing key is a no-op."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Return the keys of all stored entries."""
        ...

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: object) -> bool:
        return key in self.keys()
