"""Persistent storage backed by :mod:`diskcache`.

Entries are pickled :class:`~apicache.models.CacheEntry` objects kept in a
:class:`diskcache.Cache` directory, so cached results survive process
restarts. The directory is bounded in bytes rather than entries: diskcache
culls least-recently-used entries once ``size_limit`` is exceeded.

Read failures (a corrupt database or an entry that no longer unpickles)
degrade to a cache miss and are logged. Write, list and count failures raise
:class:`~apicache.exceptions.StorageError`.
"""

from __future__ import annotations

import logging
import pickle
import sqlite3
from pathlib import Path
from typing import Any, Optional

import diskcache

from apicache.exceptions import StorageError
from apicache.models import CacheEntry
from apicache.storage.base import CacheStorage

logger = logging.getLogger(__name__)

DEFAULT_SIZE_LIMIT = 2**30
"""One gibibyte, diskcache's own default."""

# Unpickling an entry whose class moved or was renamed raises AttributeError or ImportError.
_READ_ERRORS = (
    OSError,
    sqlite3.Error,
    pickle.UnpicklingError,
    EOFError,
    AttributeError,
    ImportError,
    diskcache.Timeout,
)
_LIST_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)
_WRITE_ERRORS = (OSError, sqlite3.Error, pickle.PicklingError, diskcache.Timeout)


class DiskCacheStorage(CacheStorage):
    """Disk-backed storage for cache entries.

    Args:
        directory: Root directory for the cache. A ``responses/``
            subdirectory is created inside it.
        size_limit: Upper bound on the on-disk size in bytes.

    Example::

        with DiskCacheStorage("/tmp/api-cache") as storage:
            plugin = CachePlugin(storage=storage, ttl=600)
    """

    def __init__(self, directory: str | Path, size_limit: int = DEFAULT_SIZE_LIMIT) -> None:
        self._directory = Path(directory)
        self._cache = diskcache.Cache(
            str(self._directory / "responses"),
            size_limit=size_limit,
            eviction_policy="least-recently-used",
        )

    @property
    def directory(self) -> Path:
        """The directory holding the diskcache database."""
        return self._directory / "responses"

    def get(self, key: str) -> Optional[CacheEntry]:
        try:
            value = self._cache.get(key)
        except _READ_ERRORS as exc:
            logger.warning("Reading cache key %r failed, treating as a miss: %s", key, exc)
            return None
        if value is not None and not isinstance(value, CacheEntry):
            logger.warning("Ignoring foreign value stored under cache key %r", key)
            return None
        return value

    def set(self, key: str, entry: CacheEntry) -> None:
        try:
            self._cache.set(key, entry)
        except _WRITE_ERRORS as exc:
            raise StorageError(f"Failed to write cache key {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._cache.delete(key)
        except _WRITE_ERRORS as exc:
            raise StorageError(f"Failed to delete cache key {key!r}: {exc}") from exc

    def clear(self) -> None:
        try:
            self._cache.clear()
        except _WRITE_ERRORS as exc:
            raise StorageError(f"Failed to clear cache: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            return [key for key in self._cache.iterkeys() if isinstance(key, str)]
        except _LIST_ERRORS as exc:
            raise StorageError(f"Failed to list cache keys: {exc}") from exc

    def __len__(self) -> int:
        try:
            return len(self._cache)
        except _LIST_ERRORS as exc:
            raise StorageError(f"Failed to count cache entries: {exc}") from exc

    def __contains__(self, key: object) -> bool:
        try:
            return key in self._cache
        except _LIST_ERRORS as exc:
            logger.warning("Checking cache key %r failed, treating as absent: %s", key, exc)
            return False

    def stats(self) -> dict[str, Any]:
        """Return storage statistics.

        Returns:
            A ``dict`` with ``size`` (number of entries), ``directory``
            (str path), and ``volume`` (estimated bytes on disk).
        """
        return {
            "size": len(self),
            "directory": str(self.directory),
            "volume": self._cache.volume(),
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()

    def __enter__(self) -> DiskCacheStorage:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
