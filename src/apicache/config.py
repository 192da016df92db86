"""Configuration resolution with XDG paths and environment overrides.

This module handles the configuration that lives outside code:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apicache/`` on macOS and Windows. See :func:`get_cache_dir`.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  overrides, ``APICACHE_*`` environment variables, and built-in defaults
  into a validated :class:`~apicache.models.CacheConfig`.

Environment variables:

``APICACHE_TTL``
    Entry lifetime in seconds (float).
``APICACHE_METHODS``
    Comma-separated list of cacheable verbs, e.g. ``GET,POST``.
``APICACHE_MAX_SIZE``
    Maximum number of in-memory entries; empty or ``0`` means unbounded.
``APICACHE_DIR``
    Directory used by the ``apicache`` command for its disk store.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from apicache.exceptions import ConfigError
from apicache.models import CacheConfig

_APP_NAME = "apicache"
_ENV_PREFIX = "APICACHE_"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows XDG Base Directory conventions (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/apicache/`` (default ``~/.cache/apicache/``).
    On macOS/Windows: ``~/.apicache/cache/``.

    Returns:
        Absolute path to the cache directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CACHE_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".cache"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_cache_dir(explicit: Optional[str | Path] = None) -> Path:
    """Pick the disk store directory: *explicit*, then ``APICACHE_DIR``, then the default."""
    if explicit:
        return Path(explicit)
    env_value = os.environ.get(f"{_ENV_PREFIX}DIR", "")
    if env_value:
        return Path(env_value)
    return get_cache_dir()


# --- Precedence resolution ---


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Read ``APICACHE_*`` variables into CacheConfig field values."""
    values: dict[str, Any] = {}

    ttl = environ.get(f"{_ENV_PREFIX}TTL", "").strip()
    if ttl:
        try:
            values["ttl"] = float(ttl)
        except ValueError:
            raise ConfigError(f"{_ENV_PREFIX}TTL must be a number, got {ttl!r}") from None

    methods = environ.get(f"{_ENV_PREFIX}METHODS", "").strip()
    if methods:
        values["methods"] = [m for m in methods.split(",") if m.strip()]

    max_size = environ.get(f"{_ENV_PREFIX}MAX_SIZE", "").strip()
    if max_size:
        try:
            size = int(max_size)
        except ValueError:
            raise ConfigError(
                f"{_ENV_PREFIX}MAX_SIZE must be an integer, got {max_size!r}"
            ) from None
        values["max_size"] = size or None

    return values


def resolve_config(
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> CacheConfig:
    """Resolve the effective cache configuration.

    Precedence (highest first): keyword *overrides* whose value is not
    ``None``, then ``APICACHE_*`` environment variables, then the defaults
    declared on :class:`~apicache.models.CacheConfig`.

    Args:
        environ: Mapping to read variables from. Defaults to ``os.environ``.
        **overrides: Explicit ``ttl``, ``methods`` or ``max_size`` values.

    Returns:
        A validated :class:`~apicache.models.CacheConfig`.

    Raises:
        ConfigError: If an override or environment value is invalid.

    Example::

        config = resolve_config(ttl=60)
        plugin = CachePlugin.from_config(config)
    """
    values = _from_env(os.environ if environ is None else environ)
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return CacheConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid cache configuration: {exc}") from exc
