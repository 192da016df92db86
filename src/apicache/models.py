"""Canonical models shared across all apicache modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration** -- validated with Pydantic v2:
    :class:`CacheConfig` holds the serialisable options of a
    :class:`~apicache.plugins.cache.CachePlugin` (TTL, cacheable methods,
    maximum entry count).

**In-process records** -- plain frozen dataclasses, never serialised by the
core itself:
    :class:`CacheEntry` is the unit a storage backend holds, and
    :class:`CallContext` describes the call an origin operation serves.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_TTL_SECONDS = 300
"""How long an entry stays fresh when no ``ttl`` is configured."""

MAX_TTL_SECONDS = 100 * 365 * 24 * 60 * 60
"""Upper bound on ``ttl`` (about a century), so expiry times stay within the
:class:`~datetime.datetime` range."""

DEFAULT_METHODS = ("GET",)
"""Verbs cached when no ``methods`` are configured."""


class CacheConfig(BaseModel):
    """Options controlling what a cache plugin stores and for how long.

    Callables (key generator, storage backend, clock) are not part of the
    model; they are passed to
    :class:`~apicache.plugins.cache.CachePlugin` as keyword arguments.

    Example::

        CacheConfig(ttl=600, methods=["get", "post"], max_size=100)
        # methods normalised to ["GET", "POST"]
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ttl: float = Field(
        default=DEFAULT_TTL_SECONDS,
        ge=0,
        le=MAX_TTL_SECONDS,
        allow_inf_nan=False,
        description="Seconds an entry stays fresh after it is written",
    )
    methods: list[str] = Field(
        default_factory=lambda: list(DEFAULT_METHODS),
        description="Request verbs whose results are cached",
    )
    max_size: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of entries; None means unbounded",
    )

    @field_validator("methods")
    @classmethod
    def _normalise_methods(cls, value: list[str]) -> list[str]:
        normalised: list[str] = []
        for method in value:
            upper = method.strip().upper()
            if not upper:
                raise ValueError("method names must not be empty")
            if upper not in normalised:
                normalised.append(upper)
        return normalised


@dataclass(frozen=True)
class CacheEntry:
    """A stored origin result with its freshness window.

    ``expires_at`` is fixed when the entry is written. Refreshing a key
    writes a new entry; entries are never updated in place.

    Attributes:
        key: Cache key the entry is stored under.
        data: The origin operation's result, stored as-is.
        cached_at: When the origin result was obtained.
        expires_at: ``cached_at`` plus the configured TTL.
    """

    key: str
    data: Any
    cached_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class CallContext:
    """What an origin operation is asked to serve, besides its input.

    Attributes:
        verb: Request verb (e.g. ``"GET"``).
        path: Request path relative to ``base_url``.
        base_url: Base URL of the API being called, if any.
    """

    verb: str
    path: str
    base_url: str = ""
