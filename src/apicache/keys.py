"""Cache key derivation.

A cache key is a plain string built from the request verb, the request
path, and the call input. The default rule is::

    f"{verb}:{path}:{json.dumps(input)}"

with an empty third segment when ``input`` is ``None``. Property order
inside ``input`` is preserved, not sorted: ``{"a": 1, "b": 2}`` and
``{"b": 2, "a": 1}`` produce different keys. Callers that need those to
share an entry supply their own generator.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Callable

from pydantic import BaseModel

KeyGenerator = Callable[[str, str, Any], str]
"""Signature of a key generator: ``(verb, path, input) -> key``."""

KEY_SEPARATOR = ":"


def _json_default(value: Any) -> Any:
    """Make values the :mod:`json` module cannot encode serialisable."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        # Set iteration order varies with PYTHONHASHSEED.
        return sorted(value, key=repr)
    return str(value)


def serialize_input(input: Any) -> str:
    """Return the textual form of *input* used inside cache keys.

    Args:
        input: The call input. ``None`` means the call had no input.

    Returns:
        Compact JSON for *input*, or ``""`` when *input* is ``None``.
    """
    if input is None:
        return ""
    return json.dumps(input, separators=(",", ":"), default=_json_default)


def default_key_generator(verb: str, path: str, input: Any) -> str:
    """Build the default cache key for a call.

    Example::

        >>> default_key_generator("GET", "/users", {"page": 2})
        'GET:/users:{"page":2}'
        >>> default_key_generator("GET", "/users", None)
        'GET:/users:'
    """
    return KEY_SEPARATOR.join((verb, path, serialize_input(input)))
