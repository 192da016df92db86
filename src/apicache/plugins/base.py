"""Abstract base class for apicache plugins.

Every plugin must subclass :class:`Plugin` and implement the :attr:`name`
property. The remaining hooks (``wrap_handler``, ``cleanup``) are
optional -- default implementations are no-ops so plugins only override
what they need.

A plugin takes part in a call by wrapping the *handler* that serves it. A
handler has the same calling convention as an origin operation,
``(input, context) -> awaitable result``, so wrappers stack: each plugin
receives the handler produced by the plugins registered after it.

Example:
    Minimal plugin that logs every call::

        class TracePlugin(Plugin):
            @property
            def name(self) -> str:
                return "trace"

            def wrap_handler(self, handler):
                async def traced(input, context):
                    logger.info("%s %s", context.verb, context.path)
                    return await handler(input, context)
                return traced
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from apicache.models import CallContext

Handler = Callable[[Any, CallContext], Awaitable[Any]]
"""Calling convention shared by origin operations and wrapped handlers."""


class Plugin(ABC):
    """Base class for all apicache plugins.

    The plugin lifecycle is:

    1. Instantiation -- plugins are constructed explicitly with their
       configuration and handed to the host (see
       :class:`~apicache.client.AsyncClient`).
    2. Registration -- :meth:`PluginManager.load_plugin
       <apicache.plugins.manager.PluginManager.load_plugin>` files the plugin
       under :attr:`name`.
    3. :meth:`wrap_handler` -- called once per host call path.
    4. :meth:`cleanup` -- called once during shutdown.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique plugin name the host files the plugin under.

        Returns:
            A short identifier (e.g. ``"cache"``).
        """
        ...

    @property
    def version(self) -> str:
        """Return the plugin version string. Defaults to ``"0.1.0"``."""
        return "0.1.0"

    @property
    def description(self) -> str:
        """Return a one-line description. Defaults to ``""``."""
        return ""

    def wrap_handler(self, handler: Handler) -> Handler:
        """Return a handler that serves calls in place of *handler*.

        The returned handler must keep *handler*'s calling convention. It
        may short-circuit (e.g. answer from a cache) or delegate to
        *handler*. The default returns *handler* unchanged.

        Args:
            handler: The next handler in the chain, ending at the origin.
        """
        return handler

    def cleanup(self) -> None:
        """Called once during shutdown to release plugin resources."""
