"""Plugin manager -- registration, lookup, and handler composition.

:class:`PluginManager` is the host-side registry for plugins. It keeps
plugins in registration order, exposes each one as an attribute named
after it (so a host can offer ``client.plugins.cache.clear()``), and
composes every plugin's :meth:`~apicache.plugins.base.Plugin.wrap_handler`
around an origin operation.

Composition order: the first registered plugin is the outermost wrapper
and sees a call first; the origin is innermost.
"""

from __future__ import annotations

import logging
from typing import Iterable

from apicache.exceptions import PluginError
from apicache.plugins.base import Handler, Plugin

logger = logging.getLogger(__name__)


def _attribute_name(name: str) -> str:
    return name.replace("-", "_")


class PluginManager:
    """Registers plugins and builds the handler chain a host calls through.

    Example:
        Typical usage::

            manager = PluginManager([CachePlugin(ttl=60)])
            handler = manager.wrap_handler(origin)
            result = await handler(None, CallContext("GET", "/users"))
            manager.cache.invalidate("GET", "/users")
    """

    def __init__(self, plugins: Iterable[Plugin] = ()) -> None:
        self._plugins: dict[str, Plugin] = {}
        for plugin in plugins:
            self.load_plugin(plugin)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_plugin(self, plugin: Plugin) -> None:
        """Register *plugin* under its :attr:`~apicache.plugins.base.Plugin.name`.

        Handlers composed before this call do not include the new plugin;
        call :meth:`wrap_handler` again to pick it up.

        Args:
            plugin: The plugin instance to register.

        Raises:
            PluginError: If a plugin with the same name is already loaded.
        """
        name = plugin.name
        if name in self._plugins:
            raise PluginError(f"Plugin '{name}' is already loaded")
        self._plugins[name] = plugin
        logger.info("Loaded plugin '%s' v%s", name, plugin.version)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_plugin(self, name: str) -> Plugin:
        """Retrieve a loaded plugin by its registered name.

        Raises:
            PluginError: If no plugin with the given *name* is loaded.
        """
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginError(f"Plugin '{name}' is not loaded") from None

    def list_plugins(self) -> list[dict[str, str]]:
        """List all loaded plugins with their metadata.

        Returns:
            A list of dicts, each containing ``"name"``, ``"version"``, and
            ``"description"`` keys.
        """
        return [
            {
                "name": plugin.name,
                "version": plugin.version,
                "description": plugin.description,
            }
            for plugin in self._plugins.values()
        ]

    def __getattr__(self, attr: str) -> Plugin:
        # Only reached when normal attribute lookup fails.
        if attr.startswith("_"):
            raise AttributeError(attr)
        for name, plugin in self.__dict__.get("_plugins", {}).items():
            if _attribute_name(name) == attr:
                return plugin
        raise AttributeError(f"No plugin named '{attr}' is loaded")

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    # ------------------------------------------------------------------
    # Handler chain
    # ------------------------------------------------------------------

    def wrap_handler(self, handler: Handler) -> Handler:
        """Wrap *handler* with every loaded plugin.

        Args:
            handler: The origin operation.

        Returns:
            A handler with the same calling convention. With no plugins
            loaded, *handler* itself.
        """
        for plugin in reversed(list(self._plugins.values())):
            handler = plugin.wrap_handler(handler)
        return handler

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def cleanup(self) -> None:
        """Clean up all loaded plugins and reset internal state.

        Exceptions from individual plugins are logged and swallowed so that
        one plugin's failure does not prevent others from cleaning up.
        """
        for name, plugin in self._plugins.items():
            try:
                plugin.cleanup()
            except Exception as exc:
                logger.warning("Error cleaning up plugin '%s': %s", name, exc)
        self._plugins.clear()
