"""Tests for the plugin base class and manager."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from apicache.exceptions import PluginError
from apicache.models import CallContext
from apicache.plugins import CachePlugin
from apicache.plugins.base import Handler, Plugin
from apicache.plugins.manager import PluginManager


# ---------------------------------------------------------------------------
# Test helpers -- concrete Plugin subclasses
# ---------------------------------------------------------------------------


class MinimalPlugin(Plugin):
    """Smallest valid plugin -- only implements the required ``name`` property."""

    @property
    def name(self) -> str:
        return "minimal"


class TagPlugin(Plugin):
    """Appends its tag to string results and records the order it ran in."""

    def __init__(self, tag: str, trail: list[str]) -> None:
        self._tag = tag
        self._trail = trail

    @property
    def name(self) -> str:
        return f"tag-{self._tag}"

    def wrap_handler(self, handler: Handler) -> Handler:
        async def tagged(input: Any, context: CallContext) -> Any:
            self._trail.append(self._tag)
            return f"{await handler(input, context)}+{self._tag}"

        return tagged


class FailingCleanupPlugin(Plugin):
    @property
    def name(self) -> str:
        return "failing-cleanup"

    def cleanup(self) -> None:
        raise RuntimeError("cleanup failed")


class CleanupTracker(Plugin):
    def __init__(self) -> None:
        self.cleaned = False

    @property
    def name(self) -> str:
        return "tracker"

    def cleanup(self) -> None:
        self.cleaned = True


async def _origin(input: Any, context: CallContext) -> str:
    return "origin"


def _run(handler: Handler) -> Any:
    return asyncio.run(handler(None, CallContext(verb="GET", path="/")))


# ---------------------------------------------------------------------------
# Plugin base class
# ---------------------------------------------------------------------------


class TestPluginBase:
    def test_cannot_instantiate_without_name(self) -> None:
        with pytest.raises(TypeError):
            Plugin()  # type: ignore[abstract]

    def test_defaults(self) -> None:
        plugin = MinimalPlugin()
        assert plugin.version == "0.1.0"
        assert plugin.description == ""
        assert plugin.wrap_handler(_origin) is _origin
        plugin.cleanup()


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


class TestLoading:
    def test_load_and_get(self) -> None:
        manager = PluginManager()
        plugin = MinimalPlugin()
        manager.load_plugin(plugin)
        assert manager.get_plugin("minimal") is plugin
        assert "minimal" in manager
        assert len(manager) == 1

    def test_constructor_loads_plugins(self) -> None:
        cache = CachePlugin()
        manager = PluginManager([cache, MinimalPlugin()])
        assert manager.get_plugin("cache") is cache

    def test_duplicate_name_rejected(self) -> None:
        manager = PluginManager([MinimalPlugin()])
        with pytest.raises(PluginError, match="already loaded"):
            manager.load_plugin(MinimalPlugin())

    def test_unknown_plugin(self) -> None:
        with pytest.raises(PluginError, match="not loaded"):
            PluginManager().get_plugin("nope")

    def test_load_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="apicache.plugins.manager"):
            PluginManager([MinimalPlugin()])
        assert "Loaded plugin 'minimal' v0.1.0" in caplog.text

    def test_list_plugins(self) -> None:
        manager = PluginManager([CachePlugin()])
        assert manager.list_plugins() == [
            {
                "name": "cache",
                "version": "0.1.0",
                "description": "Serve repeated calls from a TTL cache with LRU eviction",
            }
        ]


class TestNamespace:
    def test_plugin_reachable_as_attribute(self) -> None:
        cache = CachePlugin()
        manager = PluginManager([cache])
        assert manager.cache is cache

    def test_dashes_map_to_underscores(self) -> None:
        trail: list[str] = []
        plugin = TagPlugin("a", trail)
        manager = PluginManager([plugin])
        assert manager.tag_a is plugin

    def test_unknown_attribute(self) -> None:
        with pytest.raises(AttributeError, match="No plugin named 'cache'"):
            PluginManager().cache


class TestHandlerChain:
    def test_no_plugins_returns_origin(self) -> None:
        assert PluginManager().wrap_handler(_origin) is _origin

    def test_first_registered_is_outermost(self) -> None:
        trail: list[str] = []
        manager = PluginManager([TagPlugin("outer", trail), TagPlugin("inner", trail)])
        result = _run(manager.wrap_handler(_origin))
        assert trail == ["outer", "inner"]
        assert result == "origin+inner+outer"

    def test_cache_plugin_in_chain_short_circuits(self) -> None:
        trail: list[str] = []
        manager = PluginManager([CachePlugin(), TagPlugin("inner", trail)])
        handler = manager.wrap_handler(_origin)
        first = _run(handler)
        second = _run(handler)
        assert first.data == second.data == "origin+inner"
        assert trail == ["inner"]


class TestCleanup:
    def test_cleanup_continues_after_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        tracker = CleanupTracker()
        manager = PluginManager([FailingCleanupPlugin(), tracker])
        with caplog.at_level(logging.WARNING, logger="apicache.plugins.manager"):
            manager.cleanup()
        assert tracker.cleaned is True
        assert "cleanup failed" in caplog.text
        assert len(manager) == 0
