"""Tests for CachedResult and WrapperFactory."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from apicache.models import CallContext
from apicache.storage import InMemoryCacheStorage
from apicache.wrapper import CachedResult, PendingCall, WrapperFactory, is_stale


@pytest.fixture()
def storage() -> InMemoryCacheStorage:
    return InMemoryCacheStorage()


@pytest.fixture()
def factory(storage, clock) -> WrapperFactory:
    return WrapperFactory(storage, ttl=5, clock=clock)


@pytest.fixture()
def call(origin, get_users) -> PendingCall:
    return PendingCall(origin, None, get_users)


class TestIsStale:
    def test_not_stale_before_or_at_expiry(self, clock) -> None:
        assert is_stale(clock.at(4), clock.at(5)) is False
        assert is_stale(clock.at(5), clock.at(5)) is False

    def test_stale_strictly_after_expiry(self, clock) -> None:
        assert is_stale(clock.at(5) + timedelta(microseconds=1), clock.at(5)) is True


class TestBuild:
    def test_snapshot_fields(self, factory, call, clock) -> None:
        result = factory.build("v1", clock.at(0), clock.at(5), "GET:/users:", call)
        assert isinstance(result, CachedResult)
        assert result.data == "v1"
        assert result.cached_at == clock.at(0)
        assert result.expires_at == clock.at(5)
        assert result.key == "GET:/users:"

    def test_new_entry_stamps_ttl(self, factory, clock) -> None:
        clock.advance(10)
        entry = factory.new_entry("k", "data")
        assert entry.cached_at == clock.at(10)
        assert entry.expires_at == clock.at(15)

    def test_snapshot_fields_are_read_only(self, factory, call, clock) -> None:
        result = factory.build("v1", clock.at(0), clock.at(5), "k", call)
        with pytest.raises(AttributeError):
            result.data = "other"


class TestStaleness:
    def test_is_stale_flips_without_cache_interaction(self, factory, call, clock, origin) -> None:
        result = factory.build("v1", clock.at(0), clock.at(5), "k", call)
        assert result.is_stale is False
        clock.advance(5)
        assert result.is_stale is False
        clock.advance(1)
        assert result.is_stale is True
        assert origin.call_count == 0


class TestRefresh:
    def test_refresh_returns_new_wrapper_and_writes_entry(
        self, factory, call, clock, origin, storage
    ) -> None:
        first = factory.build("v0", clock.at(0), clock.at(5), "GET:/users:", call)
        clock.advance(2)

        refreshed = asyncio.run(first.refresh())

        assert refreshed is not first
        assert refreshed.data == "v1"
        assert refreshed.cached_at == clock.at(2)
        assert refreshed.expires_at == clock.at(7)
        assert refreshed.cached_at > first.cached_at
        assert origin.call_count == 1
        stored = storage.get("GET:/users:")
        assert stored.data == "v1"
        assert stored.cached_at == clock.at(2)

    def test_refresh_without_clock_movement_still_moves_cached_at(
        self, factory, call, clock, storage
    ) -> None:
        first = factory.build("v0", clock.at(0), clock.at(5), "k", call)

        second = asyncio.run(first.refresh())
        third = asyncio.run(second.refresh())

        assert first.cached_at < second.cached_at < third.cached_at
        assert second.cached_at == clock.at(0) + timedelta(microseconds=1)
        assert second.expires_at == second.cached_at + timedelta(seconds=5)
        assert storage.get("k").cached_at == third.cached_at

    def test_new_entry_uses_clock_when_it_is_later(self, factory, clock) -> None:
        clock.advance(3)
        entry = factory.new_entry("k", "data", after=clock.at(1))
        assert entry.cached_at == clock.at(3)

    def test_refresh_leaves_original_wrapper_untouched(self, factory, call, clock) -> None:
        first = factory.build("v0", clock.at(0), clock.at(5), "k", call)
        clock.advance(1)
        asyncio.run(first.refresh())
        assert first.data == "v0"
        assert first.cached_at == clock.at(0)

    def test_refresh_replays_original_call(self, factory, clock, origin) -> None:
        ctx = CallContext(verb="GET", path="/users/7")
        call = PendingCall(origin, {"id": 7}, ctx)
        result = factory.build("old", clock.at(0), clock.at(5), "k", call)
        asyncio.run(result.refresh())
        assert origin.calls == [({"id": 7}, ctx)]

    def test_refreshed_wrapper_can_refresh_again(self, factory, call, clock, origin) -> None:
        result = factory.build("v0", clock.at(0), clock.at(5), "k", call)
        clock.advance(1)
        second = asyncio.run(result.refresh())
        clock.advance(1)
        third = asyncio.run(second.refresh())
        assert third.data == "v2"
        assert third.cached_at == clock.at(2)
        assert origin.call_count == 2

    def test_failed_refresh_keeps_existing_entry(
        self, factory, call, clock, origin, storage
    ) -> None:
        entry = factory.new_entry("k", "v0")
        storage.set("k", entry)
        result = factory.from_entry(entry, call)
        origin.fail_with = RuntimeError("origin down")

        with pytest.raises(RuntimeError, match="origin down"):
            asyncio.run(result.refresh())

        assert storage.get("k") is entry


class TestInvalidate:
    def test_invalidate_removes_entry(self, factory, call, storage) -> None:
        entry = factory.new_entry("k", "v0")
        storage.set("k", entry)
        result = factory.from_entry(entry, call)

        assert result.invalidate() is None
        assert storage.get("k") is None

    def test_earlier_wrappers_stay_valid(self, factory, call, storage, clock) -> None:
        entry = factory.new_entry("k", "v0")
        storage.set("k", entry)
        earlier = factory.from_entry(entry, call)
        later = factory.from_entry(entry, call)

        later.invalidate()

        assert earlier.data == "v0"
        assert earlier.cached_at == clock.at(0)
        assert earlier.is_stale is False

    def test_invalidate_missing_entry_is_noop(self, factory, call, clock) -> None:
        result = factory.build("v0", clock.at(0), clock.at(5), "gone", call)
        result.invalidate()
        result.invalidate()
