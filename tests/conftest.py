"""Shared test fixtures for apicache.

Provides a controllable clock, a counting origin operation, and output
state isolation. These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from apicache.models import CallContext
from apicache.output import reset_output


EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Clock whose current time only moves when a test advances it."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    def at(self, seconds: float) -> datetime:
        """Return the instant *seconds* after the clock's start."""
        return EPOCH + timedelta(seconds=seconds)


class CountingOrigin:
    """Async origin returning ``v1``, ``v2``, ... and recording every call."""

    def __init__(self, prefix: str = "v") -> None:
        self.prefix = prefix
        self.calls: list[tuple[Any, CallContext]] = []
        self.fail_with: Exception | None = None

    async def __call__(self, input: Any, context: CallContext) -> Any:
        self.calls.append((input, context))
        if self.fail_with is not None:
            raise self.fail_with
        return f"{self.prefix}{len(self.calls)}"

    @property
    def call_count(self) -> int:
        return len(self.calls)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Time and origin fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    """A clock frozen at 2024-01-01T00:00:00Z until advanced."""
    return FakeClock()


@pytest.fixture
def origin() -> CountingOrigin:
    """An origin operation that counts its invocations."""
    return CountingOrigin()


@pytest.fixture
def get_users() -> CallContext:
    """Context of a ``GET /users`` call."""
    return CallContext(verb="GET", path="/users", base_url="https://api.example.com")
