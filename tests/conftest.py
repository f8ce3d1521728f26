"""Shared pytest fixtures.

All tests are network-isolated: socket connections are blocked by default.
"""

from __future__ import annotations

import socket
from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from tests.fakes import FakeClock, InMemoryCache, InMemoryFileSystem
from tests.support.errors import NetworkIsolationError


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    _ = (self, kwargs)
    raise NetworkIsolationError(repr(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Block all network access in tests.

    Tests that need HTTP should use FakeHttpClient, FakeSession or MagicMock.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture
def in_memory_fs() -> InMemoryFileSystem:
    """Provide an in-memory filesystem for tests."""
    return InMemoryFileSystem()


@pytest.fixture
def in_memory_cache() -> InMemoryCache:
    """Provide an in-memory cache for tests."""
    return InMemoryCache()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock pinned to a fixed UTC instant."""
    return FakeClock(datetime(2024, 6, 1, 9, 0, tzinfo=UTC))
