"""Exports for test fakes."""

from .cache import InMemoryCache
from .clock import FakeClock
from .filesystem import InMemoryFileSystem
from .http import FakeHttpClient, FakeResponse, FakeSession
from .profiles import FakeProfileStore
from .resilience import FakeCircuitBreaker, FakeRateLimiter

__all__ = [
    "FakeCircuitBreaker",
    "FakeClock",
    "FakeHttpClient",
    "FakeProfileStore",
    "FakeRateLimiter",
    "FakeResponse",
    "FakeSession",
    "InMemoryCache",
    "InMemoryFileSystem",
]
