"""Concrete infrastructure implementations and shared helpers."""

from .cache import DiskCache
from .feedback_store import CsvFeedbackStore, InMemoryFeedbackStore
from .filesystem import LocalFileSystem
from .http import CachedHttpClient, build_profile_api_client
from .periodic import PeriodicTask, SystemClock
from .profile_store import HttpProfileStore, JsonProfileStore
from .resilience import CircuitBreaker, RateLimiter, RetryPolicy

__all__ = [
    "CachedHttpClient",
    "CircuitBreaker",
    "CsvFeedbackStore",
    "DiskCache",
    "HttpProfileStore",
    "InMemoryFeedbackStore",
    "JsonProfileStore",
    "LocalFileSystem",
    "PeriodicTask",
    "RateLimiter",
    "RetryPolicy",
    "SystemClock",
    "build_profile_api_client",
]
