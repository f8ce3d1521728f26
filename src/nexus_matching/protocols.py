"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces that engine components depend on,
enabling isolated unit testing with in-memory implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import pandas as pd

    from .domain.models import Candidate, FeedbackRecord


@runtime_checkable
class HttpClient(Protocol):
    """JSON GET client used to read the profile API."""

    def get_json(self, url: str, cache_key: str | None = None) -> dict[str, object]:
        """Fetch JSON from URL, optionally using cache.

        Args:
            url: The URL to fetch.
            cache_key: Optional cache key, e.g. ``expertise:<id>:<updatedAt>``. A cached
                value is returned without a request.

        Returns:
            Parsed JSON response as dict.

        Raises:
            RequestException: On network or HTTP errors.
        """
        ...


@runtime_checkable
class Cache(Protocol):
    """Key/value store for profile API responses."""

    def get(self, key: str) -> dict[str, object] | None:
        """Retrieve cached value by key, or None if not present."""
        ...

    def set(self, key: str, value: dict[str, object]) -> None:
        """Store value in cache with given key."""
        ...

    def has(self, key: str) -> bool:
        """Check if key exists in cache."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Abstract filesystem for engine data files."""

    def read_csv(self, path: Path) -> pd.DataFrame:
        """Read CSV file into DataFrame."""
        ...

    def append_csv(self, df: pd.DataFrame, path: Path) -> None:
        """Append DataFrame rows to CSV file (create if missing)."""
        ...

    def read_json(self, path: Path) -> dict[str, object]:
        """Read JSON file."""
        ...

    def write_json(self, data: Mapping[str, object], path: Path) -> None:
        """Write JSON file."""
        ...

    def read_text(self, path: Path) -> str:
        """Read text file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        ...

    def mkdir(self, path: Path, parents: bool = True) -> None:
        """Create directory."""
        ...


@runtime_checkable
class RateLimiter(Protocol):
    """Abstract rate limiter for outbound requests."""

    def wait_if_needed(self) -> None:
        """Block until a request is allowed."""
        ...


@runtime_checkable
class CircuitBreaker(Protocol):
    """Abstract circuit breaker for outbound requests."""

    def check(self) -> None:
        """Raise if the circuit is open."""
        ...

    def record_success(self) -> None:
        """Record a successful request."""
        ...

    def record_failure(self) -> None:
        """Record a failed request."""
        ...


@runtime_checkable
class RetryPolicy(Protocol):
    """Abstract retry policy for transient failures."""

    max_retries: int
    retry_statuses: tuple[int, ...]
    retry_exceptions: tuple[type[Exception], ...]

    def compute_backoff(self, attempt: int, retry_after: int | None = None) -> float:
        """Return a delay for the next retry attempt."""
        ...


@runtime_checkable
class ProfileStore(Protocol):
    """Read-only source of professional profiles."""

    def list_candidates(self) -> list[Candidate]:
        """Return every readable profile.

        Raises:
            DataUnavailableError: If the store cannot be reached at all.
        """
        ...


@runtime_checkable
class FeedbackStore(Protocol):
    """Append-only store of feedback records and the scores served with them."""

    def append(self, record: FeedbackRecord, scores: Mapping[str, float] | None) -> None:
        """Persist one record; ``scores`` are the dimension scores served, if known."""
        ...

    def load_since(self, since: datetime) -> pd.DataFrame:
        """Return records at or after ``since``, one row each.

        Columns: ``requirement_signature``, ``candidate_id``, ``booking_success``,
        ``rating``, ``recorded_at`` and one column per dimension (NaN when unknown).
        """
        ...


@runtime_checkable
class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        ...
