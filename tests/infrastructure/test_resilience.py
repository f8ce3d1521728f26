"""Tests for rate limiting, circuit breaking and retry backoff."""

import time

import pytest

from nexus_matching.exceptions import CircuitBreakerOpen
from nexus_matching.infrastructure import CircuitBreaker, RateLimiter, RetryPolicy


class TestCircuitBreaker:
    """Circuit breaker state transitions."""

    def test_opens_at_threshold(self) -> None:
        cb = CircuitBreaker(threshold=3)
        cb.record_failure()
        cb.record_failure()
        assert not cb.is_open

        cb.record_failure()

        assert cb.is_open
        with pytest.raises(CircuitBreakerOpen) as exc_info:
            cb.check()
        assert exc_info.value.failure_count == 3
        assert exc_info.value.threshold == 3

    def test_success_resets_failures(self) -> None:
        cb = CircuitBreaker(threshold=3)
        cb.record_failure()
        cb.record_failure()

        cb.record_success()

        assert cb.consecutive_failures == 0
        assert cb.state == "closed"

    def test_half_open_probe_success_closes(self) -> None:
        cb = CircuitBreaker(threshold=1, recovery_timeout_seconds=0)
        cb.record_failure()

        cb.check()
        assert cb.state == "half_open"
        cb.record_success()

        assert cb.state == "closed"

    def test_half_open_probe_failure_reopens(self) -> None:
        cb = CircuitBreaker(threshold=5, recovery_timeout_seconds=0)
        for _ in range(5):
            cb.record_failure()
        cb.check()

        cb.record_failure()

        assert cb.state == "open"

    def test_half_open_limits_probes(self) -> None:
        cb = CircuitBreaker(threshold=1, recovery_timeout_seconds=0, half_open_max_calls=1)
        cb.record_failure()
        cb.check()

        with pytest.raises(CircuitBreakerOpen):
            cb.check()

    def test_reset_closes(self) -> None:
        cb = CircuitBreaker(threshold=1, recovery_timeout_seconds=60)
        cb.record_failure()

        cb.reset()

        cb.check()
        assert cb.state == "closed"


class TestRateLimiter:
    """Rate limiter pacing."""

    def test_enforces_minimum_delay(self) -> None:
        limiter = RateLimiter(max_rpm=600, min_delay_seconds=0.05)

        start = time.monotonic()
        limiter.wait_if_needed()
        limiter.wait_if_needed()

        assert time.monotonic() - start >= 0.05

    def test_counts_requests_in_current_minute(self) -> None:
        limiter = RateLimiter(max_rpm=10, min_delay_seconds=0)
        for _ in range(4):
            limiter.wait_if_needed()

        assert limiter.requests_this_minute == 4


class TestRetryPolicy:
    """Retry backoff computation."""

    def test_backoff_grows_exponentially_and_is_capped(self) -> None:
        policy = RetryPolicy(backoff_factor=0.5, max_backoff_seconds=3.0, jitter_seconds=0)

        assert [policy.compute_backoff(attempt) for attempt in range(4)] == [0.5, 1.0, 2.0, 3.0]

    def test_retry_after_is_a_floor(self) -> None:
        policy = RetryPolicy(backoff_factor=0.1, jitter_seconds=0)

        assert policy.compute_backoff(0, retry_after=5) == 5.0
