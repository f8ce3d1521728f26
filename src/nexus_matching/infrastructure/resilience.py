"""Resilience utilities for outbound profile reads.

The background index refresher and foreground CLI calls can share one client,
so every mutable counter here is guarded by a lock.

Usage example:
    from nexus_matching.infrastructure.resilience import CircuitBreaker, RateLimiter

    rate_limiter = RateLimiter(max_rpm=300, min_delay_seconds=0.1)
    circuit_breaker = CircuitBreaker(threshold=5)
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field
from typing import Literal, override

import requests

from ..exceptions import CircuitBreakerOpen
from ..observability import get_logger
from ..protocols import CircuitBreaker as CircuitBreakerProtocol
from ..protocols import RateLimiter as RateLimiterProtocol
from ..protocols import RetryPolicy as RetryPolicyProtocol

logger = get_logger("nexus_matching.resilience")

BreakerState = Literal["closed", "open", "half_open"]


@dataclass
class RateLimiter(RateLimiterProtocol):
    """Per-minute request cap plus a minimum gap between requests."""

    max_rpm: int = 300
    min_delay_seconds: float = 0.1
    requests_this_minute: int = field(default=0, init=False)
    minute_start: float = field(default_factory=time.monotonic, init=False)
    last_request_time: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @override
    def wait_if_needed(self) -> None:
        with self._lock:
            now = time.monotonic()
            since_last = now - self.last_request_time
            if since_last < self.min_delay_seconds:
                time.sleep(self.min_delay_seconds - since_last)
                now = time.monotonic()

            if self.max_rpm > 0:
                if now - self.minute_start >= 60:
                    self.requests_this_minute = 0
                    self.minute_start = now
                elif self.requests_this_minute >= self.max_rpm:
                    time.sleep(60 - (now - self.minute_start) + 0.1)
                    self.requests_this_minute = 0
                    self.minute_start = time.monotonic()
                self.requests_this_minute += 1

            self.last_request_time = time.monotonic()


@dataclass
class CircuitBreaker(CircuitBreakerProtocol):
    """Stops calling the profile API after ``threshold`` consecutive failures.

    After ``recovery_timeout_seconds`` the breaker admits a limited number of
    probe calls (half-open); one success closes it, one failure reopens it.
    """

    threshold: int = 5
    recovery_timeout_seconds: float = 60.0
    half_open_max_calls: int = 1
    consecutive_failures: int = field(default=0, init=False)
    state: BreakerState = field(default="closed", init=False)
    open_until: float | None = field(default=None, init=False)
    half_open_calls: int = field(default=0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    @override
    def record_success(self) -> None:
        with self._lock:
            self._close()

    @override
    def record_failure(self) -> None:
        with self._lock:
            self.consecutive_failures += 1
            if self.state == "half_open" or self.consecutive_failures >= self.threshold:
                self._open(time.monotonic())

    @override
    def check(self) -> None:
        with self._lock:
            if self.state == "open":
                if self.open_until is not None and time.monotonic() >= self.open_until:
                    self.state = "half_open"
                    self.half_open_calls = 0
                else:
                    raise CircuitBreakerOpen(self.consecutive_failures, self.threshold)
            if self.state == "half_open":
                if self.half_open_calls >= self.half_open_max_calls:
                    raise CircuitBreakerOpen(self.consecutive_failures, self.threshold)
                self.half_open_calls += 1

    def reset(self) -> None:
        with self._lock:
            self._close()

    def _close(self) -> None:
        self.consecutive_failures = 0
        self.state = "closed"
        self.open_until = None
        self.half_open_calls = 0

    def _open(self, now: float) -> None:
        if self.state != "open":
            logger.warning(
                "Profile API circuit opened after %d consecutive failures",
                self.consecutive_failures,
            )
        self.state = "open"
        self.open_until = now + self.recovery_timeout_seconds
        self.half_open_calls = 0


@dataclass
class RetryPolicy(RetryPolicyProtocol):
    """Exponential backoff with jitter for transient failures."""

    max_retries: int = 3
    backoff_factor: float = 0.5
    max_backoff_seconds: float = 30.0
    jitter_seconds: float = 0.1
    retry_statuses: tuple[int, ...] = (429, 500, 502, 503, 504)
    retry_exceptions: tuple[type[Exception], ...] = (requests.Timeout, requests.ConnectionError)

    @override
    def compute_backoff(self, attempt: int, retry_after: int | None = None) -> float:
        """Compute the delay before ``attempt``; ``Retry-After`` acts as a floor."""
        delay = min(self.max_backoff_seconds, self.backoff_factor * (2**attempt))
        if retry_after is not None:
            delay = max(delay, float(retry_after))
        if self.jitter_seconds > 0:
            delay += random.uniform(0.0, self.jitter_seconds)
        return float(delay)
