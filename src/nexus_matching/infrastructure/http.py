"""HTTP client for the professional profile API.

Usage example:
    import requests
    from pathlib import Path

    from nexus_matching.infrastructure.cache import DiskCache
    from nexus_matching.infrastructure.http import CachedHttpClient
    from nexus_matching.infrastructure.resilience import CircuitBreaker, RateLimiter

    client = CachedHttpClient(
        session=requests.Session(),
        cache=DiskCache(Path("data/cache/profiles")),
        rate_limiter=RateLimiter(),
        circuit_breaker=CircuitBreaker(),
        headers={"Authorization": "Bearer <key>"},
    )
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any, cast

import requests

from ..exceptions import AuthenticationError, RateLimitError
from ..observability import get_logger
from ..protocols import Cache, CircuitBreaker, RateLimiter, RetryPolicy
from .cache import DiskCache
from .resilience import CircuitBreaker as CircuitBreakerImpl
from .resilience import RateLimiter as RateLimiterImpl
from .resilience import RetryPolicy as RetryPolicyImpl

logger = get_logger("nexus_matching.http")

_MAX_BODY_CHARS = 300


def _parse_retry_after(headers: Mapping[str, str] | None) -> int | None:
    """Parse a Retry-After header (seconds or HTTP date) into seconds."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0, int((when - datetime.now(UTC)).total_seconds()))


def _response_details(response: requests.Response) -> str:
    """Return a compact status/body summary for error reporting."""
    body = " ".join(response.text.split())
    if len(body) > _MAX_BODY_CHARS:
        body = body[:_MAX_BODY_CHARS] + "..."
    return f"status={response.status_code}, body={body}"


class CachedHttpClient:
    """JSON GET client with caching, rate limiting, retries and a circuit breaker.

    - 401/403 raise AuthenticationError immediately.
    - Retryable statuses and connection errors back off and retry.
    - Exhausted 429s raise RateLimitError.
    - Every failure is recorded by the circuit breaker.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        cache: Cache,
        rate_limiter: RateLimiter | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        retry_policy: RetryPolicy | None = None,
        headers: Mapping[str, str] | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        self.session = session
        self.cache = cache
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiterImpl()
        self.circuit_breaker = (
            circuit_breaker if circuit_breaker is not None else CircuitBreakerImpl()
        )
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicyImpl()
        self.headers = dict(headers or {})
        self.timeout_seconds = timeout_seconds

    def get_json(self, url: str, cache_key: str | None = None) -> dict[str, Any]:
        """Fetch JSON from ``url``, serving and filling the cache when ``cache_key`` is set.

        Raises:
            AuthenticationError: If the API rejects the credentials.
            CircuitBreakerOpen: If too many consecutive failures occurred.
            RateLimitError: If rate limiting persists after retries.
            requests.RequestException: For other transport or HTTP errors.
        """
        if cache_key:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        attempt = 0
        while True:
            self.circuit_breaker.check()
            self.rate_limiter.wait_if_needed()

            try:
                response = self.session.get(
                    url, headers=self.headers, timeout=self.timeout_seconds
                )
            except self.retry_policy.retry_exceptions:
                if attempt < self.retry_policy.max_retries:
                    time.sleep(self.retry_policy.compute_backoff(attempt))
                    attempt += 1
                    continue
                self.circuit_breaker.record_failure()
                raise
            except requests.RequestException:
                self.circuit_breaker.record_failure()
                raise

            if response.status_code in (401, 403):
                self.circuit_breaker.record_failure()
                raise AuthenticationError(
                    f"Profile API rejected credentials ({_response_details(response)})"
                )

            if response.status_code in self.retry_policy.retry_statuses:
                retry_after = _parse_retry_after(response.headers)
                if attempt < self.retry_policy.max_retries:
                    logger.info(
                        "Retrying %s after status %d (attempt %d)",
                        url,
                        response.status_code,
                        attempt + 1,
                    )
                    time.sleep(self.retry_policy.compute_backoff(attempt, retry_after))
                    attempt += 1
                    continue
                self.circuit_breaker.record_failure()
                if response.status_code == 429:
                    logger.warning("Rate limited by profile API: %s", _response_details(response))
                    raise RateLimitError(retry_after or 60)
                response.raise_for_status()

            try:
                response.raise_for_status()
                data = cast(dict[str, Any], response.json())
            except (requests.HTTPError, ValueError):
                self.circuit_breaker.record_failure()
                raise

            self.circuit_breaker.record_success()
            if cache_key:
                self.cache.set(cache_key, data)
            return data


def build_profile_api_client(
    *,
    api_key: str,
    cache_dir: str | Path,
    max_rpm: int,
    min_delay_seconds: float,
    circuit_breaker_threshold: int,
    circuit_breaker_timeout_seconds: float,
    max_retries: int,
    backoff_factor: float,
    timeout_seconds: float,
) -> CachedHttpClient:
    """Wire a cached, rate-limited client for the profile API."""
    headers = {"Accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return CachedHttpClient(
        session=requests.Session(),
        cache=DiskCache(Path(cache_dir)),
        rate_limiter=RateLimiterImpl(max_rpm=max_rpm, min_delay_seconds=min_delay_seconds),
        circuit_breaker=CircuitBreakerImpl(
            threshold=circuit_breaker_threshold,
            recovery_timeout_seconds=circuit_breaker_timeout_seconds,
        ),
        retry_policy=RetryPolicyImpl(max_retries=max_retries, backoff_factor=backoff_factor),
        headers=headers,
        timeout_seconds=timeout_seconds,
    )
