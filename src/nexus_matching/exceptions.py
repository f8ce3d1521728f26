"""Custom exceptions for the matching engine.

These exceptions separate caller mistakes (validation) from data outages and
per-candidate faults so each can be handled at the right boundary.
"""

from __future__ import annotations


class MatchingError(Exception):
    """Base exception for all matching engine errors."""

    pass


class ValidationError(MatchingError, ValueError):
    """Raised when a requirement or payload is malformed or unresolvable.

    Rejected synchronously; never reaches scoring.
    """

    pass


class UnknownSectorError(ValidationError):
    """Raised when a requirement names a sector the taxonomy does not know."""

    def __init__(self, sector_id: str) -> None:
        self.sector_id = sector_id
        super().__init__(f"Unknown sector: {sector_id!r}.")


class InvalidEnumValueError(ValidationError):
    """Raised when an enum-valued field holds an unsupported value."""

    def __init__(self, field: str, value: object, allowed: tuple[str, ...]) -> None:
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Invalid value {value!r} for {field}. Expected one of: {', '.join(allowed)}."
        )


class MalformedFeedbackError(ValidationError):
    """Raised when a feedback submission cannot be recorded."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Malformed feedback: {detail}")


class SectorNotFoundError(MatchingError, LookupError):
    """Raised by the taxonomy store for an unknown sector id."""

    def __init__(self, sector_id: str) -> None:
        self.sector_id = sector_id
        super().__init__(f"Sector not found: {sector_id!r}.")


class DataUnavailableError(MatchingError):
    """Raised when candidate or taxonomy data is empty or unreachable.

    The ranking boundary converts this into an empty, degraded result.
    """

    pass


class ComputationError(MatchingError):
    """Raised when a single candidate cannot be scored.

    The ranking pass skips that candidate and continues.
    """

    def __init__(self, candidate_id: str, detail: str) -> None:
        self.candidate_id = candidate_id
        super().__init__(f"Cannot score candidate {candidate_id!r}: {detail}")


class InsufficientFeedbackError(MatchingError):
    """Raised when an adjustment window holds too few usable feedback records."""

    def __init__(self, available: int, required: int) -> None:
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient feedback for weight adjustment: {available} usable records "
            f"(minimum {required})."
        )


class ProfilePayloadError(MatchingError):
    """Raised when the profile store returns a payload with an unexpected shape."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"Invalid profile payload from {source}: {detail}")


class WeightsFileError(MatchingError):
    """Raised when a persisted weight vector cannot be loaded."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Invalid weights file {path}: {detail}")


class SectorCatalogFileNotFoundError(MatchingError):
    """Raised when a configured sector catalogue file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Sector catalogue file not found: {path}")


class SectorCatalogValidationError(MatchingError):
    """Raised when a sector catalogue file fails validation."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Sector catalogue file {path} is invalid: {detail}")


class ConfigFileNotFoundError(MatchingError):
    """Raised when a config file path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(MatchingError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} could not be parsed: {detail}")


class ConfigFileValidationError(MatchingError):
    """Raised when a config file fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")


class AuthenticationError(MatchingError):
    """Raised when the profile API rejects our credentials (401/403).

    Fatal for the current refresh: retrying will not help.
    """

    def __init__(self, message: str = "Profile API authentication failed") -> None:
        super().__init__(f"{message}\nPlease check PROFILE_API_KEY in .env is correct.")


class RateLimitError(MatchingError):
    """Raised when the profile API rate limit is exceeded (429 Too Many Requests)."""

    def __init__(self, retry_after: int = 60) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded. Retry after {retry_after} seconds.")


class CircuitBreakerOpen(MatchingError):
    """Raised when the circuit breaker trips due to repeated failures."""

    def __init__(self, failure_count: int, threshold: int) -> None:
        self.failure_count = failure_count
        self.threshold = threshold
        super().__init__(
            f"Circuit breaker tripped: {failure_count} consecutive failures "
            f"(threshold: {threshold}). Pausing profile API calls."
        )


class ProfileApiNotConfiguredError(MatchingError):
    """Raised when the API profile source is selected without a base URL."""

    def __init__(self) -> None:
        super().__init__("PROFILE_API_URL must be set when PROFILE_SOURCE_TYPE is 'api'.")
