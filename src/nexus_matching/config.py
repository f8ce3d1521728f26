"""Centralised, injectable configuration for the matching engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Self

from dotenv import load_dotenv

from .config_file import MAX_SUGGESTIONS, PROFILE_SOURCE_TYPES, MatchingConfigFile


class PositiveIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


class NumberEnvVarError(ValueError):
    """Raised when an environment variable must be a number in a range."""

    def __init__(self, env_name: str, constraint: str) -> None:
        super().__init__(f"{env_name} must be a number {constraint}.")


class ChoiceEnvVarError(ValueError):
    """Raised when an environment variable must be one of a fixed set of values."""

    def __init__(self, env_name: str, choices: frozenset[str]) -> None:
        super().__init__(f"{env_name} must be one of: {', '.join(sorted(choices))}.")


@dataclass(frozen=True)
class MatchingConfig:
    """Immutable configuration for every engine component.

    Load from environment with `MatchingConfig.from_env()` or construct directly for testing.
    """

    # Profile store
    profile_source_type: str = "file"
    profiles_path: str = "data/professionals.json"
    profile_api_url: str = ""
    profile_api_key: str = ""
    profile_cache_dir: str = "data/cache/profiles"
    profile_api_timeout_seconds: float = 15.0
    profile_api_max_rpm: int = 300
    profile_api_min_delay_seconds: float = 0.1
    profile_api_max_retries: int = 3
    profile_api_backoff_factor: float = 0.5
    profile_api_circuit_breaker_threshold: int = 5
    profile_api_circuit_breaker_timeout_seconds: float = 60.0

    # Taxonomy
    sector_catalog_path: str = ""

    # Candidate index
    index_refresh_seconds: float = 300.0
    index_max_staleness_seconds: float = 900.0
    max_shortlist: int = 500

    # Ranking
    scoring_workers: int = 0  # 0 → os.cpu_count()
    default_top_k: int = 10
    suggestion_limit: int = 3
    min_score: float = 0.0

    # Feedback and adaptation
    feedback_log_path: str = ""
    weights_path: str = ""
    weight_step: float = 0.02
    min_feedback_records: int = 20
    feedback_window_days: int = 30
    weight_adjust_seconds: float = 3600.0

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.
        """
        load_dotenv(dotenv_path)

        return cls(
            profile_source_type=_parse_choice(
                os.getenv("PROFILE_SOURCE_TYPE", "file"),
                env_name="PROFILE_SOURCE_TYPE",
                choices=PROFILE_SOURCE_TYPES,
            ),
            profiles_path=_text(os.getenv("PROFILES_PATH", ""), "data/professionals.json"),
            profile_api_url=os.getenv("PROFILE_API_URL", "").strip(),
            profile_api_key=os.getenv("PROFILE_API_KEY", "").strip(),
            profile_cache_dir=_text(os.getenv("PROFILE_CACHE_DIR", ""), "data/cache/profiles"),
            profile_api_timeout_seconds=float(os.getenv("PROFILE_API_TIMEOUT_SECONDS", "15")),
            profile_api_max_rpm=int(os.getenv("PROFILE_API_MAX_RPM", "300")),
            profile_api_min_delay_seconds=float(os.getenv("PROFILE_API_MIN_DELAY_SECONDS", "0.1")),
            profile_api_max_retries=int(os.getenv("PROFILE_API_MAX_RETRIES", "3")),
            profile_api_backoff_factor=float(os.getenv("PROFILE_API_BACKOFF_FACTOR", "0.5")),
            profile_api_circuit_breaker_threshold=int(
                os.getenv("PROFILE_API_CIRCUIT_BREAKER_THRESHOLD", "5")
            ),
            profile_api_circuit_breaker_timeout_seconds=float(
                os.getenv("PROFILE_API_CIRCUIT_BREAKER_TIMEOUT_SECONDS", "60")
            ),
            sector_catalog_path=os.getenv("SECTOR_CATALOG_PATH", "").strip(),
            index_refresh_seconds=_parse_positive_float(
                os.getenv("INDEX_REFRESH_SECONDS", "300"), env_name="INDEX_REFRESH_SECONDS"
            ),
            index_max_staleness_seconds=_parse_positive_float(
                os.getenv("INDEX_MAX_STALENESS_SECONDS", "900"),
                env_name="INDEX_MAX_STALENESS_SECONDS",
            ),
            max_shortlist=_parse_positive_int(
                os.getenv("MAX_SHORTLIST", "500"), env_name="MAX_SHORTLIST"
            ),
            scoring_workers=_parse_non_negative_int(
                os.getenv("SCORING_WORKERS", "0"), env_name="SCORING_WORKERS"
            ),
            default_top_k=_parse_positive_int(
                os.getenv("DEFAULT_TOP_K", "10"), env_name="DEFAULT_TOP_K"
            ),
            suggestion_limit=_parse_bounded_int(
                os.getenv("SUGGESTION_LIMIT", "3"),
                env_name="SUGGESTION_LIMIT",
                low=1,
                high=MAX_SUGGESTIONS,
            ),
            min_score=_parse_unit_float(os.getenv("MIN_SCORE", "0"), env_name="MIN_SCORE"),
            feedback_log_path=os.getenv("FEEDBACK_LOG_PATH", "").strip(),
            weights_path=os.getenv("WEIGHTS_PATH", "").strip(),
            weight_step=_parse_unit_float(os.getenv("WEIGHT_STEP", "0.02"), env_name="WEIGHT_STEP"),
            min_feedback_records=_parse_positive_int(
                os.getenv("MIN_FEEDBACK_RECORDS", "20"), env_name="MIN_FEEDBACK_RECORDS"
            ),
            feedback_window_days=_parse_positive_int(
                os.getenv("FEEDBACK_WINDOW_DAYS", "30"), env_name="FEEDBACK_WINDOW_DAYS"
            ),
            weight_adjust_seconds=_parse_positive_float(
                os.getenv("WEIGHT_ADJUST_SECONDS", "3600"), env_name="WEIGHT_ADJUST_SECONDS"
            ),
        )

    def with_overrides(
        self,
        *,
        profile_source_type: str | None = None,
        profiles_path: str | None = None,
        sector_catalog_path: str | None = None,
        max_shortlist: int | None = None,
        min_score: float | None = None,
        feedback_log_path: str | None = None,
        weights_path: str | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        return replace(
            self,
            profile_source_type=self.profile_source_type
            if profile_source_type is None
            else profile_source_type.strip().lower(),
            profiles_path=self.profiles_path if profiles_path is None else profiles_path.strip(),
            sector_catalog_path=self.sector_catalog_path
            if sector_catalog_path is None
            else sector_catalog_path.strip(),
            max_shortlist=self.max_shortlist if max_shortlist is None else max_shortlist,
            min_score=self.min_score if min_score is None else min_score,
            feedback_log_path=self.feedback_log_path
            if feedback_log_path is None
            else feedback_log_path.strip(),
            weights_path=self.weights_path if weights_path is None else weights_path.strip(),
        )

    def with_file_overrides(self, file_config: MatchingConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        updates = {
            item.name: getattr(file_config, item.name)
            for item in fields(file_config)
            if getattr(file_config, item.name) is not None
        }
        return replace(self, **updates)

    def resolved_scoring_workers(self) -> int:
        if self.scoring_workers > 0:
            return self.scoring_workers
        return os.cpu_count() or 1


def _text(value: str, default: str) -> str:
    return value.strip() or default


def _parse_choice(value: str, *, env_name: str, choices: frozenset[str]) -> str:
    text = value.strip().lower()
    if text not in choices:
        raise ChoiceEnvVarError(env_name, choices)
    return text


def _parse_positive_int(value: str, *, env_name: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed


def _parse_non_negative_int(value: str, *, env_name: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise NumberEnvVarError(env_name, ">= 0") from exc
    if parsed < 0:
        raise NumberEnvVarError(env_name, ">= 0")
    return parsed


def _parse_bounded_int(value: str, *, env_name: str, low: int, high: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise NumberEnvVarError(env_name, f"between {low} and {high}") from exc
    if not low <= parsed <= high:
        raise NumberEnvVarError(env_name, f"between {low} and {high}")
    return parsed


def _parse_positive_float(value: str, *, env_name: str) -> float:
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise NumberEnvVarError(env_name, "> 0") from exc
    if not parsed > 0.0:
        raise NumberEnvVarError(env_name, "> 0")
    return parsed


def _parse_unit_float(value: str, *, env_name: str) -> float:
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise NumberEnvVarError(env_name, "between 0 and 1") from exc
    if not 0.0 <= parsed <= 1.0:
        raise NumberEnvVarError(env_name, "between 0 and 1")
    return parsed
