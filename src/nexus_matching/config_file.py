"""Typed parsing and validation for matching-engine config files.

Example file:

    schema_version = 1

    [matching]
    profile_source_type = "file"
    profiles_path = "data/professionals.json"
    max_shortlist = 300
    weight_step = 0.01
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError
from .protocols import FileSystem

_SCHEMA_VERSION = 1
PROFILE_SOURCE_TYPES = frozenset({"file", "api"})
MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class MatchingConfigFile:
    """Validated values from the ``[matching]`` section; ``None`` means unset."""

    profile_source_type: str | None = None
    profiles_path: str | None = None
    profile_api_url: str | None = None
    profile_cache_dir: str | None = None
    sector_catalog_path: str | None = None
    index_refresh_seconds: float | None = None
    index_max_staleness_seconds: float | None = None
    max_shortlist: int | None = None
    scoring_workers: int | None = None
    default_top_k: int | None = None
    suggestion_limit: int | None = None
    min_score: float | None = None
    feedback_log_path: str | None = None
    weights_path: str | None = None
    weight_step: float | None = None
    min_feedback_records: int | None = None
    feedback_window_days: int | None = None
    weight_adjust_seconds: float | None = None


class _MatchingSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    profile_source_type: str | None = None
    profiles_path: str | None = None
    profile_api_url: str | None = None
    profile_cache_dir: str | None = None
    sector_catalog_path: str | None = None
    index_refresh_seconds: float | None = None
    index_max_staleness_seconds: float | None = None
    max_shortlist: int | None = None
    scoring_workers: int | None = None
    default_top_k: int | None = None
    suggestion_limit: int | None = None
    min_score: float | None = None
    feedback_log_path: str | None = None
    weights_path: str | None = None
    weight_step: float | None = None
    min_feedback_records: int | None = None
    feedback_window_days: int | None = None
    weight_adjust_seconds: float | None = None

    @field_validator("profile_source_type")
    @classmethod
    def _validate_source_type(cls, value: str | None) -> str | None:
        if value is None:
            return None
        source = value.strip().lower()
        if source not in PROFILE_SOURCE_TYPES:
            raise ValueError
        return source

    @field_validator(
        "profiles_path",
        "profile_api_url",
        "profile_cache_dir",
        "sector_catalog_path",
        "feedback_log_path",
        "weights_path",
    )
    @classmethod
    def _validate_non_empty_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator(
        "max_shortlist",
        "default_top_k",
        "min_feedback_records",
        "feedback_window_days",
    )
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError
        return value

    @field_validator("suggestion_limit")
    @classmethod
    def _validate_suggestion_limit(cls, value: int | None) -> int | None:
        if value is not None and not 1 <= value <= MAX_SUGGESTIONS:
            raise ValueError
        return value

    @field_validator("scoring_workers")
    @classmethod
    def _validate_workers(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError
        return value

    @field_validator("index_refresh_seconds", "index_max_staleness_seconds", "weight_adjust_seconds")
    @classmethod
    def _validate_positive_seconds(cls, value: float | None) -> float | None:
        if value is not None and value <= 0.0:
            raise ValueError
        return value

    @field_validator("min_score")
    @classmethod
    def _validate_score_range(cls, value: float | None) -> float | None:
        if value is not None and not 0.0 <= value <= 1.0:
            raise ValueError
        return value

    @field_validator("weight_step")
    @classmethod
    def _validate_weight_step(cls, value: float | None) -> float | None:
        if value is not None and not 0.0 < value <= 0.25:
            raise ValueError
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    matching: _MatchingSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_matching_config_file(*, path: Path, fs: FileSystem) -> MatchingConfigFile:
    """Load and validate a matching-engine TOML config file."""
    if not fs.exists(path):
        raise ConfigFileNotFoundError(str(path))

    try:
        payload: object = tomllib.loads(fs.read_text(path))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), _format_validation_error(exc)) from exc

    return MatchingConfigFile(**model.matching.model_dump())
