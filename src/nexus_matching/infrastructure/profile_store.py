"""Read adapters for the external professional profile store.

Profiles arrive as camelCase JSON records. Each record is validated with
pydantic and projected onto a ``Candidate``; a record that fails validation
is skipped with a warning so one bad profile never empties the index.

Usage example:
    from pathlib import Path

    from nexus_matching.infrastructure.filesystem import LocalFileSystem
    from nexus_matching.infrastructure.profile_store import JsonProfileStore

    store = JsonProfileStore(path=Path("data/professionals.json"), fs=LocalFileSystem())
    candidates = store.list_candidates()
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, override

import requests
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..domain.models import Candidate, Language, TrainingFormat
from ..exceptions import (
    AuthenticationError,
    CircuitBreakerOpen,
    DataUnavailableError,
    ProfilePayloadError,
    RateLimitError,
)
from ..observability import get_logger
from ..protocols import FileSystem, HttpClient, ProfileStore

logger = get_logger("nexus_matching.profile_store")

_LANGUAGE_ALIASES = {
    "EN": Language.ENGLISH,
    "AR": Language.ARABIC,
}


def _enum_token(value: str) -> str:
    return value.strip().upper().replace("-", "_").replace(" ", "_")


def _names(items: Iterable[Any]) -> list[str]:
    """Accept plain strings or ``{"name": ...}`` objects."""
    names: list[str] = []
    for item in items:
        if isinstance(item, Mapping):
            name = item.get("name")
        else:
            name = item
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    return names


class ProfileRecord(BaseModel):
    """A professional profile as served by the profile store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    location: str | None = None
    years_experience: float = 0.0
    rate_per_hour: float | None = None
    rating: float = 0.0
    languages: list[Language] = Field(default_factory=list)
    formats: list[TrainingFormat] = Field(default_factory=list)
    expertise: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    sector_affinity: list[str] = Field(default_factory=list)
    updated_at: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("languages", mode="before")
    @classmethod
    def _normalise_languages(cls, value: object) -> object:
        if not isinstance(value, list):
            return value
        tokens = [_enum_token(item) if isinstance(item, str) else item for item in value]
        return [_LANGUAGE_ALIASES.get(token, token) for token in tokens]

    @field_validator("formats", mode="before")
    @classmethod
    def _normalise_formats(cls, value: object) -> object:
        if not isinstance(value, list):
            return value
        return [_enum_token(item) if isinstance(item, str) else item for item in value]

    @field_validator("expertise", "certifications", mode="before")
    @classmethod
    def _flatten_names(cls, value: object) -> object:
        if isinstance(value, list):
            return _names(value)
        return value

    @field_validator("sector_affinity", mode="before")
    @classmethod
    def _split_affinity(cls, value: object) -> object:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        parts = [part.strip() for part in (self.first_name, self.last_name) if part]
        return " ".join(part for part in parts if part) or f"Professional {self.id}"

    def to_candidate(self) -> Candidate:
        return Candidate(
            id=self.id,
            name=self.display_name(),
            title=(self.title or "").strip(),
            location=(self.location or "").strip() or None,
            years_experience=self.years_experience,
            rate_per_hour=self.rate_per_hour,
            rating=self.rating,
            languages=frozenset(self.languages),
            formats_supported=frozenset(self.formats),
            expertise_tags=frozenset(tag.lower() for tag in self.expertise),
            certifications=tuple(self.certifications),
            sector_affinity=frozenset(self.sector_affinity),
        )


def parse_profile(payload: Mapping[str, Any], *, source: str) -> ProfileRecord:
    """Validate one raw profile record.

    Raises:
        ProfilePayloadError: If the record does not validate.
    """
    try:
        return ProfileRecord.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ProfilePayloadError(source, str(exc.errors(include_url=False))) from exc


def _profile_items(payload: Mapping[str, Any], *, source: str) -> list[Mapping[str, Any]]:
    items = payload.get("professionals")
    if not isinstance(items, list):
        raise DataUnavailableError(f"{source}: expected a 'professionals' list")
    return [item for item in items if isinstance(item, Mapping)]


def candidates_from_records(
    records: Iterable[Mapping[str, Any]], *, source: str
) -> list[Candidate]:
    """Project raw records onto candidates, skipping malformed ones."""
    candidates: list[Candidate] = []
    for index, raw in enumerate(records):
        try:
            candidates.append(parse_profile(raw, source=f"{source}[{index}]").to_candidate())
        except ProfilePayloadError as exc:
            logger.warning("Skipping malformed profile: %s", exc)
    return candidates


class JsonProfileStore(ProfileStore):
    """Profiles from a local ``{"professionals": [...]}`` JSON file."""

    def __init__(self, *, path: Path, fs: FileSystem) -> None:
        self.path = path
        self.fs = fs

    @override
    def list_candidates(self) -> list[Candidate]:
        if not self.fs.exists(self.path):
            raise DataUnavailableError(f"Profile file not found: {self.path}")
        try:
            payload = self.fs.read_json(self.path)
        except ValueError as exc:
            raise DataUnavailableError(f"Profile file is not valid JSON: {self.path}") from exc
        except OSError as exc:
            raise DataUnavailableError(f"Profile file is unreadable: {self.path}: {exc}") from exc
        source = str(self.path)
        return candidates_from_records(_profile_items(payload, source=source), source=source)


_UPSTREAM_ERRORS = (
    requests.RequestException,
    ValueError,
    AuthenticationError,
    RateLimitError,
    CircuitBreakerOpen,
)


class HttpProfileStore(ProfileStore):
    """Profiles from the profile API, enriched with expertise and certifications.

    Detail calls are cached per ``(profile id, updatedAt)`` so unchanged
    profiles cost one list request per refresh.
    """

    def __init__(self, *, base_url: str, http_client: HttpClient) -> None:
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client

    @override
    def list_candidates(self) -> list[Candidate]:
        url = f"{self.base_url}/professionals"
        try:
            payload = self.http_client.get_json(url)
        except _UPSTREAM_ERRORS as exc:
            raise DataUnavailableError(f"Profile API unavailable: {exc}") from exc

        candidates: list[Candidate] = []
        for index, raw in enumerate(_profile_items(payload, source=url)):
            try:
                record = parse_profile(raw, source=f"{url}[{index}]")
            except ProfilePayloadError as exc:
                logger.warning("Skipping malformed profile: %s", exc)
                continue
            candidates.append(self._enrich(record).to_candidate())
        return candidates

    def _enrich(self, record: ProfileRecord) -> ProfileRecord:
        updates: dict[str, list[str]] = {}
        for detail in ("expertise", "certifications"):
            try:
                names = self._fetch_names(record, detail)
            except _UPSTREAM_ERRORS as exc:
                logger.warning(
                    "Using embedded %s for profile %s: %s", detail, record.id, exc
                )
                continue
            updates[detail] = names
        return record.model_copy(update=updates) if updates else record

    def _fetch_names(self, record: ProfileRecord, detail: str) -> list[str]:
        url = f"{self.base_url}/professionals/{record.id}/{detail}"
        cache_key = f"{detail}:{record.id}:{record.updated_at}" if record.updated_at else None
        payload = self.http_client.get_json(url, cache_key=cache_key)
        items = payload.get(detail)
        if not isinstance(items, list):
            raise ValueError(f"{url}: expected a '{detail}' list")
        return _names(items)
