"""Sector catalogue loading and lookup.

Usage example:
    from pathlib import Path

    from nexus_matching.application.taxonomy_store import TaxonomyStore, load_sector_catalog
    from nexus_matching.infrastructure.filesystem import LocalFileSystem

    store = TaxonomyStore(load_sector_catalog(path=Path("sectors.json"), fs=LocalFileSystem()))
    store.get_sector("finance")
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ..domain.taxonomy import DEFAULT_SECTOR_CATALOG, Sector, SectorCatalog
from ..exceptions import (
    SectorCatalogFileNotFoundError,
    SectorCatalogValidationError,
    SectorNotFoundError,
    UnknownSectorError,
)
from ..protocols import FileSystem

_SCHEMA_VERSION = 1


def _clean_keywords(values: tuple[str, ...]) -> tuple[str, ...]:
    if any(not keyword.strip() for keyword in values):
        raise ValueError
    return tuple(keyword.strip().lower() for keyword in values)


class _SectorModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name_en: str
    name_ar: str
    keywords: tuple[str, ...] = ()
    cultural_keywords: tuple[str, ...] = ()

    @field_validator("id", "name_en", "name_ar")
    @classmethod
    def _validate_non_empty(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("keywords", "cultural_keywords")
    @classmethod
    def _validate_keywords(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _clean_keywords(value)


class _SectorCatalogModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    sectors: tuple[_SectorModel, ...]

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value

    @model_validator(mode="after")
    def _validate_sectors(self) -> _SectorCatalogModel:
        if not self.sectors:
            raise ValueError("catalogue must list at least one sector")
        ids = [sector.id for sector in self.sectors]
        if len(set(ids)) != len(ids):
            raise ValueError("sector ids must be unique")
        return self


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",))) or "<root>"
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_sector_catalog(*, path: Path, fs: FileSystem) -> SectorCatalog:
    """Load and validate a sector catalogue from JSON."""
    if not fs.exists(path):
        raise SectorCatalogFileNotFoundError(str(path))

    try:
        model = _SectorCatalogModel.model_validate_json(fs.read_text(path))
    except ValidationError as exc:
        raise SectorCatalogValidationError(str(path), _format_validation_error(exc)) from exc

    return SectorCatalog(
        Sector(
            id=sector.id,
            name_en=sector.name_en,
            name_ar=sector.name_ar,
            keywords=sector.keywords,
            cultural_keywords=sector.cultural_keywords,
        )
        for sector in model.sectors
    )


class TaxonomyStore:
    """Read-only sector lookups for the rest of the engine."""

    def __init__(self, catalog: SectorCatalog | None = None) -> None:
        self.catalog = catalog or DEFAULT_SECTOR_CATALOG

    @classmethod
    def from_path(cls, path: str, fs: FileSystem) -> TaxonomyStore:
        """Bundled catalogue when ``path`` is empty, otherwise the file at ``path``."""
        if not path.strip():
            return cls()
        return cls(load_sector_catalog(path=Path(path), fs=fs))

    def list_sectors(self) -> tuple[Sector, ...]:
        return self.catalog.list_sectors()

    def get_sector(self, sector_id: str) -> Sector:
        return self.catalog.get_sector(sector_id)

    def has_sector(self, sector_id: str) -> bool:
        return self.catalog.has_sector(sector_id)

    def resolve(self, sector_id: str) -> Sector:
        """Like ``get_sector`` but reports an unknown id as a validation failure."""
        try:
            return self.catalog.get_sector(sector_id)
        except SectorNotFoundError:
            raise UnknownSectorError(sector_id) from None
