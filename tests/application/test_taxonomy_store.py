"""Tests for sector catalogue loading and lookup."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nexus_matching.application.taxonomy_store import TaxonomyStore, load_sector_catalog
from nexus_matching.exceptions import (
    SectorCatalogFileNotFoundError,
    SectorCatalogValidationError,
    UnknownSectorError,
    ValidationError,
)
from tests.fakes import InMemoryFileSystem

CATALOG_PATH = Path("config/sectors.json")


def _write_catalog(fs: InMemoryFileSystem, payload: object) -> None:
    fs.write_text(json.dumps(payload, ensure_ascii=False), CATALOG_PATH)


def _sector(sector_id: str = "aviation", **overrides: object) -> dict[str, object]:
    sector: dict[str, object] = {
        "id": sector_id,
        "name_en": "Aviation",
        "name_ar": "الطيران",
        "keywords": ["Aviation", "airline"],
        "cultural_keywords": ["GCAA"],
    }
    sector.update(overrides)
    return sector


def test_load_sector_catalog_normalises_keywords(in_memory_fs: InMemoryFileSystem) -> None:
    _write_catalog(in_memory_fs, {"schema_version": 1, "sectors": [_sector()]})

    catalog = load_sector_catalog(path=CATALOG_PATH, fs=in_memory_fs)

    sector = catalog.get_sector("aviation")
    assert sector.name_ar == "الطيران"
    assert sector.keywords == ("aviation", "airline")
    assert sector.cultural_keywords == ("gcaa",)


def test_missing_catalogue_file_raises(in_memory_fs: InMemoryFileSystem) -> None:
    with pytest.raises(SectorCatalogFileNotFoundError):
        load_sector_catalog(path=CATALOG_PATH, fs=in_memory_fs)


@pytest.mark.parametrize(
    "payload",
    [
        {"schema_version": 2, "sectors": [_sector()]},
        {"schema_version": 1, "sectors": []},
        {"schema_version": 1, "sectors": [_sector(), _sector()]},
        {"schema_version": 1, "sectors": [_sector(name_en="  ")]},
        {"schema_version": 1, "sectors": [_sector(colour="blue")]},
        {"schema_version": 1, "sectors": [_sector(keywords=["ok", " "])]},
    ],
)
def test_invalid_catalogue_is_rejected(in_memory_fs: InMemoryFileSystem, payload: object) -> None:
    _write_catalog(in_memory_fs, payload)

    with pytest.raises(SectorCatalogValidationError) as exc_info:
        load_sector_catalog(path=CATALOG_PATH, fs=in_memory_fs)

    assert str(CATALOG_PATH) in str(exc_info.value)


def test_from_path_uses_bundled_catalogue_when_unset(in_memory_fs: InMemoryFileSystem) -> None:
    store = TaxonomyStore.from_path("", in_memory_fs)

    assert store.has_sector("oil-gas")
    assert len(store.list_sectors()) == 13


def test_from_path_reads_configured_catalogue(in_memory_fs: InMemoryFileSystem) -> None:
    _write_catalog(in_memory_fs, {"schema_version": 1, "sectors": [_sector()]})

    store = TaxonomyStore.from_path(str(CATALOG_PATH), in_memory_fs)

    assert [sector.id for sector in store.list_sectors()] == ["aviation"]
    assert not store.has_sector("oil-gas")


def test_resolve_reports_unknown_sector_as_validation_error() -> None:
    store = TaxonomyStore()

    with pytest.raises(UnknownSectorError) as exc_info:
        store.resolve("space-mining")

    assert isinstance(exc_info.value, ValidationError)
