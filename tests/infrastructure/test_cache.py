"""Tests for the disk-backed response cache."""

from pathlib import Path

from nexus_matching.infrastructure import DiskCache


class TestDiskCache:
    """Tests for DiskCache."""

    def test_get_returns_none_for_missing_key(self, tmp_path: Path) -> None:
        cache = DiskCache(tmp_path / "cache")
        assert cache.get("expertise:1:2024-05-01") is None

    def test_set_and_get_roundtrip(self, tmp_path: Path) -> None:
        cache = DiskCache(tmp_path / "cache")
        cache.set("expertise:1:2024-05-01", {"expertise": [{"name": "Drilling"}]})

        assert cache.get("expertise:1:2024-05-01") == {"expertise": [{"name": "Drilling"}]}
        assert cache.has("expertise:1:2024-05-01")
        assert not cache.has("expertise:1:2024-06-01")

    def test_keys_are_hashed_into_file_names(self, tmp_path: Path) -> None:
        cache = DiskCache(tmp_path / "cache")
        cache.set("certifications:7:2024/05/01", {"certifications": []})

        files = list((tmp_path / "cache").iterdir())
        assert len(files) == 1
        assert files[0].suffix == ".json"
        assert len(files[0].stem) == 64

    def test_set_overwrites_existing_value(self, tmp_path: Path) -> None:
        cache = DiskCache(tmp_path / "cache")
        cache.set("k", {"v": 1})
        cache.set("k", {"v": 2})

        assert cache.get("k") == {"v": 2}
