"""Tests for custom pattern persistence."""

import json

import pytest

from docforge.templates.schema import CustomizationOptions, CustomPattern
from docforge.templates.store import CustomPatternStore


def make_pattern(pattern_id: str = "custom_1", created_by: str = "u1", is_public: bool = False) -> CustomPattern:
    return CustomPattern(
        id=pattern_id,
        base_pattern_id="case-study",
        name="Variant",
        customizations=CustomizationOptions.model_validate({"colors": {"primary": "#123456"}}),
        created_by=created_by,
        is_public=is_public,
    )


class TestInMemory:
    """Store without a storage directory."""

    def test_save_and_get(self):
        store = CustomPatternStore()
        assert store.save(make_pattern()) == "custom_1"
        assert store.get("custom_1").name == "Variant"
        assert store.count() == 1

    def test_delete(self):
        store = CustomPatternStore()
        store.save(make_pattern())
        assert store.delete("custom_1") is True
        assert store.delete("custom_1") is False
        assert store.get("custom_1") is None


class TestOnDisk:
    """Store backed by a JSON directory."""

    def test_written_as_json(self, tmp_path):
        store = CustomPatternStore(tmp_path)
        store.save(make_pattern())
        payload = json.loads((tmp_path / "custom_1.json").read_text())
        assert payload["customizations"]["colors"]["primary"] == "#123456"

    def test_reloaded_by_new_store(self, tmp_path):
        """Patterns survive a restart."""
        CustomPatternStore(tmp_path).save(make_pattern())
        assert CustomPatternStore(tmp_path).get("custom_1").base_pattern_id == "case-study"

    def test_cache_miss_reads_disk(self, tmp_path):
        """A pattern written by another store instance is found on lookup."""
        reader = CustomPatternStore(tmp_path)
        CustomPatternStore(tmp_path).save(make_pattern("custom_late"))
        assert reader.get("custom_late") is not None

    def test_corrupt_file_skipped(self, tmp_path):
        """Unreadable files are logged and ignored."""
        (tmp_path / "broken.json").write_text("{not json")
        store = CustomPatternStore(tmp_path)
        assert store.count() == 0
        assert store.get("broken") is None

    def test_delete_removes_file(self, tmp_path):
        store = CustomPatternStore(tmp_path)
        store.save(make_pattern())
        store.delete("custom_1")
        assert not (tmp_path / "custom_1.json").exists()


class TestUnsafeIds:
    """Ids that are not plain file names never reach the filesystem."""

    def test_lookup_outside_directory_ignored(self, tmp_path):
        storage = tmp_path / "patterns"
        (tmp_path / "secret.json").write_text(json.dumps(make_pattern("secret").model_dump(mode="json")))
        store = CustomPatternStore(storage)
        assert store.get("../secret") is None
        assert store.delete("../secret") is False
        assert (tmp_path / "secret.json").exists()

    def test_save_rejects_path_id(self, tmp_path):
        store = CustomPatternStore(tmp_path / "patterns")
        with pytest.raises(ValueError):
            store.save(make_pattern("../evil"))
        assert not (tmp_path / "evil.json").exists()
        assert store.count() == 0
