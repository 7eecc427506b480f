"""Unit tests for the JSON file store.

Covers whole-document read/replace, fallback to the default document and
the one-time legacy migration.
"""

import json
from unittest.mock import patch

import pytest

from dashboard.models import Document, Project, default_document
from dashboard.store import JsonFileStore


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(tmp_path / "server-data")


@pytest.fixture
def legacy_item():
    return {
        "id": "w1",
        "label": "Part 1",
        "targetDate": "2026-01-31",
        "isExpanded": True,
        "subItems": [{"id": "w1-1", "label": "Read", "checked": False}],
    }


class TestStoreInitialization:
    def test_creates_data_dir(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "data")

        assert store.data_dir.exists()
        assert store.data_path == store.data_dir / "data.json"

    def test_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DASHBOARD_DATA_DIR", str(tmp_path / "env-data"))

        store = JsonFileStore.from_env(tmp_path / "default")

        assert store.data_dir == (tmp_path / "env-data").resolve()

    def test_from_env_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DASHBOARD_DATA_DIR", raising=False)

        store = JsonFileStore.from_env(tmp_path / "default")

        assert store.data_dir == (tmp_path / "default").resolve()


class TestReadReplace:
    """Test cases for whole-document access."""

    def test_read_missing_returns_default(self, store):
        assert store.read() == default_document()

    def test_replace_then_read(self, store):
        document = Document(current_project_id="p9", projects=(Project(id="p9", title="Mine"),))

        assert store.replace(document) is True
        assert store.read() == document

    def test_replace_writes_pretty_json(self, store):
        store.replace(default_document())

        text = store.data_path.read_text(encoding="utf-8")
        assert text.startswith("{\n  ")
        assert json.loads(text)["currentProjectId"] == "p1"

    def test_replace_leaves_no_temp_files(self, store):
        store.replace(default_document())

        assert [p.name for p in store.data_dir.iterdir()] == ["data.json"]

    def test_read_invalid_json_falls_back(self, store):
        store.data_path.write_text("{not json", encoding="utf-8")

        assert store.read() == default_document()

    def test_read_non_object_falls_back(self, store):
        store.data_path.write_text("[1, 2, 3]", encoding="utf-8")

        assert store.read() == default_document()

    def test_replace_failure_returns_false(self, store):
        store.replace(default_document())
        before = store.data_path.read_text(encoding="utf-8")

        with patch("dashboard.store.os.replace", side_effect=OSError("disk full")):
            assert store.replace(Document(current_project_id="x")) is False

        assert store.data_path.read_text(encoding="utf-8") == before
        assert [p.name for p in store.data_dir.iterdir()] == ["data.json"]

    def test_replace_notifies_hooks(self, store):
        from dashboard.dashboard_logging import observability_hooks

        events = []
        callback = lambda **data: events.append(data)
        observability_hooks.register_hook("document_replaced", callback)
        try:
            store.replace(default_document())
        finally:
            observability_hooks.unregister_hook("document_replaced", callback)

        assert events and events[0]["project_count"] == 1


class TestLegacyMigration:
    """Test cases for the one-time legacy checklist conversion."""

    def test_no_legacy_file(self, store):
        assert store.migrate_legacy() is False
        assert not store.data_path.exists()

    def test_migrates_written_and_practical(self, store, legacy_item):
        practical = dict(legacy_item, id="p1-item", label="Practical 1")
        store.legacy_path.write_text(
            json.dumps({"written": [legacy_item], "practical": [practical]}), encoding="utf-8"
        )

        assert store.migrate_legacy() is True

        document = store.read()
        assert len(document.projects) == 1
        categories = document.projects[0].categories
        assert [c.id for c in categories] == ["c1", "c2"]
        assert [i.to_dict() for i in categories[0].items] == [legacy_item]
        assert [i.to_dict() for i in categories[1].items] == [practical]
        assert not store.legacy_path.exists()
        assert store.legacy_backup_path.exists()

    def test_skips_when_data_file_exists(self, store, legacy_item):
        store.replace(default_document())
        store.legacy_path.write_text(json.dumps({"written": [legacy_item]}), encoding="utf-8")

        assert store.migrate_legacy() is False
        assert store.legacy_path.exists()

    def test_only_written(self, store, legacy_item):
        store.legacy_path.write_text(json.dumps({"written": [legacy_item]}), encoding="utf-8")

        store.migrate_legacy()

        assert [c.label for c in store.read().projects[0].categories] == ["Written"]

    def test_items_are_copied_verbatim(self, store):
        flat = {"id": "w1", "label": "Chapter 1", "checked": True}
        store.legacy_path.write_text(json.dumps({"written": [flat], "practical": []}), encoding="utf-8")

        assert store.migrate_legacy() is True

        saved = json.loads(store.data_path.read_text(encoding="utf-8"))
        assert saved["currentProjectId"] == "p1"
        assert saved["projects"][0]["categories"][0]["items"] == [flat]

    def test_empty_written_list_still_makes_category(self, store, legacy_item):
        store.legacy_path.write_text(json.dumps({"written": [], "practical": [legacy_item]}), encoding="utf-8")

        store.migrate_legacy()

        categories = store.read().projects[0].categories
        assert [c.id for c in categories] == ["c1", "c2"]
        assert categories[0].items == ()

    def test_corrupt_legacy_file_is_not_fatal(self, store):
        store.legacy_path.write_text("{broken", encoding="utf-8")

        assert store.migrate_legacy() is False
        assert store.legacy_path.exists()
        assert not store.data_path.exists()
