import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

import pytest

from junban.core.ops import TaskStore
from junban.core.settings import default_settings
from junban.io.json_io import export_json, import_json
from junban.storage.memory_store import MemoryBackend

NOW = datetime(2026, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


def test_export_json_file_exists_raises() -> None:
    with tempfile.NamedTemporaryFile(delete=False, suffix=".json") as f:
        path = f.name
    try:
        with pytest.raises(FileExistsError) as exc_info:
            export_json({}, path)
        assert "already exists" in str(exc_info.value)
    finally:
        Path(path).unlink(missing_ok=True)


def test_import_json_file_not_found_raises() -> None:
    with pytest.raises(FileNotFoundError) as exc_info:
        import_json("/nonexistent/path/to/file.json")
    assert "File not found" in str(exc_info.value)


def test_import_json_requires_object(tmp_path: Path) -> None:
    p = tmp_path / "backup.json"
    p.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        import_json(p.as_posix())


class TestImportExport(unittest.TestCase):
    """export / import で同一内容に戻ることのテスト"""

    def setUp(self) -> None:
        self.store = TaskStore(MemoryBackend(), clock=lambda: NOW)
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def _populate(self) -> None:
        root = self.store.create({"title": "タスクA", "importance": 3, "dueDate": "2026-02-01T00:00:00Z"})
        child = self.store.create({"title": "タスクB", "parentId": root.id})
        self.store.update(child.id, {"status": "completed"})
        self.store.create({"title": "タスクC", "urgency": 1})
        self.store.save_settings({"theme": "light"})

    def test_export_shape(self) -> None:
        self._populate()
        data = self.store.export_all()
        assert data["version"] == "1.0.0"
        assert data["exportDate"] == "2026-01-10T12:00:00.000Z"
        assert [t["taskNumber"] for t in data["tasks"]] == ["T001", "T002"]
        assert data["tasks"][0]["subTasks"][0]["completedAt"] == "2026-01-10T12:00:00.000Z"
        assert data["settings"] == {"theme": "light"}
        # バックアップ時刻の記録は呼び出し側 (CLI export) の責務
        assert self.store.get_last_backup() is None

    def test_export_import_preserves_content(self) -> None:
        self._populate()
        before = self.store.get_all()
        path = (Path(self.tmpdir.name) / "backup.json").as_posix()
        export_json(self.store.export_all(), path)

        other = TaskStore(MemoryBackend(), clock=lambda: NOW)
        assert other.import_all(import_json(path)) is True
        assert other.get_all() == before
        assert other.get_settings() == {"theme": "light"}

    def test_import_without_settings_keeps_settings(self) -> None:
        self.store.save_settings({"theme": "light"})
        assert self.store.import_all({"tasks": [{"title": "only"}]}) is True
        assert [t.title for t in self.store.get_all()] == ["only"]
        assert self.store.get_settings() == {"theme": "light"}

    def test_import_without_tasks_keeps_tasks(self) -> None:
        self.store.create({"title": "keep"})
        assert self.store.import_all({"settings": {"theme": "light"}}) is True
        assert [t.title for t in self.store.get_all()] == ["keep"]
        assert self.store.get_settings() == {"theme": "light"}

    def test_import_empty_is_noop(self) -> None:
        self.store.create({"title": "keep"})
        assert self.store.import_all({}) is True
        assert len(self.store.get_all()) == 1
        assert self.store.get_settings() == default_settings()

    def test_import_explicit_empty_settings_is_saved(self) -> None:
        self.store.save_settings({"theme": "light"})
        assert self.store.import_all({"settings": {}}) is True
        assert self.store.get_settings() == {}

    def test_import_malformed_task_fails(self) -> None:
        self.store.create({"title": "keep"})
        assert self.store.import_all({"tasks": [{"title": "bad", "dueDate": "not-a-date"}]}) is False
        assert [t.title for t in self.store.get_all()] == ["keep"]

    def test_import_not_a_mapping_fails(self) -> None:
        assert self.store.import_all(["tasks"]) is False  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
