import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from junban.interfaces import cli


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.data = (Path(self.tmpdir.name) / "junban.yaml").as_posix()
        # ログファイルをホームに作らない
        self.patcher = mock.patch.object(cli, "setup_logger")
        self.patcher.start()

    def tearDown(self) -> None:
        self.patcher.stop()
        self.tmpdir.cleanup()

    def _run(self, *argv: str) -> tuple[int, str]:
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = cli.main(["--data", self.data, *argv])
        return code, buf.getvalue()

    def test_add_and_list(self) -> None:
        code, out = self._run("add", "write report", "--importance", "3", "--urgency", "3")
        assert code == 0
        assert out.startswith("T001 ")
        self._run("add", "read mail", "--importance", "1", "--urgency", "1")
        code, out = self._run("list")
        assert code == 0
        lines = out.splitlines()
        assert "write report" in lines[0]
        assert "read mail" in lines[1]

    def test_sub_task_by_number(self) -> None:
        self._run("add", "root")
        code, out = self._run("add", "child", "--parent", "T001")
        assert code == 0
        assert out.startswith("T001.1 ")
        _, out = self._run("tree")
        assert [line.split()[0] for line in out.splitlines()] == ["T001", "T001.1"]
        _, out = self._run("list")
        assert len(out.splitlines()) == 1
        _, out = self._run("list", "--all")
        assert len(out.splitlines()) == 2

    def test_unknown_parent_fails(self) -> None:
        with self.assertLogs("junban", level="ERROR"):
            code, _ = self._run("add", "orphan", "--parent", "T009")
        assert code == 1

    def test_status_transitions(self) -> None:
        self._run("add", "task")
        code, out = self._run("start", "T001")
        assert code == 0
        assert "[in_progress]" in out
        code, out = self._run("done", "T001")
        assert "[completed]" in out
        _, out = self._run("show", "T001")
        assert "status: completed (Done)" in out
        assert "completed_at: None" not in out

    def test_update_and_show_by_prefix(self) -> None:
        _, out = self._run("add", "task")
        task_id = out.split()[1]
        code, _ = self._run("update", task_id[:8], "--title", "renamed", "--urgency", "3")
        assert code == 0
        _, out = self._run("show", task_id)
        assert "title: renamed" in out
        assert "urgency: 3" in out

    def test_rm(self) -> None:
        self._run("add", "task")
        code, out = self._run("rm", "T001")
        assert code == 0
        assert out.startswith("removed: ")
        _, out = self._run("list")
        assert out == ""

    def test_export_import(self) -> None:
        self._run("add", "task", "--importance", "3")
        path = (Path(self.tmpdir.name) / "backup.json").as_posix()
        code, _ = self._run("export", path)
        assert code == 0
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        assert data["version"] == "1.0.0"
        assert data["tasks"][0]["title"] == "task"
        _, out = self._run("info")
        assert "last backup: None" not in out

        # 既存ファイルへの export は失敗する
        with self.assertLogs("junban", level="ERROR"):
            code, _ = self._run("export", path)
        assert code == 1

        self.data = (Path(self.tmpdir.name) / "other.db").as_posix()
        code, _ = self._run("import", path)
        assert code == 0
        _, out = self._run("list")
        assert "task" in out

    def test_clear_requires_yes(self) -> None:
        self._run("add", "task")
        code, _ = self._run("clear")
        assert code == 1
        code, _ = self._run("clear", "--yes")
        assert code == 0
        _, out = self._run("list")
        assert out == ""


if __name__ == "__main__":
    unittest.main()
