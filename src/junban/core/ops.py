import json
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pyresults import Err, Ok

from junban.core.errors import ParentNotFoundError, PersistenceError, TaskNotFoundError
from junban.core.models import Task, normalize_keys
from junban.core.settings import default_settings
from junban.storage.base import KeyValueBackend
from junban.util.logger import setup_logger
from junban.util.time import Clock, now_utc, parse_datetime, to_iso

logger = setup_logger("junban", is_stream=True, is_file=False)

TASKS_KEY = "junban_tasks"
SETTINGS_KEY = "junban_settings"
LAST_BACKUP_KEY = "junban_last_backup"
STORAGE_KEYS = (TASKS_KEY, SETTINGS_KEY, LAST_BACKUP_KEY)

EXPORT_VERSION = "1.0.0"

# create 時に入力から受け取らない属性 (ストア側で決める / 派生値)
_CREATE_IGNORED = ("sub_tasks", "priority_score", "task_number", "task_level")


class TaskStore:
    """タスクの森を key-value バックエンド上で CRUD するユースケース層。

    森全体を1つの JSON 文字列として TASKS_KEY に保存する。
    読み込み失敗は空リスト、書き込み失敗は False として扱い、例外にはしない。

    create / update / delete は「読み込み→変更→保存」を同じインスタンス内では
    ロックで直列化する。別インスタンスや別プロセスと同じ保存先を共有した場合は
    後勝ち (森全体の上書き) になる。
    """

    def __init__(self, backend: KeyValueBackend, *, clock: Clock = now_utc) -> None:
        self.backend = backend
        self.clock = clock
        self._lock = threading.Lock()

    # ---- 基本IO ----

    def get_all(self) -> list[Task]:
        match self.backend.get(TASKS_KEY):
            case Ok(None):
                return []
            case Ok(raw):
                try:
                    data = json.loads(raw)
                    if not isinstance(data, list):
                        _msg = f"expected a list of tasks, got {type(data).__name__}"
                        raise TypeError(_msg)
                    return [Task.from_dict(d) for d in data]
                except (AttributeError, TypeError, ValueError) as e:
                    logger.warning("Failed to load tasks from storage: %s", e)
                    return []
            case Err(e):
                logger.warning("Failed to read tasks from storage: %s", e)
                return []
            case _:
                logger.warning("Unexpected error while reading tasks")
                return []

    def save_all(self, tasks: list[Task]) -> bool:
        try:
            payload = json.dumps([t.to_dict() for t in tasks])
        except (TypeError, ValueError):
            logger.exception("Failed to serialize tasks")
            return False
        res = self.backend.set(TASKS_KEY, payload)
        if res.is_err():
            logger.error("Failed to save tasks to storage: %s", res.unwrap_err())
            return False
        return True

    # ---- 検索 ----

    @staticmethod
    def find_by_id(tasks: list[Task], task_id: str) -> Task | None:
        """森全体を深さ優先で探す。"""
        for t in tasks:
            if t.id == task_id:
                return t
            found = TaskStore.find_by_id(t.sub_tasks, task_id)
            if found is not None:
                return found
        return None

    def get_task(self, task_id: str) -> Task:
        """単一タスクを取得する。見つからない場合は TaskNotFoundError。"""
        t = self.find_by_id(self.get_all(), task_id)
        if t is None:
            raise TaskNotFoundError(task_id)
        return t

    def list_children(self, task_id: str) -> list[Task]:
        return list(self.get_task(task_id).sub_tasks)

    # ---- 追加 / 更新 / 削除 ----

    @staticmethod
    def generate_task_number(tasks: list[Task], parent: Task | None = None) -> str:
        """表示用のタスク番号を現在の兄弟数から決める。

        ルートは `T001`, `T002`, ...、子は `{親番号}.{n}`。
        採番は作成時の一度きりで、兄弟が削除されても振り直さない
        (削除後の追加で番号が重複・欠番になりうる)。
        """
        if parent is None:
            roots = [t for t in tasks if not t.parent_id]
            return f"T{len(roots) + 1:03d}"
        return f"{parent.task_number}.{len(parent.sub_tasks) + 1}"

    def create(self, task_data: Mapping[str, Any]) -> Task:
        """新規タスクを追加する。

        parentId が空ならルートタスクとして、指定されていればその子として追加する。

        Raises:
            ParentNotFoundError: parentId のタスクが存在しない場合
            DepthExceededError: 親がすでに最大階層の場合
            PersistenceError: 保存に失敗した場合
        """
        with self._lock:
            tasks = self.get_all()
            fields = normalize_keys(task_data)
            for name in _CREATE_IGNORED:
                fields.pop(name, None)

            parent: Task | None = None
            parent_id = fields.pop("parent_id", None)
            if parent_id:
                parent = self.find_by_id(tasks, parent_id)
                if parent is None:
                    raise ParentNotFoundError(parent_id)

            fields["task_number"] = self.generate_task_number(tasks, parent)
            fields["task_level"] = parent.task_level + 1 if parent is not None else 1
            if not fields.get("created_at"):
                fields["created_at"] = self.clock()
            task = Task(**fields)

            if parent is not None:
                parent.add_child(task)
            else:
                tasks.append(task)

            if not self.save_all(tasks):
                _msg = f"Failed to persist new task: {task.id}"
                raise PersistenceError(_msg)
            logger.debug("Created task %s (%s)", task.id, task.task_number)
            return task

    def update(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        """タスクのフィールドを更新する。

        status が含まれていれば update_status を通すので、開始・完了日時も記録される。

        Raises:
            TaskNotFoundError: task_id のタスクが存在しない場合
            PersistenceError: 保存に失敗した場合
        """
        with self._lock:
            tasks = self.get_all()
            task = self.find_by_id(tasks, task_id)
            if task is None:
                raise TaskNotFoundError(task_id)

            fields = normalize_keys(patch)
            task.update_fields(fields)
            if fields.get("status") is not None:
                task.update_status(fields["status"], at=self.clock())
            task.priority_score = task.calc_priority_score()

            if not self.save_all(tasks):
                _msg = f"Failed to persist task update: {task_id}"
                raise PersistenceError(_msg)
            return task

    @staticmethod
    def _remove_by_id(tasks: list[Task], task_id: str) -> list[Task]:
        kept: list[Task] = []
        for t in tasks:
            if t.id == task_id:
                continue
            t.sub_tasks = TaskStore._remove_by_id(t.sub_tasks, task_id)
            kept.append(t)
        return kept

    def delete(self, task_id: str) -> bool:
        """タスクを部分木ごと削除する。存在しない id の削除も成功扱い。

        Returns:
            保存に成功したかどうか
        """
        with self._lock:
            tasks = self._remove_by_id(self.get_all(), task_id)
            return self.save_all(tasks)

    # ---- 設定 ----

    def get_settings(self) -> dict[str, Any]:
        match self.backend.get(SETTINGS_KEY):
            case Ok(None):
                return default_settings()
            case Ok(raw):
                try:
                    data = json.loads(raw)
                except ValueError as e:
                    logger.warning("Failed to load settings: %s", e)
                    return default_settings()
                if not isinstance(data, dict):
                    logger.warning("Ignored settings payload of type %s", type(data).__name__)
                    return default_settings()
                return data
            case Err(e):
                logger.warning("Failed to read settings: %s", e)
                return default_settings()
            case _:
                return default_settings()

    def save_settings(self, settings: Mapping[str, Any]) -> bool:
        try:
            payload = json.dumps(dict(settings))
        except (TypeError, ValueError):
            logger.exception("Failed to serialize settings")
            return False
        res = self.backend.set(SETTINGS_KEY, payload)
        if res.is_err():
            logger.error("Failed to save settings: %s", res.unwrap_err())
            return False
        return True

    # ---- エクスポート / インポート ----

    def export_all(self) -> dict[str, Any]:
        return {
            "version": EXPORT_VERSION,
            "exportDate": to_iso(self.clock()),
            "tasks": [t.to_dict() for t in self.get_all()],
            "settings": self.get_settings(),
        }

    def import_all(self, data: Mapping[str, Any]) -> bool:
        """export_all と同じ形のデータを取り込む。

        tasks / settings のどちらかが無ければ、その部分は何もしない。
        """
        try:
            tasks_data = data.get("tasks")
            if isinstance(tasks_data, list):
                tasks = [Task.from_dict(d) for d in tasks_data]
                if not self.save_all(tasks):
                    logger.warning("Imported tasks could not be saved")
            settings = data.get("settings")
            if settings is not None:
                self.save_settings(settings)
        except (AttributeError, TypeError, ValueError):
            logger.exception("Failed to import data")
            return False
        return True

    def mark_backup(self, at: datetime | None = None) -> bool:
        res = self.backend.set(LAST_BACKUP_KEY, to_iso(at or self.clock()) or "")
        return res.is_ok()

    def get_last_backup(self) -> datetime | None:
        match self.backend.get(LAST_BACKUP_KEY):
            case Ok(None):
                return None
            case Ok(raw):
                try:
                    return parse_datetime(raw)
                except ValueError:
                    logger.warning("Ignored malformed backup timestamp: %r", raw)
                    return None
            case _:
                return None

    # ---- 保守 ----

    def clear_all(self) -> bool:
        ok = True
        for key in STORAGE_KEYS:
            res = self.backend.remove(key)
            if res.is_err():
                logger.error("Failed to remove %s: %s", key, res.unwrap_err())
                ok = False
        return ok

    def storage_info(self) -> dict[str, float]:
        """保存データのサイズ (KB, 小数2桁)。"""
        tasks_size = len(self.backend.get(TASKS_KEY).unwrap_or(default=None) or "")
        settings_size = len(self.backend.get(SETTINGS_KEY).unwrap_or(default=None) or "")
        return {
            "tasksSize": round(tasks_size / 1024, 2),
            "settingsSize": round(settings_size / 1024, 2),
            "totalSize": round((tasks_size + settings_size) / 1024, 2),
        }
