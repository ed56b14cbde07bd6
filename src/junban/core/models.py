import math
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from junban.core import priority
from junban.core.errors import DepthExceededError
from junban.util.ids import gen_task_id
from junban.util.logger import setup_logger
from junban.util.time import now_utc, parse_datetime, to_iso

logger = setup_logger("junban", is_stream=True, is_file=False)

Status = Literal["pending", "in_progress", "completed"]
STATUSES: tuple[str, ...] = ("pending", "in_progress", "completed")

DEFAULT_LEVEL = 2
MIN_TASK_LEVEL = 1
MAX_TASK_LEVEL = 10

# 可搬形式 (camelCase) のキー -> 属性名
PORTABLE_KEYS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "importance": "importance",
    "urgency": "urgency",
    "status": "status",
    "parentId": "parent_id",
    "taskLevel": "task_level",
    "taskNumber": "task_number",
    "createdAt": "created_at",
    "startedAt": "started_at",
    "completedAt": "completed_at",
    "dueDate": "due_date",
    "reminderTime": "reminder_time",
    "estimatedHours": "estimated_hours",
    "actualHours": "actual_hours",
    "priorityScore": "priority_score",
    "subTasks": "sub_tasks",
}
_ATTR_NAMES = frozenset(PORTABLE_KEYS.values())

# update_fields で書き換えてよい属性。id / 木構造 / 派生値 / 作成日時は対象外
PATCHABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "importance",
        "urgency",
        "due_date",
        "reminder_time",
        "estimated_hours",
        "actual_hours",
    },
)


# ---- 寛容な入力補正 ----------------------------------------------------------
# フォーム入力をそのまま受けるため、不正値は例外にせず既定値へ丸める。


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def coerce_level(value: Any) -> int:
    v = _parse_int(value)
    if v is not None and priority.LEVEL_MIN <= v <= priority.LEVEL_MAX:
        return v
    return DEFAULT_LEVEL


def coerce_status(value: Any) -> Status:
    if value in STATUSES:
        return value  # type: ignore[no-any-return]
    return "pending"


def coerce_task_level(value: Any) -> int:
    v = _parse_int(value)
    if v is None:
        return MIN_TASK_LEVEL
    return max(MIN_TASK_LEVEL, min(MAX_TASK_LEVEL, v))


def coerce_hours(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v):
        return 0.0
    return max(0.0, v)


def _coerce_text(value: Any) -> str:
    return "" if value is None else str(value)


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "title": _coerce_text,
    "description": _coerce_text,
    "importance": coerce_level,
    "urgency": coerce_level,
    "status": coerce_status,
    "task_level": coerce_task_level,
    "started_at": parse_datetime,
    "completed_at": parse_datetime,
    "due_date": parse_datetime,
    "reminder_time": parse_datetime,
    "estimated_hours": coerce_hours,
    "actual_hours": coerce_hours,
}


def normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    """camelCase / snake_case どちらのキーも属性名に揃える。未知のキーは捨てる。"""
    out: dict[str, Any] = {}
    for key, value in d.items():
        name = PORTABLE_KEYS.get(key, key)
        if name in _ATTR_NAMES:
            out[name] = value
    return out


@dataclass
class Task:
    id: str = field(default_factory=gen_task_id)
    title: str = ""
    description: str = ""
    importance: int = DEFAULT_LEVEL
    urgency: int = DEFAULT_LEVEL
    status: Status = "pending"
    parent_id: str | None = None
    task_level: int = MIN_TASK_LEVEL
    task_number: str = ""
    created_at: datetime = field(default_factory=now_utc)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    due_date: datetime | None = None
    reminder_time: datetime | None = None
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    sub_tasks: list["Task"] = field(default_factory=list)
    priority_score: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if not self.id:
            self.id = gen_task_id()
        for name, coerce in _COERCERS.items():
            setattr(self, name, coerce(getattr(self, name)))
        self.created_at = parse_datetime(self.created_at) or now_utc()
        if not isinstance(self.sub_tasks, list):
            self.sub_tasks = []
        self.priority_score = self.calc_priority_score()

    # ---- 優先度 ----

    def calc_priority_score(self) -> int:
        return priority.calc_score(self.importance, self.urgency)

    @property
    def category(self) -> priority.Category:
        return priority.get_category(self.importance, self.urgency)

    def is_overdue(self, now: datetime | None = None) -> bool:
        return priority.is_overdue(self, now or now_utc())

    # ---- 状態遷移 ----

    def update_status(self, new_status: str, *, at: datetime | None = None) -> None:
        """ステータスを更新し、遷移に応じて started_at / completed_at を記録する。

        不正なステータスは無視する (現在のステータスを維持)。
        """
        if new_status not in STATUSES:
            logger.debug("Ignored invalid status %r for task %s", new_status, self.id)
            return
        old_status = self.status
        self.status = new_status  # type: ignore[assignment]
        ts = parse_datetime(at) or now_utc()
        if new_status == "in_progress" and old_status == "pending":
            if self.started_at is None:
                self.started_at = ts
        elif new_status == "completed" and old_status != "completed":
            self.completed_at = ts

    def update_fields(self, patch: Mapping[str, Any]) -> None:
        """パッチを適用する。書き換え可能な属性以外のキーは無視する。

        値は構築時と同じ補正を通してから代入し、最後に priority_score を再計算する。
        """
        fields = normalize_keys(patch)
        ignored = sorted(k for k in fields if k not in PATCHABLE_FIELDS and k != "status")
        if ignored:
            logger.debug("Ignored non-patchable fields for task %s: %s", self.id, ignored)
        coerced = {
            name: _COERCERS.get(name, lambda v: v)(value) for name, value in fields.items() if name in PATCHABLE_FIELDS
        }
        for name, value in coerced.items():
            setattr(self, name, value)
        self.priority_score = self.calc_priority_score()

    # ---- 木構造 ----

    def add_child(self, child: "Task") -> None:
        if self.task_level >= MAX_TASK_LEVEL:
            raise DepthExceededError(self.id, MAX_TASK_LEVEL)
        child.parent_id = self.id
        child.task_level = self.task_level + 1
        self.sub_tasks.append(child)

    def remove_child(self, child_id: str) -> None:
        self.sub_tasks = [c for c in self.sub_tasks if c.id != child_id]

    def iter_tree(self) -> Iterator["Task"]:
        """自身を含む部分木を行きがけ順で辿る。"""
        yield self
        for c in self.sub_tasks:
            yield from c.iter_tree()

    def progress(self) -> int:
        """進捗率 (0-100)。子タスクがあれば完了した子の割合。"""
        if self.status == "completed":
            return 100
        if not self.sub_tasks:
            return 50 if self.status == "in_progress" else 0
        done = sum(1 for c in self.sub_tasks if c.status == "completed")
        # 四捨五入 (0.5 は切り上げ)
        return math.floor(done / len(self.sub_tasks) * 100 + 0.5)

    # ---- 変換 ----

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "importance": self.importance,
            "urgency": self.urgency,
            "status": self.status,
            "parentId": self.parent_id,
            "taskLevel": self.task_level,
            "taskNumber": self.task_number,
            "createdAt": to_iso(self.created_at),
            "startedAt": to_iso(self.started_at),
            "completedAt": to_iso(self.completed_at),
            "dueDate": to_iso(self.due_date),
            "reminderTime": to_iso(self.reminder_time),
            "estimatedHours": self.estimated_hours,
            "actualHours": self.actual_hours,
            "priorityScore": self.priority_score,
            "subTasks": [c.to_dict() for c in self.sub_tasks],
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Task":
        kwargs = normalize_keys(d)
        # priority_score は派生値なので入力からは受け取らない
        kwargs.pop("priority_score", None)
        children = kwargs.pop("sub_tasks", None)
        t = Task(**kwargs)
        if isinstance(children, list):
            t.sub_tasks = [c if isinstance(c, Task) else Task.from_dict(c) for c in children]
        return t

    def clone(self) -> "Task":
        """新しい id を持つ深いコピーを作る。直下の子の parent_id は新しい id に付け替える。"""
        d = self.to_dict()
        d["id"] = None
        t = Task.from_dict(d)
        for c in t.sub_tasks:
            c.parent_id = t.id
        return t
