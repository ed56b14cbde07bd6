"""Eisenhower-matrix based priority scoring.

重要度 (importance) と緊急度 (urgency) はどちらも 1-3 の序数。
スコアは `importance * 3 + urgency` で 4-12 の整数になる。

NOTE: calc_score は厳格 (範囲外なら InvalidInputError) だが、Task のフィールド検証は
寛容 (範囲外は 2 に丸める)。フォーム入力を受ける側と計算側で方針が違うのは意図的なので、
どちらかに統一しないこと。
"""

from datetime import datetime
from typing import TYPE_CHECKING, Literal

from junban.core.errors import InvalidInputError
from junban.util.time import days_between

if TYPE_CHECKING:
    from junban.core.models import Task

Category = Literal[
    "urgent_important",
    "important_not_urgent",
    "urgent_not_important",
    "not_urgent_not_important",
]

LEVEL_MIN = 1
LEVEL_MAX = 3
TIME_FACTOR_PER_DAY = 0.01
TIME_FACTOR_CAP = 0.5

_CATEGORY_COLORS: dict[str, str] = {
    "urgent_important": "red",
    "important_not_urgent": "yellow",
    "urgent_not_important": "blue",
    "not_urgent_not_important": "gray",
}
_CATEGORY_LABELS: dict[str, str] = {
    "urgent_important": "Urgent & important",
    "important_not_urgent": "Important, not urgent",
    "urgent_not_important": "Urgent, not important",
    "not_urgent_not_important": "Neither urgent nor important",
}
_STATUS_COLORS: dict[str, str] = {
    "pending": "gray",
    "in_progress": "blue",
    "completed": "green",
}
_STATUS_LABELS: dict[str, str] = {
    "pending": "To do",
    "in_progress": "In progress",
    "completed": "Done",
}


def _check_level(name: str, value: object) -> int:
    # bool は int のサブクラスなので明示的に弾く
    if isinstance(value, bool) or not isinstance(value, int) or not LEVEL_MIN <= value <= LEVEL_MAX:
        _msg = f"{name} must be an integer between {LEVEL_MIN} and {LEVEL_MAX}: {value!r}"
        raise InvalidInputError(_msg)
    return value


def calc_score(importance: int, urgency: int) -> int:
    """優先度スコアを計算する。

    Raises:
        InvalidInputError: importance / urgency が 1-3 の整数でない場合
    """
    i = _check_level("importance", importance)
    u = _check_level("urgency", urgency)
    return i * 3 + u


def get_category(importance: int, urgency: int) -> Category:
    # 判定順に意味がある: (3, 3) は important_not_urgent ではなく urgent_important
    if importance == 3 and urgency == 3:
        return "urgent_important"
    if importance == 3 and urgency < 3:
        return "important_not_urgent"
    if importance < 3 and urgency == 3:
        return "urgent_not_important"
    return "not_urgent_not_important"


def calc_weight(importance: int, urgency: int, created_at: datetime, now: datetime) -> float:
    """スコアに経過日数ぶりの重みを加えたもの (長く放置されたタスクほど少し上がる)。

    経過日数 1 日ごとに +0.01、上限 +0.5。
    """
    time_factor = min(days_between(created_at, now) * TIME_FACTOR_PER_DAY, TIME_FACTOR_CAP)
    return calc_score(importance, urgency) + time_factor


def is_overdue(task: "Task", now: datetime) -> bool:
    if task.due_date is None:
        return False
    return now > task.due_date and task.status != "completed"


def get_color(importance: int, urgency: int) -> str:
    return _CATEGORY_COLORS.get(get_category(importance, urgency), "gray")


def get_label(importance: int, urgency: int) -> str:
    return _CATEGORY_LABELS.get(get_category(importance, urgency), "Unknown")


def get_status_color(status: str) -> str:
    return _STATUS_COLORS.get(status, "gray")


def get_status_label(status: str) -> str:
    return _STATUS_LABELS.get(status, "Unknown")
