import locale
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Literal

from junban.core.models import Task
from junban.core.priority import calc_weight, is_overdue
from junban.util.time import now_utc

SortBy = Literal["priority", "createdAt", "dueDate", "title"]
SortOrder = Literal["asc", "desc"]

STATUS_RANK: dict[str, int] = {"in_progress": 0, "pending": 1, "completed": 2}


@dataclass(frozen=True)
class SortOptions:
    sort_by: SortBy = "priority"
    sort_order: SortOrder = "desc"
    group_by_status: bool = False
    prioritize_overdue: bool = True


def _weight(t: Task, now: datetime) -> float:
    return calc_weight(t.importance, t.urgency, t.created_at, now)


def _sign(x: float) -> int:
    return (x > 0) - (x < 0)


def _compare_field(a: Task, b: Task, sort_by: str, now: datetime) -> int:
    match sort_by:
        case "priority":
            return _sign(_weight(a, now) - _weight(b, now))
        case "createdAt":
            return _sign((a.created_at - b.created_at).total_seconds())
        case "dueDate":
            # 期限なしは期限ありより後ろ。両方なしは同順
            if a.due_date is None and b.due_date is None:
                return 0
            if a.due_date is None:
                return 1
            if b.due_date is None:
                return -1
            return _sign((a.due_date - b.due_date).total_seconds())
        case "title":
            return _sign(locale.strcoll(a.title, b.title))
        case _:
            return 0


def compare_tasks(a: Task, b: Task, options: SortOptions, now: datetime) -> int:
    """2つのタスクの並び順を決める比較関数 (負なら a が先)。"""
    if options.prioritize_overdue and options.sort_by == "priority":
        a_overdue = is_overdue(a, now)
        b_overdue = is_overdue(b, now)
        # 期限切れは sort_order に関係なく先頭
        if a_overdue and not b_overdue:
            return -1
        if not a_overdue and b_overdue:
            return 1

    if options.group_by_status and options.sort_by == "priority":
        diff = STATUS_RANK.get(a.status, 1) - STATUS_RANK.get(b.status, 1)
        if diff != 0:
            return diff

    comparison = _compare_field(a, b, options.sort_by, now)
    if options.sort_order == "desc":
        comparison = -comparison

    # priority 以外で同順なら weight 降順で決める
    if comparison == 0 and options.sort_by != "priority":
        comparison = _sign(_weight(b, now) - _weight(a, now))
    return comparison


def sort_tasks(
    tasks: Iterable[Task],
    options: SortOptions | None = None,
    *,
    now: datetime | None = None,
) -> list[Task]:
    """タスクを並べ替えた新しいリストを返す。入力は変更しない。

    比較の途中で時刻がずれないよう now は呼び出しごとに一度だけ決める。
    """
    opts = options or SortOptions()
    ts = now or now_utc()
    return sorted(tasks, key=cmp_to_key(lambda a, b: compare_tasks(a, b, opts, ts)))
