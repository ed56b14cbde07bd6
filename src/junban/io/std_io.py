# ruff: noqa: T201

from datetime import datetime

from junban.core import priority
from junban.core.models import Task
from junban.util.time import to_iso


def format_line(t: Task, now: datetime) -> str:
    mark = "!" if t.is_overdue(now) else " "
    indent = "  " * (t.task_level - 1)
    return f"{mark} {indent}{t.task_number or '-'} [{t.status}] p={t.priority_score} {t.title} ({t.id[:8]})"


def print_task(t: Task) -> None:
    print(f"id: {t.id}")
    print(f"number: {t.task_number}  level: {t.task_level}  parent: {t.parent_id}")
    print(f"title: {t.title}")
    print(f"status: {t.status} ({priority.get_status_label(t.status)})  progress: {t.progress()}%")
    print(
        f"importance: {t.importance}  urgency: {t.urgency}  score: {t.priority_score}  "
        f"({priority.get_label(t.importance, t.urgency)})",
    )
    print(f"due: {to_iso(t.due_date)}  reminder: {to_iso(t.reminder_time)}")
    print(f"created_at: {to_iso(t.created_at)}  started_at: {to_iso(t.started_at)}")
    print(f"completed_at: {to_iso(t.completed_at)}")
    print(f"hours: {t.actual_hours}/{t.estimated_hours}")
    if t.description:
        print(f"description: {t.description}")
    if t.sub_tasks:
        print(f"sub_tasks: {[c.task_number or c.id for c in t.sub_tasks]}")


def print_tree(tasks: list[Task], now: datetime) -> None:
    for root in tasks:
        for t in root.iter_tree():
            print(format_line(t, now))
