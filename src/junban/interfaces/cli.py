# ruff: noqa: T201

import argparse
import contextlib
import locale
import sys
from typing import Any

from pyresults import Err, Ok

from junban.core.errors import OpsError
from junban.core.models import STATUSES
from junban.core.ops import TaskStore
from junban.core.sort import SortOptions, sort_tasks
from junban.io.json_io import export_json, import_json
from junban.io.std_io import format_line, print_task, print_tree
from junban.storage import get_backend
from junban.util.ids import parse_id
from junban.util.logger import setup_logger, setup_mode

logger = setup_logger("junban", is_stream=True, is_file=False)

LENGTH_SHORTEND_ID = 8


def get_store(data_path: str | None = None) -> TaskStore:
    return TaskStore(get_backend(data_path))


def _resolve_id(st: TaskStore, s: str) -> str:
    """完全なID、先頭8文字、またはタスク番号 (T001.2) からIDを解決する。"""
    all_tasks = [t for root in st.get_all() for t in root.iter_tree()]
    for t in all_tasks:
        if t.task_number and t.task_number == s.strip():
            return t.id
    match parse_id(s, source_ids=[t.id for t in all_tasks], shortend_length=LENGTH_SHORTEND_ID):
        case Ok(tid):
            return tid  # type: ignore[no-any-return]
        case Err(e):
            raise OpsError(e)
        case _:
            _msg = "Unexpected error"
            raise OpsError(_msg)


def _fields_from_args(args: argparse.Namespace) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for name in ("title", "description", "importance", "urgency", "due", "reminder", "estimate", "actual"):
        value = getattr(args, name, None)
        if value is None:
            continue
        key = {
            "due": "dueDate",
            "reminder": "reminderTime",
            "estimate": "estimatedHours",
            "actual": "actualHours",
        }.get(name, name)
        fields[key] = value
    return fields


def cmd_add(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    try:
        data = _fields_from_args(args)
        if args.parent:
            data["parentId"] = _resolve_id(st, args.parent)
        t = st.create(data)
        print(f"{t.task_number} {t.id}")
    except (OpsError, ValueError) as e:
        _msg = f"An error occurred while adding a task: {e!s}"
        logger.exception(_msg)
        return 1
    else:
        return 0


def cmd_list(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    clock_now = st.clock()
    tasks = [t for root in st.get_all() for t in root.iter_tree()] if args.all else st.get_all()
    if args.status:
        tasks = [t for t in tasks if t.status == args.status]
    if args.query:
        q = args.query.lower()
        tasks = [t for t in tasks if q in t.title.lower() or q in (t.description or "").lower()]
    options = SortOptions(
        sort_by=args.sort_by,
        sort_order=args.order,
        group_by_status=args.group_by_status,
        prioritize_overdue=not args.no_overdue_first,
    )
    for t in sort_tasks(tasks, options, now=clock_now):
        print(format_line(t, clock_now))
    return 0


def cmd_tree(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    print_tree(st.get_all(), st.clock())
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    try:
        print_task(st.get_task(_resolve_id(st, args.id)))
    except OpsError as e:
        _msg = f"An error occurred while showing a task: {e!s}"
        logger.exception(_msg)
        return 1
    else:
        return 0


def _update(args: argparse.Namespace, patch: dict[str, Any]) -> int:
    st = get_store(args.data)
    try:
        t = st.update(_resolve_id(st, args.id), patch)
        print(f"{t.task_number} [{t.status}] {t.title}")
    except (OpsError, ValueError) as e:
        _msg = f"An error occurred while updating a task: {e!s}"
        logger.exception(_msg)
        return 1
    else:
        return 0


def cmd_update(args: argparse.Namespace) -> int:
    patch = _fields_from_args(args)
    if args.status is not None:
        patch["status"] = args.status
    return _update(args, patch)


def cmd_start(args: argparse.Namespace) -> int:
    return _update(args, {"status": "in_progress"})


def cmd_done(args: argparse.Namespace) -> int:
    return _update(args, {"status": "completed"})


def cmd_rm(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    try:
        tid = _resolve_id(st, args.id)
    except OpsError as e:
        _msg = f"An error occurred while removing a task: {e!s}"
        logger.exception(_msg)
        return 1
    if not st.delete(tid):
        print("Error: failed to save tasks")
        return 1
    print(f"removed: {tid}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    try:
        export_json(st.export_all(), args.path)
    except OSError as e:
        _msg = f"An error occurred while exporting tasks: {e!s}"
        logger.exception(_msg)
        return 1
    st.mark_backup()
    print(f"exported to {args.path}")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    try:
        data = import_json(args.path)
    except (OSError, ValueError) as e:
        _msg = f"An error occurred while importing tasks: {e!s}"
        logger.exception(_msg)
        return 1
    if not st.import_all(data):
        print("Error: failed to import data")
        return 1
    print(f"imported from {args.path}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    st = get_store(args.data)
    info = st.storage_info()
    print(f"tasks: {info['tasksSize']} KB  settings: {info['settingsSize']} KB  total: {info['totalSize']} KB")
    print(f"last backup: {st.get_last_backup()}")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear without --yes")
        return 1
    return 0 if get_store(args.data).clear_all() else 1


def _add_field_args(sp: argparse.ArgumentParser, *, title_required: bool) -> None:
    if title_required:
        sp.add_argument("title")
    else:
        sp.add_argument("--title")
    sp.add_argument("--description")
    sp.add_argument("--importance", type=int, choices=[1, 2, 3])
    sp.add_argument("--urgency", type=int, choices=[1, 2, 3])
    sp.add_argument("--due", help="due date in ISO format")
    sp.add_argument("--reminder", help="reminder time in ISO format")
    sp.add_argument("--estimate", type=float, help="estimated hours")
    sp.add_argument("--actual", type=float, help="actual hours")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="junban", description="Eisenhower-matrix task manager")
    p.add_argument("--debug", action="store_true", help="debug mode")
    p.add_argument("--data", help="data path (.yaml / .db); defaults to JB_DATA_PATH or config.env")
    sub = p.add_subparsers(dest="cmd", required=True)

    # add
    sp = sub.add_parser("add", help="add a task")
    _add_field_args(sp, title_required=True)
    sp.add_argument("--parent", help="parent task ID or number")
    sp.set_defaults(func=cmd_add)

    # list
    sp = sub.add_parser("list", help="list tasks")
    sp.add_argument("--all", action="store_true", help="include sub tasks")
    sp.add_argument("--status", choices=list(STATUSES))
    sp.add_argument("--query")
    sp.add_argument("--sort-by", choices=["priority", "createdAt", "dueDate", "title"], default="priority")
    sp.add_argument("--order", choices=["asc", "desc"], default="desc")
    sp.add_argument("--group-by-status", action="store_true")
    sp.add_argument("--no-overdue-first", action="store_true")
    sp.set_defaults(func=cmd_list)

    # tree
    sp = sub.add_parser("tree", help="show the task forest")
    sp.set_defaults(func=cmd_tree)

    # show
    sp = sub.add_parser("show", help="show task")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_show)

    # update
    sp = sub.add_parser("update", help="update fields of a task")
    sp.add_argument("id")
    _add_field_args(sp, title_required=False)
    sp.add_argument("--status", choices=list(STATUSES))
    sp.set_defaults(func=cmd_update)

    # start / done
    sp = sub.add_parser("start", help="mark in progress")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_start)

    sp = sub.add_parser("done", help="mark completed")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_done)

    # rm
    sp = sub.add_parser("rm", help="remove a task and its sub tasks")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_rm)

    # export / import
    sp = sub.add_parser("export", help="export to json")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_export)

    sp = sub.add_parser("import", help="import from json (replaces current tasks)")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_import)

    # info / clear
    sp = sub.add_parser("info", help="show storage usage")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("clear", help="remove all stored data")
    sp.add_argument("--yes", action="store_true")
    sp.set_defaults(func=cmd_clear)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    with contextlib.suppress(locale.Error):
        locale.setlocale(locale.LC_ALL, "")
    setup_logger("junban", is_stream=True, is_file=True)
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_mode(is_debug=args.debug)
    return args.func(args)  # type: ignore[no-any-return]


if __name__ == "__main__":
    sys.exit(main())
