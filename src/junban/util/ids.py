import uuid
from datetime import datetime

from pyresults import Err, Ok, Result

from junban.util.time import UTC


def gen_task_id() -> str:
    ts = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
    return f"{uuid.uuid4().hex}_{ts}"


def parse_id(
    s: str,
    *,
    source_ids: list[str],
    shortend_length: int | None = None,
) -> Result[str, str]:
    """完全一致、または先頭 shortend_length 文字の前方一致でIDを解決する。"""
    s = s.strip()
    if len(s) == 0:
        return Err[str, str]("Empty ID")
    candidates = [tid for tid in source_ids if tid == s]
    if len(candidates) == 0 and shortend_length is not None and len(s) == shortend_length:
        candidates = [tid for tid in source_ids if tid[:shortend_length] == s]
    if len(candidates) == 1:
        return Ok[str, str](candidates[0])
    if len(candidates) > 1:
        _msg = f"Ambiguous ID: {s} (multiple tasks. Please set full ID.)"
        return Err[str, str](_msg)
    _msg = f"Unknown ID: {s} (please set correct ID.)"
    return Err[str, str](_msg)
