import json
from pathlib import Path
from typing import Any


def export_json(data: dict[str, Any], path: str) -> None:
    """export_all の結果をファイルに書き出す。既存ファイルは上書きしない。"""
    out = Path(path)
    if out.exists():
        _msg = f"File already exists: {out}"
        raise FileExistsError(_msg)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def import_json(path: str) -> dict[str, Any]:
    src = Path(path)
    if not src.is_file():
        _msg = f"File not found: {src}"
        raise FileNotFoundError(_msg)
    data = json.loads(src.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        _msg = f"Backup must be a JSON object: {src}"
        raise ValueError(_msg)
    return data
