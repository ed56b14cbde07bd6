from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pyresults import Err, Ok, Result

from junban.storage.base import KeyValueBackend
from junban.util.logger import setup_logger

logger = setup_logger("junban", is_stream=True, is_file=False)


class YAMLBackend(KeyValueBackend):
    """1つの YAML ファイルに `entries: {key: value}` として保存する実装。

    読み書きのたびにファイル全体を読み直す (プロセス内キャッシュは持たない)。
    """

    def __init__(self, data_path: str) -> None:
        self.data_path = data_path

    # ---- 基本IO ----

    def _read(self) -> Result[dict[str, str], str]:
        _path = Path(self.data_path)
        if not _path.exists():
            return Ok[dict[str, str], str]({})
        try:
            with _path.open(encoding="utf-8") as f:
                raw: Any = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            _msg = f"Failed to load YAML file: {e}"
            logger.exception(_msg)
            return Err[dict[str, str], str](_msg)
        if not isinstance(raw, dict) or not isinstance(raw.get("entries", {}), dict):
            _msg = f"Unexpected YAML layout in {self.data_path}"
            logger.error(_msg)
            return Err[dict[str, str], str](_msg)
        return Ok[dict[str, str], str]({str(k): str(v) for k, v in raw.get("entries", {}).items()})

    def _write(self, entries: dict[str, str]) -> Result[None, str]:
        _path = Path(self.data_path)
        try:
            _path.parent.mkdir(parents=True, exist_ok=True)
            with _path.open("w", encoding="utf-8") as f:
                yaml.safe_dump({"entries": entries}, f, allow_unicode=True, sort_keys=True)
        except (OSError, UnicodeError, yaml.YAMLError) as e:
            _msg = f"Failed to write YAML file: {e}"
            logger.exception(_msg)
            return Err[None, str](_msg)
        return Ok[None, str](None)

    # ---- key-value ----

    def get(self, key: str) -> Result[str | None, str]:
        match self._read():
            case Ok(entries):
                return Ok[str | None, str](entries.get(key))
            case Err(e):
                return Err[str | None, str](e)
            case _:
                return Err[str | None, str]("Unexpected error")

    def set(self, key: str, value: str) -> Result[None, str]:
        match self._read():
            case Ok(entries):
                entries[key] = value
                return self._write(entries)
            case Err(e):
                # 壊れたファイルを黙って上書きしない
                return Err[None, str](f"Error (set): {e}")
            case _:
                return Err[None, str]("Unexpected error")

    def remove(self, key: str) -> Result[None, str]:
        match self._read():
            case Ok(entries):
                if key not in entries:
                    return Ok[None, str](None)
                del entries[key]
                return self._write(entries)
            case Err(e):
                return Err[None, str](f"Error (remove): {e}")
            case _:
                return Err[None, str]("Unexpected error")
