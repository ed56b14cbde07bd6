from junban.storage.base import KeyValueBackend
from junban.storage.memory_store import MemoryBackend
from junban.storage.sqlite3_store import SQLiteBackend
from junban.storage.yaml_store import YAMLBackend
from junban.util.dirs import load_env

__all__ = [
    "KeyValueBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "YAMLBackend",
    "get_backend",
]


def get_backend(data_path: str | None = None) -> KeyValueBackend:
    """データパスの拡張子からバックエンドを選ぶ。未指定なら設定 (DATA_PATH) を使う。"""
    if data_path is None:
        data_path = load_env()["DATA_PATH"]
    if data_path == ":memory:":
        return MemoryBackend()
    if data_path.endswith((".yaml", ".yml")):
        return YAMLBackend(data_path)
    if data_path.endswith((".db", ".sqlite3")):
        return SQLiteBackend(data_path)
    _msg = f"Invalid data path: {data_path}"
    raise ValueError(_msg)
