from pyresults import Err, Ok, Result

from junban.storage.base import KeyValueBackend
from junban.util.logger import setup_logger

logger = setup_logger("junban", is_stream=True, is_file=False)


class MemoryBackend(KeyValueBackend):
    """dict をそのまま使うメモリ上の実装。

    quota を指定すると、全値の文字数の合計が quota を超える書き込みを Err にする
    (ブラウザの localStorage の容量超過と同じ振る舞い)。
    """

    def __init__(self, quota: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self.quota = quota

    def get(self, key: str) -> Result[str | None, str]:
        return Ok[str | None, str](self._data.get(key))

    def set(self, key: str, value: str) -> Result[None, str]:
        if self.quota is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self.quota:
                _msg = f"Quota exceeded: {used + len(value)} > {self.quota} (key={key})"
                logger.error(_msg)
                return Err[None, str](_msg)
        self._data[key] = value
        return Ok[None, str](None)

    def remove(self, key: str) -> Result[None, str]:
        self._data.pop(key, None)
        return Ok[None, str](None)

    def keys(self) -> list[str]:
        return list[str](self._data)
