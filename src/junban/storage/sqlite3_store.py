import sqlite3

from pyresults import Err, Ok, Result

from junban.storage.base import KeyValueBackend
from junban.util.logger import setup_logger

logger = setup_logger("junban", is_stream=True, is_file=False)


class SQLiteBackend(KeyValueBackend):
    """SQLite3 バックエンド実装.

    - kv テーブル: key -> value (TEXT) の1テーブルのみ
    """

    def __init__(self, data_path: str) -> None:
        self.data_path = data_path
        self._conn: sqlite3.Connection | None = None

    # ---- low-level helpers ---------------------------------------------

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.data_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        """テーブルがなければ作成する."""
        c = self.conn
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """,
        )
        c.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ---- key-value ------------------------------------------------------

    def get(self, key: str) -> Result[str | None, str]:
        try:
            row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except (sqlite3.Error, UnicodeError) as e:
            msg = f"Error on get(): {e!s}"
            logger.exception(msg)
            return Err[str | None, str](msg)
        if row is None:
            return Ok[str | None, str](None)
        return Ok[str | None, str](row["value"])

    def set(self, key: str, value: str) -> Result[None, str]:
        try:
            with self.conn:
                self.conn.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except (sqlite3.Error, UnicodeError) as e:
            msg = f"Error on set(): {e!s}"
            logger.exception(msg)
            return Err[None, str](msg)
        return Ok[None, str](None)

    def remove(self, key: str) -> Result[None, str]:
        try:
            with self.conn:
                self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except (sqlite3.Error, UnicodeError) as e:
            msg = f"Error on remove(): {e!s}"
            logger.exception(msg)
            return Err[None, str](msg)
        return Ok[None, str](None)
