from abc import ABC, abstractmethod

from pyresults import Result


class KeyValueBackend(ABC):
    """フラットな key-value ストレージの抽象基底クラス。

    TaskStore はタスクの森と設定をそれぞれ1つの文字列としてここに保存します。
    YAML ファイル / SQLite / メモリなどの実装を差し替えて使います。

    Public API:
        - get(): キーに対応する値を取得する (存在しなければ Ok(None))
        - set(): キーに値を書き込む
        - remove(): キーを削除する (存在しなくても成功)

    I/O の失敗は例外ではなく Err(str) で返します。
    """

    @abstractmethod
    def get(self, key: str) -> Result[str | None, str]:
        """キーに対応する値を取得する。

        Returns:
            Ok(str): 値が存在する場合
            Ok(None): キーが存在しない場合
            Err(str): 読み込みに失敗した場合 (例: ファイル破損)
        """
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> Result[None, str]:
        """キーに値を書き込む。

        Returns:
            Ok(None): 成功時
            Err(str): 失敗時 (例: 容量超過、書き込み不可)
        """
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> Result[None, str]:
        """キーを削除する。

        Returns:
            Ok(None): 成功時 (キーが無い場合も含む)
            Err(str): 失敗時
        """
        raise NotImplementedError

    def close(self) -> None:  # noqa: B027
        """保持しているリソースを解放する。"""
