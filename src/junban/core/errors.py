class OpsError(Exception):
    """ops 層でのユースケース実行失敗を表す例外。"""


class InvalidInputError(OpsError, ValueError):
    """厳格な検証 (calc_score など) に渡された値が範囲外・非整数のとき。"""


class TaskNotFoundError(OpsError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ParentNotFoundError(OpsError):
    def __init__(self, parent_id: str) -> None:
        super().__init__(f"Parent task not found: {parent_id}")
        self.parent_id = parent_id


class DepthExceededError(OpsError):
    def __init__(self, task_id: str, max_level: int) -> None:
        super().__init__(f"Task {task_id} is already at level {max_level}; cannot nest deeper")
        self.task_id = task_id
        self.max_level = max_level


class PersistenceError(OpsError):
    """create / update の結果をバックエンドに書き込めなかった。"""
