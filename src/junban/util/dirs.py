import os
from pathlib import Path

HOME_ENV = "JB_HOME_DIR"
DATA_PATH_ENV = "JB_DATA_PATH"


def default_home() -> str:
    return os.environ.get(HOME_ENV, (Path.home() / ".junban").as_posix())


def default_data_path() -> str:
    return (Path(default_home()) / "junban.yaml").as_posix()


def default_env_path() -> str:
    return (Path(default_home()) / "config.env").as_posix()


def ensure_dirs() -> None:
    Path(default_home()).mkdir(parents=True, exist_ok=True)


def _read_config(path: Path) -> dict[str, str]:
    config: dict[str, str] = {}
    if not path.is_file():
        return config
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep and key.strip():
            config[key.strip()] = value.strip()
    return config


def load_env(path: str | None = None) -> dict[str, str]:
    """config.env を読み込み、環境変数で上書きした設定を返す。

    `KEY=VALUE` 形式の行のみ解釈し、空行と `#` で始まる行は無視する。
    DATA_PATH は JB_DATA_PATH > config.env > 既定値 の順で決まる。
    """
    env = _read_config(Path(path or default_env_path()))
    env["DATA_PATH"] = os.environ.get(DATA_PATH_ENV) or env.get("DATA_PATH") or default_data_path()
    return env
