import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from junban.util.dirs import default_home, ensure_dirs

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_mode(*, is_debug: bool) -> None:
    if is_debug:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)


def _has_handler(logger: logging.Logger, kind: type[logging.Handler]) -> bool:
    return any(type(h) is kind for h in logger.handlers)


def setup_logger(
    name: str,
    *,
    is_stream: bool = True,
    is_file: bool = False,
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # モジュールごとに呼ばれるので、同種のハンドラは一度だけ付ける
    if (is_stream or not is_file) and not _has_handler(logger, logging.StreamHandler):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.WARNING)
        stream_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(stream_handler)

    if is_file and not _has_handler(logger, TimedRotatingFileHandler):
        ensure_dirs()
        time_rotate_file_handler = TimedRotatingFileHandler(
            (Path(default_home()) / f"{name.lower()}.log").as_posix(),
            when="MIDNIGHT",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        time_rotate_file_handler.setLevel(logging.DEBUG)
        time_rotate_file_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(time_rotate_file_handler)

    return logger
