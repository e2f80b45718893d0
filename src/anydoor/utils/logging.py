"""Log file setup shared by the anydoor command line and editor hosts."""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path

__all__ = ["setup_logging", "LOG_FILE_NAME"]

LOG_FILE_NAME = "anydoor.log"
_DEFAULT_LOG_DIR = Path.home() / ".anydoor" / "logs"
_FILE_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "httpx", "httpcore")
_active_path: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    force: bool = False,
) -> Path:
    """Route every record to ``anydoor.log`` and return the file's path.

    The directory is ``log_dir``, then ``$ANYDOOR_LOG_DIR``, then
    ``~/.anydoor/logs``. Later calls keep the first configuration unless
    ``force`` is set, which is how a host raises the level once the persisted
    ``debug_logging`` flag is known.
    """

    global _active_path
    if _active_path is not None and not force:
        return _active_path

    directory = Path(log_dir or os.environ.get("ANYDOOR_LOG_DIR") or _DEFAULT_LOG_DIR).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / LOG_FILE_NAME

    handlers: list[logging.Handler] = [_file_handler(path, level)]
    if console:
        handlers.append(_console_handler(level))
    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _active_path = path
    return path


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _console_handler(level: int) -> logging.Handler:
    # stdout belongs to command output such as --dump-settings.
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(max(level, logging.WARNING))
    handler.setFormatter(logging.Formatter("anydoor: %(levelname)s %(message)s"))
    return handler
