"""
Console and rotating-file logging for the validator CLI and API.

Entry points call setup_logging() with the configured log directory; library
modules only use ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "cbd_validation.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

CONSOLE_HANDLER = "cbd-console"
FILE_HANDLER = "cbd-file"

# Chatty at DEBUG (python-multipart logs every upload part).
_QUIET_LOGGERS = ("multipart", "python_multipart")


def _installed(root: logging.Logger) -> bool:
    return any(handler.get_name() in (CONSOLE_HANDLER, FILE_HANDLER) for handler in root.handlers)


def setup_logging(log_dir: Path, level: int = logging.INFO) -> Path:
    """
    Attach the validator's console and rotating-file handlers to the root logger
    and return the log file path.

    The console follows ``level``; the file keeps DEBUG so a failed run can be
    traced file by file. Handlers installed by someone else are left in place,
    and a second call is a no-op.
    """
    log_file = Path(log_dir) / LOG_FILENAME
    root = logging.getLogger()
    if _installed(root):
        return log_file

    log_file.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler()
    console.set_name(CONSOLE_HANDLER)
    console.setFormatter(formatter)
    console.setLevel(level)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.set_name(FILE_HANDLER)
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)

    root.setLevel(logging.DEBUG)
    root.addHandler(console)
    root.addHandler(file_handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging to %s (console level %s)", log_file, logging.getLevelName(level))
    return log_file
