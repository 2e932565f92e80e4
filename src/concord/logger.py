"""Logging configuration for Concord.

Everything is written to ``$CONCORD_HOME/debug.log`` (``~/.concord`` by
default) so the rich console stays reserved for comparison output. Set
``CONCORD_LOG_LEVEL`` to raise the threshold, e.g. ``INFO`` when the
per-backend subprocess chatter is not wanted.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

CONCORD_HOME = Path(os.environ.get("CONCORD_HOME", Path.home() / ".concord"))
LOG_FILE = CONCORD_HOME / "debug.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _level_from_env() -> int:
    level = logging.getLevelName(os.environ.get("CONCORD_LOG_LEVEL", "DEBUG").upper())
    return level if isinstance(level, int) else logging.DEBUG


def get_logger(name: str = "concord") -> logging.Logger:
    """Return the ``concord`` logger, attaching the rotating file handler once.

    Child names (``concord.executor``) share the parent's handler.
    """
    logger = logging.getLogger(name)
    root = logging.getLogger("concord")
    if root.handlers:
        return logger

    root.setLevel(_level_from_env())
    CONCORD_HOME.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    return logger


log = get_logger()
