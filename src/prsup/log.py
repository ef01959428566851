from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from prsup.cache import cache_dir

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def log_file() -> Path:
    return cache_dir() / "prsup.log"


def configure_logging(verbose: bool = False, path: Path | None = None) -> Path | None:
    """Send the ``prsup`` loggers to a rotating file.

    The TUI owns the terminal, so nothing is logged to stderr. Returns the
    log path, or None if the file could not be opened.
    """
    path = path or log_file()
    logger = logging.getLogger("prsup")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=512_000, backupCount=2)
    except OSError:
        logger.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return path
