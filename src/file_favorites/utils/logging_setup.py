"""Logging setup shared by the console and GUI entry points."""

import logging
from pathlib import Path
from typing import List, Optional

from .app_paths import get_log_path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(
    loglevel: int = logging.INFO,
    logfile: Optional[Path] = None,
    console: bool = False,
) -> logging.Logger:
    """Configure the root logger and return it.

    Logs go to ``logfile`` (by default log.txt in the data directory) and,
    when ``console`` is set, to stderr as well.
    """
    logger = logging.getLogger()
    logger.setLevel(loglevel)

    # Remove any existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.FileHandler(logfile or get_log_path(), encoding="utf-8")]
    if console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized")
    return logger
