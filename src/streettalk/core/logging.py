"""Application logging for the feed server and CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Parser and image plugins log per rule/chunk at DEBUG
QUIET_LOGGERS = ("markdown_it", "PIL")


def setup_logging(log_level: str = "INFO", app_log_path: Path | None = None) -> None:
    """Log to stderr and, when given, to ``app_log_path``.

    Third-party loggers in :data:`QUIET_LOGGERS` stay at WARNING even when
    the app itself runs at DEBUG.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if app_log_path:
        app_log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(app_log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
