from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from content_reviewer.config.ini_config import AppSettings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(settings: AppSettings) -> logging.Logger:
    """
    Configure the root logger: stdout always, plus a rotating file when
    [logging] file is set. Safe to call more than once (handlers are replaced).
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # werkzeug goes through the root handlers
    werkzeug_logger = logging.getLogger("werkzeug")
    werkzeug_logger.propagate = True
    werkzeug_logger.setLevel(level)

    return logging.getLogger("content_reviewer")
