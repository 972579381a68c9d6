# app/utils/logger.py
"""
Logging setup shared by the API, the services and the setup scripts.

Records go to stderr and, when LOG_DIR is set, to a size-rotated
karhub.log inside it. Set LOG_DIR to an empty string for console-only
logging (containers, tests).
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_FILE_NAME = "karhub.log"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "multipart")

_configured = False


def build_handlers(log_dir: str | None, level: str) -> list[logging.Handler]:
    """Console handler plus, if log_dir is given, a rotating file handler."""
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(log_dir: str | None = None, level: str | None = None):
    """Attach the handlers to the root logger once per process."""
    global _configured
    if _configured:
        return
    _configured = True

    level = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(level)
    for handler in build_handlers(settings.LOG_DIR if log_dir is None else log_dir, level):
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
