# vehicle_booking/utils/logger.py
"""
Logging setup shared by every module.
Console output plus two rotating files under LOG_DIR:
  app.log    everything at LOG_LEVEL
  audit.log  only the audit trail (vehicle_booking.audit logger)
File output can be switched off with LOG_TO_FILE=false (tests do this).
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from vehicle_booking.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
AUDIT_LOGGER = "vehicle_booking.audit"

# Third-party loggers that are too chatty at INFO
_QUIET = ("passlib", "sqlalchemy.engine", "multipart")

_configured = False


def _rotating(filename: str, fmt: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, filename),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)

    if settings.LOG_TO_FILE:
        os.makedirs(LOG_DIR, exist_ok=True)
        root.addHandler(_rotating("app.log", fmt))
        logging.getLogger(AUDIT_LOGGER).addHandler(_rotating("audit.log", fmt))

    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
