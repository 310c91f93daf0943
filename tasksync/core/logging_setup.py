"""Logging configuration for TaskSync processes."""

import logging
import sys
from typing import Union

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are only interesting when something goes wrong
_QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "websockets", "multipart")


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Configure the root logger once with a single stderr handler.

    Calling it again only adjusts the level, so the API server and tests can
    both call it without stacking handlers.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_tasksync", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
        handler._tasksync = True
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.captureWarnings(True)
    return logging.getLogger("tasksync")
