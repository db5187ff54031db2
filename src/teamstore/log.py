"""Logging setup for applications embedding teamstore."""

from __future__ import annotations

import logging
from typing import Union

LOGGER_NAME: str = "teamstore"
LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_ATTR = "_teamstore_handler"


def configure_logging(level: Union[int, str] = "INFO") -> logging.Logger:
    """
    Attach one stream handler to the `teamstore` logger and set its level.

    Calling it again only changes the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    if not any(getattr(h, _HANDLER_ATTR, False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
    return logger
