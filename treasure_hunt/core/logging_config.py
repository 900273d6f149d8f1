# treasure_hunt/core/logging_config.py
from __future__ import annotations

import logging
import sys
from typing import Optional

from treasure_hunt.core import settings

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_HANDLER_NAME = "treasure_hunt"


def _resolve_level(level: Optional[str]) -> int:
    resolved = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    if isinstance(resolved, str):  # unknown name
        return logging.INFO
    return resolved


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach one stream handler to the package logger. Safe to call twice."""
    logger = logging.getLogger("treasure_hunt")
    logger.setLevel(_resolve_level(level))
    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        logger.addHandler(handler)
    return logger


__all__ = ["configure_logging"]
