"""Console logging setup for TDOA twin tools."""

from __future__ import annotations

import logging

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "tdoa_twin", level: int | str = logging.INFO) -> logging.Logger:
    """Return the package logger with one stream handler attached.

    ``level`` may be a numeric level or a name such as ``"DEBUG"``.
    Library modules only call ``logging.getLogger(__name__)``; handlers are
    attached here, by the command-line tools.
    """

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level {level!r}")
        level = resolved
    logger = logging.getLogger(name)
    if not any(getattr(handler, "_tdoa_twin", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._tdoa_twin = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
