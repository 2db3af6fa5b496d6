"""Centralized logging configuration.

Usage:
    from .logging_config import setup_logging
    setup_logging()   # Call once at startup (main.py does this)
"""

from __future__ import annotations

import logging
import sys

from .settings import get_settings

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(raw.upper())
    if isinstance(level, int):
        return level
    return logging.INFO


# PUBLIC_INTERFACE
def setup_logging() -> None:
    """Configure Python logging levels from application settings."""
    settings = get_settings()
    root_level = _parse_level(settings.log_level)

    root = logging.getLogger()
    root.setLevel(root_level)

    # uvicorn usually installs a handler; tests and scripts may not have one
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s - %(message)s"))
        root.addHandler(handler)

    for name in _UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(root_level)

    logging.getLogger(__name__).debug("Logging configured (root=%s)", settings.log_level)
