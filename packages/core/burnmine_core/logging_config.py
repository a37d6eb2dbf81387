"""Process-level logging setup for embedders of the language engine."""

from __future__ import annotations

import logging

from burnmine_core.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging once for the hosting process.

    Args:
        level: Log level name or number; defaults to ``Settings.log_level``
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("burnmine_core").setLevel(level)
