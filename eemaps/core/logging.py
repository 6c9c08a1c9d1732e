"""Loguru sink configuration shared by the whole package."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

_sink_id: int | None = None


def setup_logging(level: str = "INFO") -> Logger:
    """Configure structured logging with loguru.

    Installs one stderr sink for records emitted by eemaps. Sinks added by
    the host application are left alone; calling this again only replaces
    the eemaps sink, so it can be used to change the level.
    """
    global _sink_id
    if _sink_id is not None:
        logger.remove(_sink_id)
    _sink_id = logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        level=level.upper(),
        filter="eemaps",
    )
    return logger
