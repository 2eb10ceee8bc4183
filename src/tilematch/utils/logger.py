"""Logging utilities for the tile-matching engine."""

from __future__ import annotations

import logging
from typing import Optional


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with a compact formatter.

    Cascades and reshuffles log one line per step at debug level, so the
    default INFO level keeps only completions, level-ups and fallbacks.
    """

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger under ``tilematch``."""

    if not name:
        return logging.getLogger("tilematch")
    if name.startswith("tilematch"):
        return logging.getLogger(name)
    return logging.getLogger(f"tilematch.{name}")
