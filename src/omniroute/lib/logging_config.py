# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Logging setup for the omniroute package logger.

Library modules only ever call ``logging.getLogger(__name__)``. Embedding
applications that want console output call :func:`configure_logging` once.
"""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER_NAME = "omniroute"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_HANDLER_MARKER = "_omniroute_handler"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Calling this more than once only updates the level.

    Args:
        level: Logging level name or number.

    Returns:
        The configured ``omniroute`` logger.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        resolved = logging.INFO
    package_logger.setLevel(resolved)

    if not any(getattr(h, _HANDLER_MARKER, False) for h in package_logger.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(handler, _HANDLER_MARKER, True)
        package_logger.addHandler(handler)

    return package_logger


__all__ = ["LOG_FORMAT", "PACKAGE_LOGGER_NAME", "configure_logging"]
