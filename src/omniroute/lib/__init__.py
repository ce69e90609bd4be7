# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared library code for OmniRoute.

- errors: ONEX-style error handling (EnumCoreErrorCode, OnexError)
- logging_config: package logger setup

Usage:
    from omniroute.lib.errors import EnumCoreErrorCode, OnexError
"""

from omniroute.lib import errors, logging_config

__all__ = [
    "errors",
    "logging_config",
]
