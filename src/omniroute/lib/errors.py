# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""ONEX-style error handling for OmniRoute.

This module provides the error codes and exception classes raised across
the routing and prediction packages. It is the single source of truth for
error handling so that callers can catch one exception type and branch on
``code``.

The routing engine has a deliberately narrow error taxonomy: only caller
misuse is surfaced (non-string input, malformed context, stale history
handles). Everything else degrades to a low-confidence decision.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class EnumCoreErrorCode(StrEnum):
    """Error codes raised by OmniRoute operations.

    Attributes:
        INVALID_INPUT: Caller passed a value of the wrong type or shape.
        INDEX_OUT_OF_RANGE: A routing handle no longer refers to a history entry.
    """

    INVALID_INPUT = "INVALID_INPUT"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"


class OnexError(Exception):
    """Base exception class for OmniRoute operations.

    Provides structured error handling with error codes, messages,
    and contextual details for debugging and monitoring.

    Attributes:
        code: Error code from EnumCoreErrorCode
        message: Human-readable error message
        details: Additional error context and details
    """

    def __init__(
        self,
        code: EnumCoreErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ONEX error.

        Args:
            code: Error code enum
            message: Error message
            details: Optional error details dictionary
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"OnexError(code={self.code}, message={self.message}, details={self.details})"


class ModelOnexError(OnexError):
    """Model-specific ONEX error carrying a context dictionary."""

    def __init__(
        self,
        error_code: EnumCoreErrorCode,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize model-specific ONEX error.

        Args:
            error_code: Error code enum
            message: Error message
            context: Optional error context dictionary
        """
        super().__init__(code=error_code, message=message, details=context)


def invalid_input(message: str, **context: Any) -> ModelOnexError:
    """Build an INVALID_INPUT error for caller misuse at a public boundary."""
    return ModelOnexError(EnumCoreErrorCode.INVALID_INPUT, message, context or None)


__all__ = [
    "EnumCoreErrorCode",
    "ModelOnexError",
    "OnexError",
    "invalid_input",
]
