# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Enums for the prediction engine."""

from __future__ import annotations

from enum import StrEnum


class EnumPredictionSource(StrEnum):
    """Where a next-agent prediction came from."""

    TRANSITION_MODEL = "transition_model"
    FAILURE_PATTERN = "failure_pattern"
    PHASE_PATTERN = "phase_pattern"


class EnumPriority(StrEnum):
    """Priority of a validation prediction or suggestion."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank; higher sorts first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[EnumPriority, int] = {
    EnumPriority.HIGH: 3,
    EnumPriority.MEDIUM: 2,
    EnumPriority.LOW: 1,
}


class EnumSuggestionType(StrEnum):
    """Kinds of proactive suggestion; acceptance is tracked per kind."""

    PHASE_TRANSITION = "phase_transition"
    VALIDATION_FIX = "validation_fix"
    TEST_COVERAGE = "test_coverage"
    BOTTLENECK_WARNING = "bottleneck_warning"


__all__ = [
    "EnumPredictionSource",
    "EnumPriority",
    "EnumSuggestionType",
]
