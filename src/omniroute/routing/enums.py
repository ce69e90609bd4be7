# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Enums for agent routing.

Closed vocabularies used throughout the routing pipeline. All enums are
``StrEnum`` so that they compare equal to their plain string values and
serialize without conversion:

    >>> EnumRole.PRIMARY == "primary"
    True
    >>> EnumRole("background").priority
    1
"""

from __future__ import annotations

from enum import StrEnum


class EnumIntent(StrEnum):
    """Coarse action category extracted from free text.

    Declaration order is significant: detected intents are always reported
    in this order, regardless of where they appear in the input.
    ``GENERAL`` is the fallback when nothing else matches.
    """

    CREATE = "create"
    VALIDATE = "validate"
    FIX = "fix"
    ANALYZE = "analyze"
    IMPROVE = "improve"
    TEST = "test"
    PLAN = "plan"
    GENERAL = "general"


class EnumEntity(StrEnum):
    """Coarse subject category extracted from free text (declaration order)."""

    PRD = "prd"
    ARCHITECTURE = "architecture"
    CODE = "code"
    TESTS = "tests"
    BUG = "bug"
    DOCUMENTATION = "documentation"
    STORY = "story"


class EnumClarity(StrEnum):
    """Approximate clarity rating of an input (a crude proxy, not semantic)."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EnumRole(StrEnum):
    """Role a candidate agent plays in a routing decision."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    BACKGROUND = "background"

    @property
    def priority(self) -> int:
        """Sort priority; higher sorts first."""
        return _ROLE_PRIORITY[self]


_ROLE_PRIORITY: dict[EnumRole, int] = {
    EnumRole.PRIMARY: 3,
    EnumRole.SECONDARY: 2,
    EnumRole.BACKGROUND: 1,
}


class EnumCollaborationMode(StrEnum):
    """How the selected agents are invoked relative to one another.

    Attributes:
        SEQUENTIAL: One primary agent, supporting agents follow it.
        PARALLEL: Several primary agents run side by side.
        GATED: Work passes through an oracle/validator gate.
    """

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    GATED = "gated"


class EnumSuggestionAction(StrEnum):
    """Autonomy level derived from overall confidence."""

    AUTO_ROUTE = "auto_route"
    SUGGEST = "suggest"
    CONFIRM = "confirm"


class EnumRoutingOutcome(StrEnum):
    """Outcome reported by the orchestrator after invoking routed agents."""

    SUCCESS = "success"
    FAILURE = "failure"


__all__ = [
    "EnumClarity",
    "EnumCollaborationMode",
    "EnumEntity",
    "EnumIntent",
    "EnumRole",
    "EnumRoutingOutcome",
    "EnumSuggestionAction",
]
