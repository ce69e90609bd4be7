# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Candidate aggregation and routing validation.

Merges the raw strategy proposals into one candidate per agent, ranks them,
guarantees a primary agent and derives the collaboration mode.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from omniroute.routing.enums import EnumCollaborationMode, EnumRole
from omniroute.routing.models import (
    ModelCandidateMatch,
    ModelRoutingCandidate,
    ModelValidatedRouting,
)

logger = logging.getLogger(__name__)


class _Accumulator:
    """Mutable per-agent bucket used while grouping proposals."""

    __slots__ = ("agent", "roles", "reasons", "score")

    def __init__(self, agent: str) -> None:
        self.agent = agent
        self.roles: list[EnumRole] = []
        self.reasons: list[str] = []
        self.score = 0.0

    def add(self, match: ModelCandidateMatch) -> None:
        if match.role not in self.roles:
            self.roles.append(match.role)
        self.reasons.append(match.reason)
        self.score += match.score

    def freeze(self) -> ModelRoutingCandidate:
        final_role = max(self.roles, key=lambda role: role.priority)
        return ModelRoutingCandidate(
            agent=self.agent,
            roles=self.roles,
            reasons=self.reasons,
            score=self.score,
            final_role=final_role,
        )


class CandidateAggregator:
    """Group, rank and validate routing candidates."""

    # A single-primary routing led by one of these agents is gated
    GATE_AGENTS: ClassVar[frozenset[str]] = frozenset({"oracle", "validator"})

    def aggregate(self, matches: list[ModelCandidateMatch]) -> list[ModelRoutingCandidate]:
        """
        Merge proposals by agent.

        Args:
            matches: Proposals from every strategy, in emission order

        Returns:
            One candidate per agent, sorted by role priority then score
            (both descending). Ties keep first-encounter order.
        """
        buckets: dict[str, _Accumulator] = {}
        for match in matches:
            bucket = buckets.get(match.agent)
            if bucket is None:
                bucket = buckets[match.agent] = _Accumulator(match.agent)
            bucket.add(match)

        candidates = [bucket.freeze() for bucket in buckets.values()]
        # sorted() is stable; first-encounter order breaks ties
        return sorted(candidates, key=lambda c: (-c.final_role.priority, -c.score))

    def validate(self, candidates: list[ModelRoutingCandidate]) -> ModelValidatedRouting:
        """
        Ensure a primary agent exists and derive mode and reasoning.

        If candidates exist but none is primary, the top-ranked candidate is
        promoted. Promotion never reorders the list: the top-ranked candidate
        is already first.

        Args:
            candidates: Ranked output of :meth:`aggregate`

        Returns:
            ModelValidatedRouting with agents, mode and reasoning
        """
        agents = list(candidates)

        if agents and not any(c.final_role == EnumRole.PRIMARY for c in agents):
            top = agents[0]
            agents[0] = top.model_copy(update={"final_role": EnumRole.PRIMARY})
            logger.debug(
                f"No primary candidate; promoted '{top.agent}'",
                extra={"agent": top.agent, "previous_role": top.final_role.value},
            )

        primaries = [c for c in agents if c.final_role == EnumRole.PRIMARY]
        secondaries = [c for c in agents if c.final_role == EnumRole.SECONDARY]

        return ModelValidatedRouting(
            agents=agents,
            mode=self.determine_mode(agents),
            reasoning=self.build_reasoning(primaries, secondaries),
        )

    def determine_mode(self, agents: list[ModelRoutingCandidate]) -> EnumCollaborationMode:
        primary_count = sum(1 for c in agents if c.final_role == EnumRole.PRIMARY)
        if primary_count > 1:
            return EnumCollaborationMode.PARALLEL

        gated = any(
            c.agent in self.GATE_AGENTS and c.final_role == EnumRole.PRIMARY for c in agents
        )
        if gated:
            return EnumCollaborationMode.GATED
        return EnumCollaborationMode.SEQUENTIAL

    def build_reasoning(
        self,
        primaries: list[ModelRoutingCandidate],
        secondaries: list[ModelRoutingCandidate],
    ) -> str:
        """Human-readable summary, e.g.

        ``Selected 1 primary agent(s): pm. Supporting agents: oracle.
        Primary reason: Create PRD intent.``
        """
        parts = [
            f"Selected {len(primaries)} primary agent(s): "
            f"{', '.join(c.agent for c in primaries)}."
        ]
        if secondaries:
            parts.append(f"Supporting agents: {', '.join(c.agent for c in secondaries)}.")
        if primaries and primaries[0].reasons:
            parts.append(f"Primary reason: {primaries[0].reasons[0]}.")
        return " ".join(parts)


__all__ = ["CandidateAggregator"]
