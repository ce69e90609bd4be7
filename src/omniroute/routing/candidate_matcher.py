# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Candidate matcher - four independent matching strategies.

Strategies:
1. Intent-based - (intent, entity) decision table
2. Context-based - workflow phase table plus a recent-failure trigger
3. Keyword-based - keyword overlap against the capability registry
4. Pattern-based - repeated eval/oracle failure signatures

Every strategy runs on every request and the proposals are concatenated.
Duplicates across strategies are expected; the aggregator merges them.
A strategy that raises is logged and contributes nothing, so a decision is
always produced.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from types import MappingProxyType
from typing import NamedTuple

from omniroute.config.settings import Settings, get_settings
from omniroute.registry.models import ModelCapabilityRegistry
from omniroute.routing.enums import EnumEntity, EnumIntent, EnumRole
from omniroute.routing.models import (
    ModelCandidateMatch,
    ModelParsedInput,
    ModelWorkflowContext,
)

logger = logging.getLogger(__name__)


class _Rule(NamedTuple):
    agent: str
    role: EnumRole
    reason: str
    requires: EnumEntity | None = None


P, S, B = EnumRole.PRIMARY, EnumRole.SECONDARY, EnumRole.BACKGROUND

INTENT_RULES: MappingProxyType[EnumIntent, tuple[_Rule, ...]] = MappingProxyType(
    {
        EnumIntent.CREATE: (
            _Rule("pm", P, "Create PRD intent", EnumEntity.PRD),
            _Rule("architect", P, "Create architecture intent", EnumEntity.ARCHITECTURE),
            _Rule("eval", P, "Create tests intent", EnumEntity.TESTS),
            _Rule("dev", P, "Create code intent", EnumEntity.CODE),
        ),
        EnumIntent.VALIDATE: (
            _Rule("oracle", P, "Validation intent"),
            _Rule("validator", S, "Gate validation"),
            _Rule("eval", S, "Test validation", EnumEntity.TESTS),
        ),
        EnumIntent.FIX: (
            _Rule("dev", P, "Fix intent"),
            _Rule("reflection", S, "Analyze fix"),
            _Rule("eval", B, "Re-run tests", EnumEntity.TESTS),
        ),
        EnumIntent.ANALYZE: (
            _Rule("reflection", P, "Analysis intent"),
            _Rule("oracle", S, "Truth check"),
        ),
        EnumIntent.TEST: (
            _Rule("eval", P, "Testing intent"),
            _Rule("validator", S, "Coverage validation"),
        ),
        EnumIntent.PLAN: (
            _Rule("pm", P, "Planning intent"),
            _Rule("architect", S, "Technical planning"),
        ),
    }
)

PHASE_RULES: MappingProxyType[str, tuple[_Rule, ...]] = MappingProxyType(
    {
        "domain_research": (
            _Rule("domain-researcher", P, "Domain research phase"),
            _Rule("oracle", S, "Truth establishment"),
        ),
        "discovery": (
            _Rule("pm", P, "Discovery phase"),
            _Rule("oracle", B, "Validation"),
        ),
        "architecture": (
            _Rule("architect", P, "Architecture phase"),
            _Rule("oracle", S, "Design validation"),
        ),
        "development": (
            _Rule("dev", P, "Development phase"),
            _Rule("eval", S, "Testing"),
            _Rule("oracle", B, "Semantic validation"),
        ),
        "eval_foundation": (
            _Rule("eval", P, "Eval foundation phase"),
            _Rule("validator", S, "Coverage check"),
        ),
    }
)

RECENT_FAILURE_RULE = _Rule("reflection", P, "Recent failures detected")

# Failure tag substring -> proposals emitted when it repeats
FAILURE_PATTERN_RULES: MappingProxyType[str, tuple[_Rule, ...]] = MappingProxyType(
    {
        "eval": (
            _Rule("reflection", P, "Pattern: Repeated eval failures"),
            _Rule("oracle", S, "Check truth alignment"),
            _Rule("dev", S, "Fix implementation"),
        ),
        "oracle": (
            _Rule("reflection", P, "Pattern: Oracle blocking"),
            _Rule("pm", S, "Clarify requirements"),
        ),
    }
)


def _emit(rule: _Rule, score: float = 1.0) -> ModelCandidateMatch:
    return ModelCandidateMatch(agent=rule.agent, role=rule.role, reason=rule.reason, score=score)


class CandidateMatcher:
    """Run the four matching strategies and concatenate their proposals."""

    def __init__(
        self,
        registry: ModelCapabilityRegistry,
        settings: Settings | None = None,
    ):
        """
        Initialize matcher.

        Args:
            registry: Agent capability registry used by keyword matching
            settings: Thresholds (defaults to get_settings())
        """
        self.registry = registry
        self.settings = settings or get_settings()

    def match(
        self, parsed: ModelParsedInput, context: ModelWorkflowContext
    ) -> list[ModelCandidateMatch]:
        """
        Collect proposals from every strategy.

        Args:
            parsed: Parsed request
            context: Normalized workflow context

        Returns:
            Concatenated proposals: intent, context, keyword, pattern
        """
        strategies: tuple[tuple[str, Callable[[], list[ModelCandidateMatch]]], ...] = (
            ("intent", lambda: self.intent_based(parsed)),
            ("context", lambda: self.context_based(context)),
            ("keyword", lambda: self.keyword_based(parsed)),
            ("pattern", lambda: self.pattern_based(context)),
        )

        matches: list[ModelCandidateMatch] = []
        for name, strategy in strategies:
            try:
                proposals = strategy()
            except Exception as e:
                logger.error(
                    f"Matching strategy '{name}' failed; continuing without it",
                    exc_info=True,
                    extra={"strategy": name, "error_type": type(e).__name__},
                )
                continue

            logger.debug(
                f"Strategy '{name}' proposed {len(proposals)} candidate(s)",
                extra={"strategy": name, "agents": [m.agent for m in proposals]},
            )
            matches.extend(proposals)

        return matches

    def intent_based(self, parsed: ModelParsedInput) -> list[ModelCandidateMatch]:
        """Apply the (intent, entity) decision table for every detected intent."""
        entities = set(parsed.entities)
        return [
            _emit(rule)
            for intent in parsed.intents
            for rule in INTENT_RULES.get(intent, ())
            if rule.requires is None or rule.requires in entities
        ]

    def context_based(self, context: ModelWorkflowContext) -> list[ModelCandidateMatch]:
        """Apply the phase table; any recent failure also pulls in reflection."""
        routes = [_emit(rule) for rule in PHASE_RULES.get(context.phase, ())]
        if context.recent_failures:
            routes.append(_emit(RECENT_FAILURE_RULE))
        return routes

    def keyword_based(self, parsed: ModelParsedInput) -> list[ModelCandidateMatch]:
        """Count keyword overlaps per registered agent.

        A request keyword overlaps when it contains an agent keyword or is
        contained in one. Repeated request keywords count repeatedly.
        """
        routes: list[ModelCandidateMatch] = []
        keywords = [kw.lower() for kw in parsed.keywords]

        for capability in self.registry.all():
            match_count = sum(
                1
                for kw in keywords
                if any(agent_kw in kw or kw in agent_kw for agent_kw in capability.keywords)
            )
            if match_count > 0:
                role = (
                    EnumRole.PRIMARY
                    if match_count >= self.settings.keyword_primary_threshold
                    else EnumRole.SECONDARY
                )
                routes.append(
                    ModelCandidateMatch(
                        agent=capability.agent_id,
                        role=role,
                        reason=f"Keyword match ({match_count} keywords)",
                        score=float(match_count),
                    )
                )

        return routes

    def pattern_based(self, context: ModelWorkflowContext) -> list[ModelCandidateMatch]:
        """Detect repeated failure signatures in the recent failure tags."""
        routes: list[ModelCandidateMatch] = []
        threshold = self.settings.pattern_failure_threshold

        for tag, rules in FAILURE_PATTERN_RULES.items():
            repeated = sum(1 for failure in context.recent_failures if tag in failure)
            if repeated >= threshold:
                routes.extend(_emit(rule) for rule in rules)

        return routes


__all__ = [
    "FAILURE_PATTERN_RULES",
    "INTENT_RULES",
    "PHASE_RULES",
    "CandidateMatcher",
]
