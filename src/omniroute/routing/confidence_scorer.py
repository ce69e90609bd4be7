# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Confidence Scorer
=================

Calculates the confidence of a routing decision and maps it to an action.

Confidence Components (weighted, defaults):
1. Intent Clarity (40%) - How clear the request is
2. Agent Match Strength (35%) - Score of the top-ranked candidate
3. Context Relevance (15%) - Whether the workflow phase is known
4. Historical Success (10%) - Past outcomes for the same agent set

Weights come from Settings, which rejects weights that do not sum to 1.0.
"""

from __future__ import annotations

from collections.abc import Sequence
from types import MappingProxyType
from typing import ClassVar

from omniroute.config.settings import Settings, get_settings
from omniroute.routing.enums import EnumClarity, EnumRoutingOutcome, EnumSuggestionAction
from omniroute.routing.models import (
    ModelConfidenceBreakdown,
    ModelParsedInput,
    ModelRoutingCandidate,
    ModelRoutingHistoryEntry,
    ModelRoutingSuggestion,
    ModelWorkflowContext,
)


class ConfidenceScorer:
    """
    Calculate confidence for a routing decision.

    Stateless: history is passed in as a snapshot on every call.
    """

    CLARITY_SCORES: ClassVar[MappingProxyType[EnumClarity, float]] = MappingProxyType(
        {
            EnumClarity.HIGH: 1.0,
            EnumClarity.MEDIUM: 0.7,
            EnumClarity.LOW: 0.3,
        }
    )

    KNOWN_PHASE_RELEVANCE = 0.8
    UNKNOWN_PHASE_RELEVANCE = 0.6

    MESSAGES: ClassVar[MappingProxyType[EnumSuggestionAction, str]] = MappingProxyType(
        {
            EnumSuggestionAction.AUTO_ROUTE: "High confidence - routing automatically",
            EnumSuggestionAction.SUGGEST: "Medium confidence - suggesting routing, allow override",
            EnumSuggestionAction.CONFIRM: "Low confidence - please confirm routing",
        }
    )

    def __init__(self, settings: Settings | None = None):
        """Initialize confidence scorer."""
        self.settings = settings or get_settings()

    def score(
        self,
        parsed: ModelParsedInput,
        candidates: Sequence[ModelRoutingCandidate],
        context: ModelWorkflowContext,
        history_entries: Sequence[ModelRoutingHistoryEntry] = (),
    ) -> ModelConfidenceBreakdown:
        """
        Calculate the confidence breakdown.

        Args:
            parsed: Parsed request
            candidates: Validated candidates in decision order
            context: Normalized workflow context
            history_entries: Snapshot of the routing history

        Returns:
            ModelConfidenceBreakdown with the four components and overall
        """
        weights = self.settings.confidence_weights

        # 1. Intent clarity
        intent_clarity = self.CLARITY_SCORES[parsed.clarity]

        # 2. Agent match strength
        agent_match_strength = self._calculate_match_strength(candidates)

        # 3. Context relevance
        context_relevance = (
            self.UNKNOWN_PHASE_RELEVANCE
            if context.phase == "unknown"
            else self.KNOWN_PHASE_RELEVANCE
        )

        # 4. Historical success
        agents_key = ",".join(c.agent for c in candidates)
        historical_success = self._calculate_historical_success(agents_key, history_entries)

        overall = (
            intent_clarity * weights["intent_clarity"]
            + agent_match_strength * weights["agent_match_strength"]
            + context_relevance * weights["context_relevance"]
            + historical_success * weights["historical_success"]
        )

        return ModelConfidenceBreakdown(
            intent_clarity=intent_clarity,
            agent_match_strength=agent_match_strength,
            context_relevance=context_relevance,
            historical_success=historical_success,
            overall=min(1.0, max(0.0, overall)),
        )

    def suggest(self, overall: float) -> ModelRoutingSuggestion:
        """Map overall confidence to an action and message."""
        if overall >= self.settings.auto_route_threshold:
            action = EnumSuggestionAction.AUTO_ROUTE
        elif overall >= self.settings.suggest_threshold:
            action = EnumSuggestionAction.SUGGEST
        else:
            action = EnumSuggestionAction.CONFIRM
        return ModelRoutingSuggestion(action=action, message=self.MESSAGES[action])

    def _calculate_match_strength(self, candidates: Sequence[ModelRoutingCandidate]) -> float:
        if not candidates:
            return 0.0
        return min(1.0, candidates[0].score / self.settings.agent_match_divisor)

    def _calculate_historical_success(
        self,
        agents_key: str,
        history_entries: Sequence[ModelRoutingHistoryEntry],
    ) -> float:
        """
        Success rate of past routings to the exact same agent sequence.

        Only entries with a reported outcome count. Without any, the neutral
        default is returned.
        """
        resolved = [
            entry.outcome
            for entry in history_entries
            if entry.agents == agents_key and entry.outcome is not None
        ]
        if not resolved:
            return self.settings.default_historical_success

        successes = sum(1 for outcome in resolved if outcome == EnumRoutingOutcome.SUCCESS)
        return successes / len(resolved)


__all__ = ["ConfidenceScorer"]
