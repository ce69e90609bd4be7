# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Smart Router
============

Main orchestration component that ties the routing pipeline together.

Flow:
1. Parse the request (intents, entities, keywords, clarity)
2. Normalize the workflow context
3. Match candidates with four independent strategies
4. Aggregate candidates and validate (primary, mode, reasoning)
5. Score confidence and map it to an action
6. Record the decision in the routing history
7. Return the decision plus its history handle

The router never fails for string input: with no usable signal it returns an
empty or low-confidence decision whose action is ``confirm``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from omniroute.config.settings import Settings, get_settings
from omniroute.registry.loader import load_capability_registry
from omniroute.registry.models import ModelCapabilityRegistry
from omniroute.routing.candidate_aggregator import CandidateAggregator
from omniroute.routing.candidate_matcher import CandidateMatcher
from omniroute.routing.confidence_scorer import ConfidenceScorer
from omniroute.routing.context_analyzer import ContextAnalyzer
from omniroute.routing.enums import EnumRoutingOutcome
from omniroute.routing.input_parser import InputParser
from omniroute.routing.models import (
    ModelParsedInput,
    ModelRoutingDecision,
    ModelRoutingHistoryEntry,
    ModelRoutingResult,
    ModelRoutingStatistics,
    ModelWorkflowContext,
)
from omniroute.routing.protocol_intent_classifier import ProtocolIntentClassifier
from omniroute.routing.routing_history import RoutingHistory

logger = logging.getLogger(__name__)


class SmartRouter:
    """
    Agent routing with confidence scoring and an outcome learning loop.

    Each instance owns its history; nothing is shared between routers.
    """

    def __init__(
        self,
        registry: ModelCapabilityRegistry | None = None,
        settings: Settings | None = None,
        classifier: ProtocolIntentClassifier | None = None,
    ):
        """
        Initialize the router.

        Args:
            registry: Capability registry; loaded from settings.registry_path
                (or the packaged default) when omitted
            settings: Tunables (defaults to get_settings())
            classifier: Intent/entity classifier for the input parser
        """
        self.settings = settings or get_settings()
        self.registry = (
            registry
            if registry is not None
            else load_capability_registry(self.settings.registry_path)
        )

        self.input_parser = InputParser(classifier)
        self.context_analyzer = ContextAnalyzer()
        self.candidate_matcher = CandidateMatcher(self.registry, self.settings)
        self.candidate_aggregator = CandidateAggregator()
        self.confidence_scorer = ConfidenceScorer(self.settings)
        self._history = RoutingHistory(settings=self.settings)

        logger.info(
            "SmartRouter initialized",
            extra={
                "agent_count": len(self.registry),
                "history_capacity": self._history.capacity,
            },
        )

    @property
    def history(self) -> RoutingHistory:
        return self._history

    def route(
        self,
        user_input: str,
        context: ModelWorkflowContext | Mapping[str, Any] | None = None,
    ) -> ModelRoutingResult:
        """
        Route a request to agents.

        Args:
            user_input: User's request text
            context: Workflow context (model, mapping or None)

        Returns:
            ModelRoutingResult with the decision and its history handle

        Raises:
            OnexError: INVALID_INPUT for non-string input or malformed context
        """
        # 1-2. Parse input and context (independent)
        parsed = self.parse_input(user_input)
        workflow = self.analyze_context(context)

        # 3. Candidate matching
        matches = self.candidate_matcher.match(parsed, workflow)

        # 4. Aggregate and validate
        candidates = self.candidate_aggregator.aggregate(matches)
        validated = self.candidate_aggregator.validate(candidates)

        # 5. Confidence, scored against history before this decision is recorded
        confidence = self.confidence_scorer.score(
            parsed, validated.agents, workflow, self._history.entries()
        )
        decision = ModelRoutingDecision(
            agents=validated.agents,
            collaboration_mode=validated.mode,
            confidence=confidence,
            reasoning=validated.reasoning,
            suggestion=self.confidence_scorer.suggest(confidence.overall),
        )

        # 6. Record
        handle = self._history.record(user_input, decision, workflow.phase)

        logger.info(
            f"Routed request to {decision.agents_key or 'no agents'}",
            extra={
                "handle": handle,
                "agents": decision.agent_ids,
                "mode": decision.collaboration_mode.value,
                "confidence": round(confidence.overall, 4),
                "action": decision.suggestion.action.value,
                "phase": workflow.phase,
            },
        )
        return ModelRoutingResult(handle=handle, decision=decision)

    def parse_input(self, user_input: str) -> ModelParsedInput:
        return self.input_parser.parse(user_input)

    def analyze_context(
        self, context: ModelWorkflowContext | Mapping[str, Any] | None
    ) -> ModelWorkflowContext:
        return self.context_analyzer.analyze(context)

    def update_routing_outcome(
        self,
        handle: int,
        outcome: EnumRoutingOutcome | str,
        feedback: Any = None,
    ) -> ModelRoutingHistoryEntry:
        """Report the outcome of a routed request (feeds the learning loop)."""
        return self._history.update_outcome(handle, outcome, feedback)

    def statistics(self) -> ModelRoutingStatistics:
        return self._history.statistics()

    def export_data(self) -> dict[str, Any]:
        return self._history.export_data()

    def import_data(self, data: Mapping[str, Any]) -> None:
        self._history.import_data(data)


__all__ = ["SmartRouter"]
