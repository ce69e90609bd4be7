# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Routing pipeline: parse, match, aggregate, score and learn."""

from omniroute.routing.candidate_aggregator import CandidateAggregator
from omniroute.routing.candidate_matcher import CandidateMatcher
from omniroute.routing.confidence_scorer import ConfidenceScorer
from omniroute.routing.context_analyzer import ContextAnalyzer
from omniroute.routing.enums import (
    EnumClarity,
    EnumCollaborationMode,
    EnumEntity,
    EnumIntent,
    EnumRole,
    EnumRoutingOutcome,
    EnumSuggestionAction,
)
from omniroute.routing.input_parser import InputParser, KeywordIntentClassifier
from omniroute.routing.models import (
    ModelCandidateMatch,
    ModelConfidenceBreakdown,
    ModelParsedInput,
    ModelRoutingCandidate,
    ModelRoutingDecision,
    ModelRoutingHistoryEntry,
    ModelRoutingPattern,
    ModelRoutingResult,
    ModelRoutingStatistics,
    ModelRoutingSuggestion,
    ModelValidatedRouting,
    ModelWorkflowContext,
)
from omniroute.routing.protocol_intent_classifier import ProtocolIntentClassifier
from omniroute.routing.routing_history import RoutingHistory
from omniroute.routing.smart_router import SmartRouter

__all__ = [
    "CandidateAggregator",
    "CandidateMatcher",
    "ConfidenceScorer",
    "ContextAnalyzer",
    "EnumClarity",
    "EnumCollaborationMode",
    "EnumEntity",
    "EnumIntent",
    "EnumRole",
    "EnumRoutingOutcome",
    "EnumSuggestionAction",
    "InputParser",
    "KeywordIntentClassifier",
    "ModelCandidateMatch",
    "ModelConfidenceBreakdown",
    "ModelParsedInput",
    "ModelRoutingCandidate",
    "ModelRoutingDecision",
    "ModelRoutingHistoryEntry",
    "ModelRoutingPattern",
    "ModelRoutingResult",
    "ModelRoutingStatistics",
    "ModelRoutingSuggestion",
    "ModelValidatedRouting",
    "ModelWorkflowContext",
    "ProtocolIntentClassifier",
    "RoutingHistory",
    "SmartRouter",
]
