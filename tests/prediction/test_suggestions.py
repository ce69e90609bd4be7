# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Tests for proactive suggestions and acceptance-based ranking."""

from __future__ import annotations

import pytest

from omniroute.config.settings import Settings
from omniroute.lib.errors import EnumCoreErrorCode, OnexError
from omniroute.prediction import (
    EnumPriority,
    EnumSuggestionType,
    ModelWorkflowSignal,
    PredictionEngine,
)

pytestmark = pytest.mark.unit


def _types(suggestions: list) -> list[EnumSuggestionType]:
    return [s.type for s in suggestions]


class TestGenerateSuggestions:
    def test_no_signal(self, engine: PredictionEngine) -> None:
        assert engine.generate_suggestions() == []
        assert engine.generate_suggestions({}) == []

    def test_phase_transition(self, engine: PredictionEngine) -> None:
        (suggestion,) = engine.generate_suggestions(
            {"current_phase": "discovery", "phase_completed": True}
        )

        assert suggestion.type == EnumSuggestionType.PHASE_TRANSITION
        assert suggestion.message == "You just completed discovery. Ready to start architecture?"
        assert suggestion.action == "start_phase:architecture"
        assert suggestion.priority == EnumPriority.HIGH
        assert suggestion.acceptance_rate == 0.5

    def test_no_transition_after_last_phase(self, engine: PredictionEngine) -> None:
        signal = {"currentPhase": "development", "phaseCompleted": True}
        assert engine.generate_suggestions(signal) == []

    def test_no_transition_while_phase_in_progress(self, engine: PredictionEngine) -> None:
        assert engine.generate_suggestions({"current_phase": "discovery"}) == []

    def test_validation_fix(self, engine: PredictionEngine) -> None:
        (suggestion,) = engine.generate_suggestions(
            {"validation_warnings": ["term drift", "missing glossary", "stale truth"]}
        )

        assert suggestion.type == EnumSuggestionType.VALIDATION_FIX
        assert suggestion.message == "Oracle found 3 issues. Fix now?"
        assert suggestion.action == "fix_validation_issues"

    def test_test_coverage(self, engine: PredictionEngine) -> None:
        (suggestion,) = engine.generate_suggestions({"test_coverage": 0.6})

        assert suggestion.type == EnumSuggestionType.TEST_COVERAGE
        assert suggestion.message == "Test coverage is 60%. Generate 30% more tests?"
        assert suggestion.action == "generate_tests"
        assert suggestion.priority == EnumPriority.MEDIUM

    def test_zero_coverage_counts(self, engine: PredictionEngine) -> None:
        (suggestion,) = engine.generate_suggestions({"test_coverage": 0.0})
        assert suggestion.message == "Test coverage is 0%. Generate 90% more tests?"

    def test_coverage_at_target(self, engine: PredictionEngine) -> None:
        assert engine.generate_suggestions({"test_coverage": 0.9}) == []

    def test_bottleneck_warning(self, engine: PredictionEngine) -> None:
        (suggestion,) = engine.generate_suggestions({"integrations": 5})

        assert suggestion.type == EnumSuggestionType.BOTTLENECK_WARNING
        assert suggestion.message == "Potential bottleneck detected: many_integration_points"
        assert suggestion.action == "review_recommendations"
        assert suggestion.recommendations[0] == (
            "Review architecture for simplification opportunities"
        )

    def test_default_order_is_priority_then_generation(self, engine: PredictionEngine) -> None:
        suggestions = engine.generate_suggestions(
            ModelWorkflowSignal(
                current_phase="architecture",
                phase_completed=True,
                validation_warnings=["w"],
                test_coverage=0.5,
            )
        )

        assert _types(suggestions) == [
            EnumSuggestionType.PHASE_TRANSITION,
            EnumSuggestionType.VALIDATION_FIX,
            EnumSuggestionType.TEST_COVERAGE,
            EnumSuggestionType.BOTTLENECK_WARNING,
        ]
        assert suggestions[0].action == "start_phase:planning"

    def test_malformed_signal(self, engine: PredictionEngine) -> None:
        with pytest.raises(OnexError) as exc_info:
            engine.generate_suggestions({"test_coverage": 1.5})
        assert exc_info.value.code == EnumCoreErrorCode.INVALID_INPUT


class TestAcceptanceTracking:
    SIGNAL = {
        "current_phase": "discovery",
        "phase_completed": True,
        "test_coverage": 0.85,
    }

    def test_track_updates_counters(self, engine: PredictionEngine) -> None:
        engine.generate_suggestions(self.SIGNAL)

        first = engine.track_suggestion_acceptance("generate_tests", True)
        second = engine.track_suggestion_acceptance("generate_tests", False)

        assert (first.offered, first.accepted, first.rate) == (1, 1, 1.0)
        assert (second.offered, second.accepted, second.rate) == (2, 1, 0.5)
        stats = engine.statistics().suggestion_acceptance
        assert stats["test_coverage"].offered == 2

    def test_unknown_action_ignored(self, engine: PredictionEngine) -> None:
        engine.generate_suggestions(self.SIGNAL)

        assert engine.track_suggestion_acceptance("deploy_now", True) is None
        assert engine.statistics().suggestion_acceptance == {}

    def test_action_must_come_from_latest_generation(self, engine: PredictionEngine) -> None:
        engine.generate_suggestions(self.SIGNAL)
        engine.generate_suggestions({"validation_warnings": ["w"]})

        assert engine.track_suggestion_acceptance("generate_tests", True) is None

    def test_accepted_kind_ranks_first(self, engine: PredictionEngine) -> None:
        initial = engine.generate_suggestions(self.SIGNAL)
        assert _types(initial) == [
            EnumSuggestionType.PHASE_TRANSITION,
            EnumSuggestionType.TEST_COVERAGE,
        ]

        engine.track_suggestion_acceptance("generate_tests", True)
        engine.track_suggestion_acceptance("start_phase:architecture", False)

        ranked = engine.generate_suggestions(self.SIGNAL)

        assert _types(ranked) == [
            EnumSuggestionType.TEST_COVERAGE,
            EnumSuggestionType.PHASE_TRANSITION,
        ]
        assert ranked[0].acceptance_rate == 1.0
        assert ranked[1].acceptance_rate == 0.0

    def test_prior_from_settings(self) -> None:
        engine = PredictionEngine(settings=Settings(_env_file=None, suggestion_acceptance_prior=0.2))
        (suggestion,) = engine.generate_suggestions({"validation_warnings": ["w"]})
        assert suggestion.acceptance_rate == 0.2
