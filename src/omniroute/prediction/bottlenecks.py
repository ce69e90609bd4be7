# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Catalogue of named bottleneck signatures.

Each signature is a predicate over a :class:`ModelWorkflowSignal` together
with the effects it predicts and the recommendations shown to the user.
Characteristics that are unknown (None) never trigger a signature.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from omniroute.prediction.models import ModelBottleneckPrediction, ModelWorkflowSignal


def _gt(value: float | None, limit: float) -> bool:
    return value is not None and value > limit


def _lt(value: float | None, limit: float) -> bool:
    return value is not None and value < limit


@dataclass(frozen=True)
class BottleneckSignature:
    """
    Named bottleneck pattern.

    Attributes:
        name: Pattern identifier (e.g. ``high_complexity_story``)
        predicate: Returns True when the signal matches the pattern
        predictions: Predicted effects (multipliers and probabilities)
        recommendations: Advice surfaced with the warning
    """

    name: str
    predicate: Callable[[ModelWorkflowSignal], bool]
    predictions: dict[str, float] = field(default_factory=dict)
    recommendations: tuple[str, ...] = ()

    def matches(self, signal: ModelWorkflowSignal) -> bool:
        return self.predicate(signal)

    def to_prediction(self) -> ModelBottleneckPrediction:
        return ModelBottleneckPrediction(
            pattern=self.name,
            predictions=dict(self.predictions),
            recommendations=list(self.recommendations),
        )


def _high_complexity(signal: ModelWorkflowSignal) -> bool:
    tc = signal.task_characteristics
    return _gt(tc.complexity, 8) or _gt(tc.dependencies, 5)


def _many_integrations(signal: ModelWorkflowSignal) -> bool:
    return _gt(signal.task_characteristics.integrations, 3)


def _unclear_requirements(signal: ModelWorkflowSignal) -> bool:
    tc = signal.task_characteristics
    return _lt(tc.prd_score, 0.7) or _gt(tc.oracle_warnings, 5)


def _low_coverage_after_phase(signal: ModelWorkflowSignal) -> bool:
    return signal.phase_completed and _lt(signal.test_coverage, 0.8)


DEFAULT_BOTTLENECKS: tuple[BottleneckSignature, ...] = (
    BottleneckSignature(
        name="high_complexity_story",
        predicate=_high_complexity,
        predictions={
            "dev_time_multiplier": 1.5,
            "eval_failure_probability": 0.4,
            "reflection_needed_probability": 0.6,
        },
        recommendations=(
            "Consider breaking story into smaller sub-stories",
            "Allocate extra time for development",
            "Plan for multiple reflection cycles",
        ),
    ),
    BottleneckSignature(
        name="many_integration_points",
        predicate=_many_integrations,
        predictions={
            "architecture_phase_delay": 1.3,
            "coordination_overhead": 1.4,
        },
        recommendations=(
            "Review architecture for simplification opportunities",
            "Create integration plan early",
            "Budget extra time for architecture phase",
        ),
    ),
    BottleneckSignature(
        name="unclear_requirements",
        predicate=_unclear_requirements,
        predictions={
            "rework_probability": 0.7,
            "pm_clarification_needed": 0.9,
        },
        recommendations=(
            "Schedule PM clarification session",
            "Run Oracle validation early",
            "Consider creating proof-of-concept first",
        ),
    ),
    BottleneckSignature(
        name="low_test_coverage_after_phase",
        predicate=_low_coverage_after_phase,
        predictions={
            "regression_probability": 0.6,
            "eval_rework_probability": 0.5,
        },
        recommendations=(
            "Generate tests for uncovered paths before the next phase",
            "Re-run the eval suite against the completed phase",
        ),
    ),
)


__all__ = [
    "DEFAULT_BOTTLENECKS",
    "BottleneckSignature",
]
