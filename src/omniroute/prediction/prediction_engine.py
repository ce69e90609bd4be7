# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Prediction Engine
=================

Anticipates what a workflow will need next:

1. Next agent(s) - transition model, failure pattern and phase patterns
2. Artifacts to pre-load - per phase and per agent dependency tables
3. Validations to pre-warm - per workflow event
4. Bottlenecks - named signatures over the workflow signal
5. Proactive suggestions - ranked by how often users accepted each kind

The transition model and the suggestion acceptance ratios learn from
observations; every other table is static unless replaced via
:meth:`PredictionEngine.import_models`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, NamedTuple

from pydantic import ValidationError

from omniroute.config.settings import Settings, get_settings
from omniroute.lib.errors import invalid_input
from omniroute.prediction.bottlenecks import DEFAULT_BOTTLENECKS, BottleneckSignature
from omniroute.prediction.enums import EnumPredictionSource, EnumPriority, EnumSuggestionType
from omniroute.prediction.models import (
    ModelArtifactPrediction,
    ModelBottleneckPrediction,
    ModelNextAgentPrediction,
    ModelPredictionStatistics,
    ModelSuggestion,
    ModelSuggestionAcceptance,
    ModelTaskCharacteristics,
    ModelValidationPrediction,
    ModelWorkflowSignal,
    ModelWorkflowStep,
)
from omniroute.prediction.transition_model import DEFAULT_SCOPE, TransitionModel
from omniroute.routing.context_analyzer import ContextAnalyzer
from omniroute.routing.models import ModelWorkflowContext

logger = logging.getLogger(__name__)


class ArtifactDependency(NamedTuple):
    requires: tuple[str, ...]
    probability: float


class AgentArtifactNeed(NamedTuple):
    artifact: str
    probability: float
    reason: str


PHASE_SEQUENCE: tuple[str, ...] = (
    "domain_research",
    "eval_foundation",
    "discovery",
    "architecture",
    "planning",
    "development",
)

DEFAULT_ARTIFACT_DEPENDENCIES: MappingProxyType[str, ArtifactDependency] = MappingProxyType(
    {
        "architecture": ArtifactDependency(("prd.md", "domain-truth.yaml"), 0.95),
        "development": ArtifactDependency(
            ("prd.md", "architecture.md", "story-file", "eval-tests"), 0.99
        ),
        "prd": ArtifactDependency(("domain-analysis.md", "domain-truth.yaml"), 0.8),
        "eval_foundation": ArtifactDependency(("domain-truth.yaml", "test-datasets/"), 0.9),
        "story": ArtifactDependency(("prd.md", "architecture.md", "epic-file"), 0.95),
    }
)

AGENT_ARTIFACT_NEEDS: MappingProxyType[str, tuple[AgentArtifactNeed, ...]] = MappingProxyType(
    {
        "architect": (
            AgentArtifactNeed("prd.md", 0.95, "Architecture references PRD"),
            AgentArtifactNeed("domain-truth.yaml", 0.8, "Truth alignment"),
        ),
        "dev": (
            AgentArtifactNeed("story-file", 0.99, "Story contains implementation details"),
            AgentArtifactNeed("prd.md", 0.7, "Context and requirements"),
            AgentArtifactNeed("architecture.md", 0.8, "Technical guidance"),
        ),
        "eval": (
            AgentArtifactNeed("test-datasets/", 0.9, "Test data"),
            AgentArtifactNeed("domain-truth.yaml", 0.85, "Truth for assertions"),
        ),
        "oracle": (
            AgentArtifactNeed("domain-truth.yaml", 0.99, "Source of truth"),
            AgentArtifactNeed("prd.md", 0.7, "Semantic validation"),
        ),
        "validator": (
            AgentArtifactNeed("traceability-matrix", 0.8, "Coverage tracking"),
            AgentArtifactNeed("validation-gates", 0.9, "Gate definitions"),
        ),
    }
)

DEFAULT_VALIDATION_TRIGGERS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "prd_created": ("oracle", "eval", "validator"),
        "architecture_created": ("oracle", "validator"),
        "code_changed": ("eval", "oracle"),
        "story_completed": ("validator", "eval"),
        "phase_completed": ("validator",),
    }
)

# phase -> (agent active in that phase, ((next agent, probability), ...))
PHASE_PATTERNS: MappingProxyType[str, tuple[str, tuple[tuple[str, float], ...]]] = (
    MappingProxyType(
        {
            "domain_research": ("domain-researcher", (("oracle", 0.85),)),
            "discovery": ("pm", (("architect", 0.8), ("oracle", 0.75))),
            "development": ("dev", (("eval", 0.9), ("oracle", 0.6))),
        }
    )
)

HIGH_PRIORITY_VALIDATORS = frozenset({"oracle"})


class PredictionEngine:
    """
    Predictive orchestration over agents, artifacts, validations and suggestions.

    Each instance owns its models; nothing is shared between engines.
    Mutations (observations, acceptance tracking, imports) are serialized by
    an internal lock.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transition_model: TransitionModel | None = None,
        bottleneck_catalogue: Iterable[BottleneckSignature] | None = None,
    ):
        """
        Initialize the engine with the default tables.

        Args:
            settings: Tunables (defaults to get_settings())
            transition_model: Pre-built transition model; seeded defaults otherwise
            bottleneck_catalogue: Bottleneck signatures; DEFAULT_BOTTLENECKS otherwise
        """
        self.settings = settings or get_settings()
        self.transition_model = (
            transition_model if transition_model is not None else TransitionModel(self.settings)
        )
        self._catalogue: dict[str, BottleneckSignature] = {
            sig.name: sig
            for sig in (
                bottleneck_catalogue if bottleneck_catalogue is not None else DEFAULT_BOTTLENECKS
            )
        }
        self._active_bottlenecks: list[str] = list(self._catalogue)
        self._artifact_dependencies: dict[str, ArtifactDependency] = dict(
            DEFAULT_ARTIFACT_DEPENDENCIES
        )
        self._validation_triggers: dict[str, tuple[str, ...]] = dict(DEFAULT_VALIDATION_TRIGGERS)
        self._acceptance: dict[EnumSuggestionType, ModelSuggestionAcceptance] = {}
        self._last_suggestions: list[ModelSuggestion] = []
        self._context_analyzer = ContextAnalyzer()
        self._lock = threading.Lock()

    # =========================================================================
    # Next agent
    # =========================================================================

    def predict_next_agent(
        self,
        from_agent: str,
        context: ModelWorkflowContext | Mapping[str, Any] | None = None,
    ) -> list[ModelNextAgentPrediction]:
        """
        Predict the next agent(s) after ``from_agent``.

        Args:
            from_agent: Currently active agent
            context: Workflow context; ``situation`` and ``phase`` select the
                transition rows consulted in addition to ``"default"``

        Returns:
            Predictions sorted by probability descending. Each agent appears
            once, with the highest probability any source gave it.
        """
        workflow = self._context_analyzer.analyze(context)
        predictions: list[ModelNextAgentPrediction] = []

        with self._lock:
            for scope in self._scopes(workflow):
                predictions.extend(
                    ModelNextAgentPrediction(
                        agent=cell.agent,
                        probability=cell.probability,
                        source=EnumPredictionSource.TRANSITION_MODEL,
                    )
                    for cell in self.transition_model.row(from_agent, scope)
                )

        if workflow.recent_failures:
            predictions.append(
                ModelNextAgentPrediction(
                    agent="reflection",
                    probability=self.settings.failure_prediction_probability,
                    source=EnumPredictionSource.FAILURE_PATTERN,
                )
            )

        predictions.extend(self._predict_by_phase(workflow.phase, from_agent))
        return self._deduplicate(predictions)

    @staticmethod
    def _scopes(workflow: ModelWorkflowContext) -> list[str]:
        scopes = [workflow.situation, workflow.phase, DEFAULT_SCOPE]
        return list(dict.fromkeys(s for s in scopes if s and s != "unknown"))

    @staticmethod
    def _predict_by_phase(phase: str, from_agent: str) -> list[ModelNextAgentPrediction]:
        pattern = PHASE_PATTERNS.get(phase)
        if pattern is None or pattern[0] != from_agent:
            return []
        return [
            ModelNextAgentPrediction(
                agent=agent, probability=p, source=EnumPredictionSource.PHASE_PATTERN
            )
            for agent, p in pattern[1]
        ]

    @staticmethod
    def _deduplicate(
        predictions: list[ModelNextAgentPrediction],
    ) -> list[ModelNextAgentPrediction]:
        best: dict[str, ModelNextAgentPrediction] = {}
        for prediction in predictions:
            existing = best.get(prediction.agent)
            if existing is None or prediction.probability > existing.probability:
                best[prediction.agent] = prediction
        return sorted(best.values(), key=lambda p: -p.probability)

    def observe_transition(self, from_agent: str, to_agent: str, phase: str | None = None) -> None:
        """Learn from one observed agent-to-agent transition."""
        with self._lock:
            self.transition_model.observe(from_agent, to_agent, phase)
        logger.debug(
            f"Observed transition {from_agent} -> {to_agent}",
            extra={"from_agent": from_agent, "to_agent": to_agent, "scope": phase or DEFAULT_SCOPE},
        )

    def learn_from_history(
        self, steps: Iterable[ModelWorkflowStep | Mapping[str, Any]]
    ) -> int:
        """
        Observe every consecutive pair of workflow steps.

        Returns:
            Number of transitions observed

        Raises:
            OnexError: INVALID_INPUT if a step is malformed
        """
        try:
            parsed = [
                step
                if isinstance(step, ModelWorkflowStep)
                else ModelWorkflowStep.model_validate(step)
                for step in steps
            ]
        except ValidationError as e:
            raise invalid_input("Malformed workflow step", error_count=e.error_count()) from e

        for current, following in zip(parsed, parsed[1:]):
            self.observe_transition(current.agent, following.agent, current.phase)

        observed = max(0, len(parsed) - 1)
        logger.info("Learned from workflow history", extra={"transitions": observed})
        return observed

    # =========================================================================
    # Artifacts and validations
    # =========================================================================

    def predict_artifacts(
        self, artifact_type: str | None, producing_agent: str | None
    ) -> list[ModelArtifactPrediction]:
        """
        Artifacts likely needed next.

        Args:
            artifact_type: Upcoming phase or artifact kind (e.g. ``development``)
            producing_agent: Agent expected to run next

        Returns:
            Phase dependencies first, then the agent's typical needs
        """
        artifacts: list[ModelArtifactPrediction] = []

        dependency = self._artifact_dependencies.get(artifact_type) if artifact_type else None
        if dependency is not None:
            artifacts.extend(
                ModelArtifactPrediction(
                    artifact=artifact,
                    probability=dependency.probability,
                    reason=f"Required for {artifact_type} phase",
                )
                for artifact in dependency.requires
            )

        for need in AGENT_ARTIFACT_NEEDS.get(producing_agent or "", ()):
            artifacts.append(
                ModelArtifactPrediction(
                    artifact=need.artifact, probability=need.probability, reason=need.reason
                )
            )
        return artifacts

    def predict_validations(self, event: str | None) -> list[ModelValidationPrediction]:
        """Validation agents to pre-warm after ``event``; empty for unknown events."""
        agents = self._validation_triggers.get(event or "", ())
        return [
            ModelValidationPrediction(
                agent=agent,
                reason=f"Validation trigger for {event}",
                priority=(
                    EnumPriority.HIGH if agent in HIGH_PRIORITY_VALIDATORS else EnumPriority.MEDIUM
                ),
            )
            for agent in agents
        ]

    # =========================================================================
    # Bottlenecks and suggestions
    # =========================================================================

    def predict_bottlenecks(
        self,
        characteristics: ModelWorkflowSignal
        | ModelTaskCharacteristics
        | Mapping[str, Any]
        | None = None,
    ) -> list[ModelBottleneckPrediction]:
        """Every active bottleneck signature that matches, in catalogue order."""
        signal = self._as_signal(characteristics)
        return [
            self._catalogue[name].to_prediction()
            for name in self._active_bottlenecks
            if self._catalogue[name].matches(signal)
        ]

    def generate_suggestions(
        self, signal: ModelWorkflowSignal | Mapping[str, Any] | None = None
    ) -> list[ModelSuggestion]:
        """
        Build proactive suggestions for the current workflow signal.

        Ranking: historical acceptance rate of the suggestion type
        (descending, unseen types use the prior), then priority, then
        generation order.
        """
        workflow = self._as_signal(signal)
        generated: list[tuple[EnumSuggestionType, str, str, EnumPriority, list[str]]] = []

        if workflow.phase_completed and workflow.current_phase:
            next_phase = self.get_next_phase(workflow.current_phase)
            if next_phase:
                generated.append((
                    EnumSuggestionType.PHASE_TRANSITION,
                    f"You just completed {workflow.current_phase}. Ready to start {next_phase}?",
                    f"start_phase:{next_phase}",
                    EnumPriority.HIGH,
                    [],
                ))

        if workflow.validation_warnings:
            generated.append((
                EnumSuggestionType.VALIDATION_FIX,
                f"Oracle found {len(workflow.validation_warnings)} issues. Fix now?",
                "fix_validation_issues",
                EnumPriority.HIGH,
                [],
            ))

        target = self.settings.test_coverage_target
        if workflow.test_coverage is not None and workflow.test_coverage < target:
            coverage_pct = round(workflow.test_coverage * 100)
            missing_pct = round((target - workflow.test_coverage) * 100)
            generated.append((
                EnumSuggestionType.TEST_COVERAGE,
                f"Test coverage is {coverage_pct}%. Generate {missing_pct}% more tests?",
                "generate_tests",
                EnumPriority.MEDIUM,
                [],
            ))

        for bottleneck in self.predict_bottlenecks(workflow):
            generated.append((
                EnumSuggestionType.BOTTLENECK_WARNING,
                f"Potential bottleneck detected: {bottleneck.pattern}",
                "review_recommendations",
                EnumPriority.MEDIUM,
                bottleneck.recommendations,
            ))

        with self._lock:
            suggestions = [
                ModelSuggestion(
                    type=kind,
                    message=message,
                    action=action,
                    priority=priority,
                    recommendations=recommendations,
                    acceptance_rate=self._acceptance_rate(kind),
                )
                for kind, message, action, priority, recommendations in generated
            ]
            self._last_suggestions = suggestions

        ranked = [
            s
            for _, s in sorted(
                enumerate(suggestions),
                key=lambda pair: (-pair[1].acceptance_rate, -pair[1].priority.rank, pair[0]),
            )
        ]
        logger.debug(
            f"Generated {len(ranked)} suggestion(s)",
            extra={"suggestion_types": [s.type.value for s in ranked]},
        )
        return ranked

    def _acceptance_rate(self, kind: EnumSuggestionType) -> float:
        stats = self._acceptance.get(kind)
        if stats is None or stats.offered == 0:
            return self.settings.suggestion_acceptance_prior
        return stats.rate

    def track_suggestion_acceptance(
        self, action: str, accepted: bool
    ) -> ModelSuggestionAcceptance | None:
        """
        Record whether the user accepted a suggestion.

        Args:
            action: ``action`` of a suggestion from the latest generation
            accepted: Whether the user accepted it

        Returns:
            Updated counters for the suggestion's type, or None if no
            suggestion with that action was generated last
        """
        with self._lock:
            suggestion = next(
                (s for s in reversed(self._last_suggestions) if s.action == action), None
            )
            if suggestion is None:
                logger.warning(
                    f"Ignoring acceptance for unknown suggestion action '{action}'",
                    extra={"action": action},
                )
                return None

            stats = self._acceptance.setdefault(suggestion.type, ModelSuggestionAcceptance())
            stats.offered += 1
            if accepted:
                stats.accepted += 1
            stats.rate = stats.accepted / stats.offered
            snapshot = stats.model_copy()

        logger.info(
            f"Suggestion '{suggestion.type.value}' {'accepted' if accepted else 'declined'}",
            extra={"suggestion_type": suggestion.type.value, "acceptance_rate": snapshot.rate},
        )
        return snapshot

    def _as_signal(
        self,
        value: ModelWorkflowSignal | ModelTaskCharacteristics | Mapping[str, Any] | None,
    ) -> ModelWorkflowSignal:
        if value is None:
            return ModelWorkflowSignal()
        if isinstance(value, ModelWorkflowSignal):
            return value
        if isinstance(value, ModelTaskCharacteristics):
            return ModelWorkflowSignal(task_characteristics=value)
        if not isinstance(value, Mapping):
            raise invalid_input(
                "Workflow signal must be a mapping or ModelWorkflowSignal",
                received_type=type(value).__name__,
            )
        try:
            return ModelWorkflowSignal.model_validate(dict(value))
        except ValidationError as e:
            fields = sorted({".".join(str(x) for x in err["loc"]) for err in e.errors()})
            raise invalid_input("Malformed workflow signal", fields=fields) from e

    @staticmethod
    def get_next_phase(phase: str | None) -> str | None:
        """Phase after ``phase`` in the standard sequence; None at the end or if unknown."""
        if phase not in PHASE_SEQUENCE:
            return None
        index = PHASE_SEQUENCE.index(phase)
        return PHASE_SEQUENCE[index + 1] if index + 1 < len(PHASE_SEQUENCE) else None

    # =========================================================================
    # Statistics and persistence
    # =========================================================================

    def statistics(self) -> ModelPredictionStatistics:
        with self._lock:
            return ModelPredictionStatistics(
                transition_rows=len(self.transition_model),
                artifact_dependencies=len(self._artifact_dependencies),
                validation_triggers=len(self._validation_triggers),
                bottleneck_patterns=len(self._active_bottlenecks),
                suggestion_acceptance={
                    kind.value: stats.model_copy() for kind, stats in self._acceptance.items()
                },
            )

    def export_models(self) -> dict[str, Any]:
        """Export every learnable or replaceable table as JSON-compatible values."""
        with self._lock:
            return {
                "transition_matrix": self.transition_model.export_rows(),
                "artifact_dependencies": [
                    [phase, {"requires": list(dep.requires), "probability": dep.probability}]
                    for phase, dep in self._artifact_dependencies.items()
                ],
                "validation_triggers": [
                    [event, list(agents)] for event, agents in self._validation_triggers.items()
                ],
                "bottleneck_patterns": list(self._active_bottlenecks),
                "suggestion_acceptance": [
                    [kind.value, stats.model_dump(mode="json")]
                    for kind, stats in self._acceptance.items()
                ],
            }

    def import_models(self, data: Mapping[str, Any]) -> None:
        """
        Replace tables from :meth:`export_models` output.

        Missing keys leave that table untouched. Bottleneck names that are
        not in the catalogue are skipped with a warning.

        Raises:
            OnexError: INVALID_INPUT if the payload is malformed
        """
        if not isinstance(data, Mapping):
            raise invalid_input(
                "Prediction model import must be a mapping",
                received_type=type(data).__name__,
            )

        try:
            dependencies = (
                {
                    str(phase): ArtifactDependency(
                        tuple(str(a) for a in raw["requires"]), float(raw["probability"])
                    )
                    for phase, raw in data["artifact_dependencies"]
                }
                if "artifact_dependencies" in data
                else None
            )
            triggers = (
                {
                    str(event): tuple(str(a) for a in agents)
                    for event, agents in data["validation_triggers"]
                }
                if "validation_triggers" in data
                else None
            )
            acceptance = (
                {
                    EnumSuggestionType(kind): ModelSuggestionAcceptance.model_validate(raw)
                    for kind, raw in data["suggestion_acceptance"]
                }
                if "suggestion_acceptance" in data
                else None
            )
            bottlenecks = (
                [str(name) for name in data["bottleneck_patterns"]]
                if "bottleneck_patterns" in data
                else None
            )

            with self._lock:
                if "transition_matrix" in data:
                    self.transition_model.import_rows(data["transition_matrix"])
                if dependencies is not None:
                    self._artifact_dependencies = dependencies
                if triggers is not None:
                    self._validation_triggers = triggers
                if acceptance is not None:
                    self._acceptance = acceptance
                if bottlenecks is not None:
                    self._active_bottlenecks = self._known_bottlenecks(bottlenecks)
        except (KeyError, TypeError, ValueError) as e:
            raise invalid_input("Malformed prediction model payload", cause=str(e)) from e

        logger.info("Imported prediction models", extra={"tables": sorted(data)})

    def _known_bottlenecks(self, names: list[str]) -> list[str]:
        unknown = [name for name in names if name not in self._catalogue]
        if unknown:
            logger.warning(
                "Skipping unknown bottleneck patterns on import",
                extra={"unknown_patterns": unknown},
            )
        return [name for name in names if name in self._catalogue]


__all__ = [
    "AGENT_ARTIFACT_NEEDS",
    "DEFAULT_ARTIFACT_DEPENDENCIES",
    "DEFAULT_VALIDATION_TRIGGERS",
    "PHASE_PATTERNS",
    "PHASE_SEQUENCE",
    "PredictionEngine",
]
