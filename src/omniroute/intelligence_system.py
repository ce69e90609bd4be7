# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Intelligence system facade.

Owns one SmartRouter and one PredictionEngine and combines them into a
single request/outcome cycle:

    system = IntelligenceSystem()
    response = system.process_request(
        "Implement the checkout story",
        {"phase": "development", "next_phase": "development", "last_event": "code_changed"},
    )
    system.report_outcome(response.routing.handle, "success")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from omniroute.config.settings import Settings, get_settings
from omniroute.lib.errors import invalid_input
from omniroute.prediction import (
    ModelArtifactPrediction,
    ModelNextAgentPrediction,
    ModelPredictionStatistics,
    ModelSuggestion,
    ModelValidationPrediction,
    ModelWorkflowSignal,
    PredictionEngine,
)
from omniroute.registry.models import ModelCapabilityRegistry
from omniroute.routing import (
    EnumRoutingOutcome,
    ModelRoutingHistoryEntry,
    ModelRoutingResult,
    ModelRoutingStatistics,
    ModelWorkflowContext,
    SmartRouter,
)

logger = logging.getLogger(__name__)


class ModelNextSteps(BaseModel):
    """Predictions derived from a routing decision."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    next_agents: list[ModelNextAgentPrediction] = Field(default_factory=list)
    artifacts: list[ModelArtifactPrediction] = Field(default_factory=list)
    validations: list[ModelValidationPrediction] = Field(default_factory=list)


class ModelIntelligenceResponse(BaseModel):
    """Routing decision plus predicted next steps and ranked suggestions."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    routing: ModelRoutingResult
    predictions: ModelNextSteps
    suggestions: list[ModelSuggestion] = Field(default_factory=list)


class ModelSystemStatistics(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    routing: ModelRoutingStatistics
    prediction: ModelPredictionStatistics


class IntelligenceSystem:
    """Router and prediction engine behind one entry point."""

    def __init__(
        self,
        registry: ModelCapabilityRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.router = SmartRouter(registry=registry, settings=self.settings)
        self.predictor = PredictionEngine(settings=self.settings)
        # handle -> (active agents, phase) at routing time, for transition learning
        self._routing_contexts: dict[int, tuple[list[str], str]] = {}

    def process_request(
        self,
        user_input: str,
        context: ModelWorkflowContext | Mapping[str, Any] | None = None,
        signal: ModelWorkflowSignal | Mapping[str, Any] | None = None,
    ) -> ModelIntelligenceResponse:
        """
        Route a request and predict what comes next.

        Args:
            user_input: User's request text
            context: Workflow context for routing and prediction
            signal: Workflow progress signal for suggestions; when omitted a
                signal carrying only the current phase is used

        Returns:
            ModelIntelligenceResponse
        """
        workflow = self.router.analyze_context(context)
        routing = self.router.route(user_input, workflow)
        predictions = self.predict_next_steps(routing, workflow)

        if signal is None:
            phase = None if workflow.phase == "unknown" else workflow.phase
            signal = ModelWorkflowSignal(current_phase=phase)
        suggestions = self.predictor.generate_suggestions(signal)

        self._remember(routing.handle, workflow)

        logger.info(
            "Processed request",
            extra={
                "handle": routing.handle,
                "agents": routing.decision.agent_ids,
                "next_agents": [p.agent for p in predictions.next_agents],
                "suggestion_count": len(suggestions),
            },
        )
        return ModelIntelligenceResponse(
            routing=routing, predictions=predictions, suggestions=suggestions
        )

    def predict_next_steps(
        self, routing: ModelRoutingResult, workflow: ModelWorkflowContext
    ) -> ModelNextSteps:
        """Next agents for every routed agent, then artifacts and validations."""
        best: dict[str, ModelNextAgentPrediction] = {}
        for agent in routing.decision.agent_ids:
            for prediction in self.predictor.predict_next_agent(agent, workflow):
                existing = best.get(prediction.agent)
                if existing is None or prediction.probability > existing.probability:
                    best[prediction.agent] = prediction
        next_agents = sorted(best.values(), key=lambda p: -p.probability)

        artifacts: list[ModelArtifactPrediction] = []
        if next_agents:
            artifacts = self.predictor.predict_artifacts(workflow.next_phase, next_agents[0].agent)

        validations: list[ModelValidationPrediction] = []
        if workflow.last_event:
            validations = self.predictor.predict_validations(workflow.last_event)

        return ModelNextSteps(next_agents=next_agents, artifacts=artifacts, validations=validations)

    def report_outcome(
        self,
        handle: int,
        outcome: EnumRoutingOutcome | str,
        feedback: Any = None,
    ) -> ModelRoutingHistoryEntry:
        """
        Report a routing outcome.

        On success, the transition from every agent that was active at routing
        time to the routed primary agent is observed by the prediction engine.
        """
        entry = self.router.update_routing_outcome(handle, outcome, feedback)

        remembered = self._routing_contexts.pop(handle, None)
        if entry.outcome == EnumRoutingOutcome.SUCCESS and remembered and entry.agents:
            active_agents, phase = remembered
            primary = entry.agents.split(",")[0]
            scope = None if phase == "unknown" else phase
            for active in active_agents:
                if active != primary:
                    self.predictor.observe_transition(active, primary, scope)

        return entry

    def _remember(self, handle: int, workflow: ModelWorkflowContext) -> None:
        self._routing_contexts[handle] = (list(workflow.active_agents), workflow.phase)
        # Contexts of evicted routings can never be reported
        overflow = len(self._routing_contexts) - self.router.history.capacity
        if overflow > 0:
            for stale in sorted(self._routing_contexts)[:overflow]:
                del self._routing_contexts[stale]

    def statistics(self) -> ModelSystemStatistics:
        return ModelSystemStatistics(
            routing=self.router.statistics(), prediction=self.predictor.statistics()
        )

    def export_data(self) -> dict[str, Any]:
        return {
            "routing": self.router.export_data(),
            "prediction": self.predictor.export_models(),
        }

    def import_data(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise invalid_input(
                "Intelligence data import must be a mapping",
                received_type=type(data).__name__,
            )
        if data.get("routing") is not None:
            self.router.import_data(data["routing"])
        if data.get("prediction") is not None:
            self.predictor.import_models(data["prediction"])


__all__ = [
    "IntelligenceSystem",
    "ModelIntelligenceResponse",
    "ModelNextSteps",
    "ModelSystemStatistics",
]
