# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
End-to-end tests for SmartRouter.

Routes realistic requests through the full pipeline with the packaged
registry and default settings, then checks the learning loop.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from omniroute.config.settings import Settings
from omniroute.lib.errors import EnumCoreErrorCode, OnexError
from omniroute.registry import ModelCapabilityRegistry
from omniroute.routing import (
    EnumCollaborationMode,
    EnumRole,
    EnumRoutingOutcome,
    EnumSuggestionAction,
    ModelWorkflowContext,
    SmartRouter,
)

pytestmark = pytest.mark.unit


# =============================================================================
# Routing Scenarios
# =============================================================================


class TestRoutingScenarios:
    def test_create_prd_in_discovery(self, router: SmartRouter) -> None:
        result = router.route("Create a PRD for checkout flow", {"phase": "discovery"})
        decision = result.decision

        assert decision.agent_ids == ["pm", "oracle"]
        pm, oracle = decision.agents
        assert pm.roles == [EnumRole.PRIMARY, EnumRole.SECONDARY]
        assert pm.final_role == EnumRole.PRIMARY
        assert pm.score == 3.0
        assert pm.reasons[0] == "Create PRD intent"
        assert oracle.roles == [EnumRole.BACKGROUND, EnumRole.SECONDARY]
        assert oracle.final_role == EnumRole.SECONDARY
        assert decision.collaboration_mode == EnumCollaborationMode.SEQUENTIAL
        assert decision.reasoning == (
            "Selected 1 primary agent(s): pm. "
            "Supporting agents: oracle. "
            "Primary reason: Create PRD intent."
        )

        confidence = decision.confidence
        assert confidence.intent_clarity == 1.0
        assert confidence.agent_match_strength == 1.0
        assert confidence.context_relevance == 0.8
        assert confidence.historical_success == 0.5
        assert confidence.overall == pytest.approx(0.92)
        assert decision.suggestion.action == EnumSuggestionAction.AUTO_ROUTE

    def test_validation_request_is_gated(self, router: SmartRouter) -> None:
        decision = router.route("validate the architecture").decision

        assert decision.agent_ids == ["oracle", "validator", "architect"]
        assert decision.primary_agents == ["oracle"]
        assert decision.collaboration_mode == EnumCollaborationMode.GATED
        assert decision.confidence.overall == pytest.approx(0.89)
        assert decision.suggestion.action == EnumSuggestionAction.SUGGEST

    def test_repeated_eval_failures_route_to_reflection(self, router: SmartRouter) -> None:
        decision = router.route(
            "help", {"recent_failures": ["eval-timeout", "eval-assertion"]}
        ).decision

        assert decision.agent_ids == ["reflection", "oracle", "dev"]
        assert decision.primary_agents == ["reflection"]
        assert decision.agents[0].score == 2.0
        assert decision.collaboration_mode == EnumCollaborationMode.SEQUENTIAL
        assert decision.reasoning.endswith("Primary reason: Recent failures detected.")

    @pytest.mark.parametrize("text", ["help", "what now", "summarise progress"])
    def test_supporting_oracle_does_not_gate(self, router: SmartRouter, text: str) -> None:
        decision = router.route(
            text, {"recent_failures": ["eval-timeout", "eval-assertion"]}
        ).decision

        assert decision.primary_agents == ["reflection"]
        assert "oracle" in decision.agent_ids
        assert decision.collaboration_mode == EnumCollaborationMode.SEQUENTIAL

    def test_multiple_primaries_run_in_parallel(self, router: SmartRouter) -> None:
        decision = router.route("create a prd and fix the code").decision

        assert set(decision.primary_agents) == {"pm", "dev"}
        assert decision.collaboration_mode == EnumCollaborationMode.PARALLEL

    def test_top_candidate_promoted_when_no_primary(self, router: SmartRouter) -> None:
        decision = router.route("improve the docs").decision

        assert decision.agent_ids == ["reflection"]
        assert decision.primary_agents == ["reflection"]
        assert decision.agents[0].roles == [EnumRole.SECONDARY]

    def test_unrecognised_request_yields_empty_decision(self, router: SmartRouter) -> None:
        decision = router.route("hello there").decision

        assert decision.agents == []
        assert decision.confidence.agent_match_strength == 0.0
        assert decision.confidence.overall == pytest.approx(0.42)
        assert decision.suggestion.action == EnumSuggestionAction.CONFIRM

    def test_empty_string_routes(self, router: SmartRouter) -> None:
        result = router.route("")
        assert result.decision.suggestion.action == EnumSuggestionAction.CONFIRM


# =============================================================================
# Decision Invariants
# =============================================================================


class TestDecisionInvariants:
    REQUESTS = (
        ("Create a PRD for checkout flow", {"phase": "discovery"}),
        ("validate the architecture", None),
        ("fix the failing test", {"phase": "development", "recent_failures": ["eval-1"]}),
        ("analyze why the build keeps breaking", {"phase": "architecture"}),
        ("plan the roadmap for next quarter", {"phase": "domain_research"}),
        ("improve the docs", None),
    )

    @pytest.mark.parametrize(("text", "context"), REQUESTS)
    def test_decision_shape(self, router: SmartRouter, text: str, context: dict | None) -> None:
        decision = router.route(text, context).decision

        assert len(decision.agent_ids) == len(set(decision.agent_ids))
        assert len(decision.primary_agents) >= 1
        priorities = [c.final_role.priority for c in decision.agents]
        assert priorities == sorted(priorities, reverse=True)
        assert 0.0 <= decision.confidence.overall <= 1.0

    @pytest.mark.parametrize(("text", "context"), REQUESTS)
    def test_deterministic(
        self,
        registry: ModelCapabilityRegistry,
        settings: Settings,
        text: str,
        context: dict | None,
    ) -> None:
        first = SmartRouter(registry=registry, settings=settings).route(text, context)
        second = SmartRouter(registry=registry, settings=settings).route(text, context)

        assert first.decision == second.decision

    def test_model_context_accepted(self, router: SmartRouter) -> None:
        result = router.route(
            "Create a PRD for checkout flow", ModelWorkflowContext(phase="discovery")
        )
        assert result.decision.agent_ids == ["pm", "oracle"]


# =============================================================================
# Learning Loop
# =============================================================================


class TestLearningLoop:
    def test_success_raises_confidence_for_same_agents(self, router: SmartRouter) -> None:
        first = router.route("Create a PRD for checkout flow", {"phase": "discovery"})
        router.update_routing_outcome(first.handle, "success")

        second = router.route("Create a PRD for checkout flow", {"phase": "discovery"})

        assert second.decision.confidence.historical_success == 1.0
        assert second.decision.confidence.overall == pytest.approx(0.97)
        assert router.history.get_pattern("Create a PRD for checkout flow").strength == (
            pytest.approx(0.6)
        )

    def test_failure_lowers_confidence(self, router: SmartRouter) -> None:
        first = router.route("Create a PRD for checkout flow", {"phase": "discovery"})
        router.update_routing_outcome(first.handle, EnumRoutingOutcome.FAILURE)

        second = router.route("Create a PRD for checkout flow", {"phase": "discovery"})

        assert second.decision.confidence.historical_success == 0.0
        assert second.decision.confidence.overall == pytest.approx(0.87)
        assert second.decision.suggestion.action == EnumSuggestionAction.SUGGEST

    def test_history_keeps_newest_hundred(self, router: SmartRouter) -> None:
        for i in range(150):
            router.route(f"fix bug number {i}")

        entries = router.history.entries()

        assert router.statistics().total_routings == 100
        assert entries[0].routing_id == 50
        assert entries[-1].input == "fix bug number 149"

    def test_failure_on_new_input_creates_no_pattern(self, router: SmartRouter) -> None:
        handle = router.route("validate the architecture").handle
        router.update_routing_outcome(handle, "failure")

        assert router.history.patterns() == {}
        assert router.statistics().patterns == 0

    def test_handles_increase(self, router: SmartRouter) -> None:
        handles = [router.route("fix the bug").handle for _ in range(3)]
        assert handles == [0, 1, 2]

    def test_stale_handle_after_eviction(self, registry: ModelCapabilityRegistry) -> None:
        router = SmartRouter(
            registry=registry, settings=Settings(_env_file=None, history_capacity=2)
        )
        stale = router.route("fix the bug").handle
        router.route("fix the bug")
        router.route("fix the bug")

        with pytest.raises(OnexError) as exc_info:
            router.update_routing_outcome(stale, "success")

        assert exc_info.value.code == EnumCoreErrorCode.INDEX_OUT_OF_RANGE

    def test_statistics_and_round_trip(
        self, router: SmartRouter, registry: ModelCapabilityRegistry, settings: Settings
    ) -> None:
        handle = router.route("fix the bug").handle
        router.route("hello there")
        router.update_routing_outcome(handle, "success")

        stats = router.statistics()
        assert stats.total_routings == 2
        assert stats.successful == 1
        assert stats.success_rate == 0.5

        restored = SmartRouter(registry=registry, settings=settings)
        restored.import_data(router.export_data())
        assert restored.statistics() == stats


# =============================================================================
# Construction and Errors
# =============================================================================


class TestRouterSetup:
    def test_registry_loaded_from_settings_path(self, tmp_path: Path) -> None:
        path = tmp_path / "agents.yaml"
        path.write_text("agents:\n  scout:\n    keywords: [scout]\n")
        router = SmartRouter(settings=Settings(_env_file=None, registry_path=path))

        decision = router.route("scout the area").decision

        assert router.registry.agent_ids == ["scout"]
        assert decision.agent_ids == ["scout"]
        assert decision.primary_agents == ["scout"]

    def test_default_registry_when_none_configured(self, settings: Settings) -> None:
        assert len(SmartRouter(settings=settings).registry) == 8

    def test_each_router_owns_its_history(
        self, registry: ModelCapabilityRegistry, settings: Settings
    ) -> None:
        first = SmartRouter(registry=registry, settings=settings)
        second = SmartRouter(registry=registry, settings=settings)
        first.route("fix the bug")

        assert len(first.history) == 1
        assert len(second.history) == 0


class TestRouterErrors:
    @pytest.mark.parametrize("bad_input", [None, 123, {"text": "fix"}])
    def test_non_string_input(self, router: SmartRouter, bad_input: object) -> None:
        with pytest.raises(OnexError) as exc_info:
            router.route(bad_input)  # type: ignore[arg-type]

        assert exc_info.value.code == EnumCoreErrorCode.INVALID_INPUT
        assert len(router.history) == 0

    def test_malformed_context(self, router: SmartRouter) -> None:
        with pytest.raises(OnexError) as exc_info:
            router.route("fix the bug", "development")  # type: ignore[arg-type]
        assert exc_info.value.code == EnumCoreErrorCode.INVALID_INPUT

    def test_invalid_outcome(self, router: SmartRouter) -> None:
        handle = router.route("fix the bug").handle
        with pytest.raises(OnexError) as exc_info:
            router.update_routing_outcome(handle, "maybe")
        assert exc_info.value.code == EnumCoreErrorCode.INVALID_INPUT
