# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Tests for workflow context normalization."""

from __future__ import annotations

import pytest

from omniroute.lib.errors import EnumCoreErrorCode, OnexError
from omniroute.routing import ContextAnalyzer, ModelWorkflowContext

pytestmark = pytest.mark.unit


@pytest.fixture
def analyzer() -> ContextAnalyzer:
    return ContextAnalyzer()


class TestContextDefaults:
    def test_none_yields_defaults(self, analyzer: ContextAnalyzer) -> None:
        context = analyzer.analyze(None)

        assert context.phase == "unknown"
        assert context.project_type == "unknown"
        assert context.recent_activity == []
        assert context.active_agents == []
        assert context.recent_failures == []
        assert context.situation is None
        assert context.next_phase is None
        assert context.last_event is None

    def test_empty_mapping_yields_defaults(self, analyzer: ContextAnalyzer) -> None:
        assert analyzer.analyze({}) == ModelWorkflowContext()

    @pytest.mark.parametrize("phase", [None, "", "   "])
    def test_blank_phase_is_unknown(self, analyzer: ContextAnalyzer, phase: str | None) -> None:
        assert analyzer.analyze({"phase": phase}).phase == "unknown"

    def test_none_lists_become_empty(self, analyzer: ContextAnalyzer) -> None:
        context = analyzer.analyze({"recent_failures": None, "active_agents": None})
        assert context.recent_failures == []
        assert context.active_agents == []


class TestContextNormalization:
    def test_camel_case_keys(self, analyzer: ContextAnalyzer) -> None:
        context = analyzer.analyze(
            {
                "currentPhase": "development",
                "projectType": "web",
                "recentFailures": ["eval-timeout"],
                "nextPhase": "eval_foundation",
                "lastEvent": "code_changed",
            }
        )

        assert context.phase == "development"
        assert context.project_type == "web"
        assert context.recent_failures == ["eval-timeout"]
        assert context.next_phase == "eval_foundation"
        assert context.last_event == "code_changed"

    def test_active_agents_deduplicated(self, analyzer: ContextAnalyzer) -> None:
        context = analyzer.analyze({"active_agents": ["dev", "eval", "dev"]})
        assert context.active_agents == ["dev", "eval"]

    def test_active_agents_set_is_sorted(self, analyzer: ContextAnalyzer) -> None:
        context = analyzer.analyze({"active_agents": {"eval", "dev"}})
        assert context.active_agents == ["dev", "eval"]

    def test_unknown_keys_ignored(self, analyzer: ContextAnalyzer) -> None:
        context = analyzer.analyze({"phase": "discovery", "priority": "high"})
        assert context.phase == "discovery"

    def test_model_passes_through(self, analyzer: ContextAnalyzer) -> None:
        model = ModelWorkflowContext(phase="architecture")
        assert analyzer.analyze(model) is model


class TestContextErrors:
    @pytest.mark.parametrize("bad_context", ["development", ["phase"], 3])
    def test_non_mapping_rejected(self, analyzer: ContextAnalyzer, bad_context: object) -> None:
        with pytest.raises(OnexError) as exc_info:
            analyzer.analyze(bad_context)  # type: ignore[arg-type]

        assert exc_info.value.code == EnumCoreErrorCode.INVALID_INPUT

    def test_malformed_field_rejected(self, analyzer: ContextAnalyzer) -> None:
        with pytest.raises(OnexError) as exc_info:
            analyzer.analyze({"recent_failures": 5})

        assert exc_info.value.code == EnumCoreErrorCode.INVALID_INPUT
        assert exc_info.value.details["fields"]
