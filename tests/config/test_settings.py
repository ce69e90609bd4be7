# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Tests for omniroute.config.settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from omniroute.config.settings import Settings, clear_settings_cache, get_settings

pytestmark = pytest.mark.unit


# =============================================================================
# Defaults
# =============================================================================


class TestSettingsDefaults:
    def test_default_values(self, settings: Settings) -> None:
        assert settings.history_capacity == 100
        assert settings.auto_route_threshold == 0.9
        assert settings.suggest_threshold == 0.7
        assert settings.learning_rate == 0.1
        assert settings.min_probability == 0.1
        assert settings.max_probability == 0.95
        assert settings.registry_path is None

    def test_confidence_weights_keys_and_sum(self, settings: Settings) -> None:
        weights = settings.confidence_weights

        assert list(weights) == [
            "intent_clarity",
            "agent_match_strength",
            "context_relevance",
            "historical_success",
        ]
        assert sum(weights.values()) == pytest.approx(1.0)
        assert weights["intent_clarity"] == 0.40


# =============================================================================
# Validation
# =============================================================================


class TestSettingsValidation:
    def test_weights_must_sum_to_one(self) -> None:
        with pytest.raises(ValidationError, match="sum to 1.0"):
            Settings(_env_file=None, weight_intent_clarity=0.5)

    def test_rebalanced_weights_are_accepted(self) -> None:
        settings = Settings(
            _env_file=None,
            weight_intent_clarity=0.25,
            weight_agent_match=0.25,
            weight_context_relevance=0.25,
            weight_historical_success=0.25,
        )
        assert settings.confidence_weights["historical_success"] == 0.25

    def test_suggest_threshold_cannot_exceed_auto_route(self) -> None:
        with pytest.raises(ValidationError, match="suggest_threshold"):
            Settings(_env_file=None, suggest_threshold=0.95, auto_route_threshold=0.9)

    def test_probability_clamp_must_be_ordered(self) -> None:
        with pytest.raises(ValidationError, match="min_probability"):
            Settings(_env_file=None, min_probability=0.6, max_probability=0.5)

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_history_capacity_must_be_positive(self, capacity: int) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, history_capacity=capacity)

    def test_learning_rate_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, learning_rate=1.0)


# =============================================================================
# Environment
# =============================================================================


class TestSettingsEnvironment:
    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMNIROUTE_HISTORY_CAPACITY", "250")
        monkeypatch.setenv("OMNIROUTE_AUTO_ROUTE_THRESHOLD", "0.85")

        settings = Settings(_env_file=None)

        assert settings.history_capacity == 250
        assert settings.auto_route_threshold == 0.85

    def test_registry_path_from_env(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path
    ) -> None:
        target = tmp_path / "agents.yaml"
        monkeypatch.setenv("OMNIROUTE_REGISTRY_PATH", str(target))

        assert Settings(_env_file=None).registry_path == target

    def test_invalid_env_value_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMNIROUTE_HISTORY_CAPACITY", "lots")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestSettingsSingleton:
    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_clear_settings_cache_builds_new_instance(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        first = get_settings()
        monkeypatch.setenv("OMNIROUTE_HISTORY_CAPACITY", "7")
        clear_settings_cache()

        second = get_settings()

        assert second is not first
        assert second.history_capacity == 7
