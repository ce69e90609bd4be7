# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Tests for the capability registry models and YAML loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from omniroute.config.settings import Settings
from omniroute.registry import (
    CapabilityRegistryLoader,
    ModelAgentCapability,
    ModelCapabilityRegistry,
    RegistryLoadError,
    default_registry_path,
    load_capability_registry,
)
from omniroute.routing import SmartRouter

pytestmark = pytest.mark.unit

DEFAULT_AGENTS = [
    "pm",
    "architect",
    "dev",
    "oracle",
    "eval",
    "validator",
    "reflection",
    "domain-researcher",
]


# =============================================================================
# Packaged Registry
# =============================================================================


class TestPackagedRegistry:
    def test_default_path_exists(self) -> None:
        assert default_registry_path().is_file()

    def test_loads_all_default_agents_in_order(
        self, registry: ModelCapabilityRegistry
    ) -> None:
        assert registry.agent_ids == DEFAULT_AGENTS
        assert len(registry) == 8

    def test_lookup_and_membership(self, registry: ModelCapabilityRegistry) -> None:
        oracle = registry.get("oracle")

        assert oracle is not None
        assert "validate" in oracle.keywords
        assert "validation" in oracle.domains
        assert "oracle" in registry
        assert "qa" not in registry
        assert registry.get("qa") is None

    def test_all_returns_records_in_declaration_order(
        self, registry: ModelCapabilityRegistry
    ) -> None:
        assert [cap.agent_id for cap in registry.all()] == DEFAULT_AGENTS

    def test_registry_is_frozen(self, registry: ModelCapabilityRegistry) -> None:
        with pytest.raises(ValidationError):
            registry.version = "2.0.0"


# =============================================================================
# Models
# =============================================================================


class TestRegistryModels:
    def test_keywords_are_lowercased(self) -> None:
        capability = ModelAgentCapability(agent_id="pm", keywords=["PRD", " Story "])
        assert capability.keywords == frozenset({"prd", "story"})

    def test_agent_id_injected_from_key(self) -> None:
        registry = ModelCapabilityRegistry.model_validate(
            {"agents": {"pm": {"keywords": ["prd"]}}}
        )
        assert registry.get("pm").agent_id == "pm"

    def test_key_must_match_agent_id(self) -> None:
        with pytest.raises(ValidationError, match="does not match"):
            ModelCapabilityRegistry.model_validate(
                {"agents": {"pm": {"agent_id": "dev", "keywords": []}}}
            )

    def test_null_lists_become_empty(self) -> None:
        registry = ModelCapabilityRegistry.model_validate(
            {"agents": {"dev": {"capabilities": None, "domains": None, "keywords": None}}}
        )
        dev = registry.get("dev")
        assert dev.capabilities == frozenset()
        assert dev.keywords == frozenset()

    @pytest.mark.parametrize("keywords", ["  ", "", ["prd", "  ", ""]])
    def test_blank_keywords_dropped(self, keywords: object) -> None:
        registry = ModelCapabilityRegistry.model_validate(
            {"agents": {"pm": {"keywords": keywords}}}
        )
        assert "" not in registry.get("pm").keywords

    def test_single_string_keyword(self) -> None:
        capability = ModelAgentCapability(agent_id="pm", keywords=" PRD ")
        assert capability.keywords == frozenset({"prd"})

    def test_blank_keyword_agent_does_not_match_everything(self) -> None:
        registry = ModelCapabilityRegistry.model_validate(
            {"agents": {"pm": {"keywords": "  "}}}
        )
        router = SmartRouter(registry=registry, settings=Settings(_env_file=None))

        assert router.route("hello world zebra").decision.agents == []

    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModelCapabilityRegistry.model_validate(
                {"agents": {"dev": {"skills": ["python"]}}}
            )


# =============================================================================
# Loader
# =============================================================================


class TestCapabilityRegistryLoader:
    def test_load_custom_file(self, tmp_path: Path) -> None:
        path = tmp_path / "agents.yaml"
        path.write_text(
            'version: "2.1.0"\n'
            "agents:\n"
            "  scout:\n"
            "    capabilities: [explore]\n"
            "    keywords: [Explore, Map]\n"
        )

        registry = load_capability_registry(path)

        assert registry.version == "2.1.0"
        assert registry.agent_ids == ["scout"]
        assert registry.get("scout").keywords == frozenset({"explore", "map"})

    def test_accepts_string_path(self, tmp_path: Path) -> None:
        path = tmp_path / "agents.yaml"
        path.write_text("agents: {}\n")
        assert len(load_capability_registry(str(path))) == 0

    def test_missing_file(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.yaml"

        with pytest.raises(RegistryLoadError, match="not found") as exc_info:
            CapabilityRegistryLoader().load(missing)

        assert exc_info.value.path == missing
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("agents: [unclosed\n")

        with pytest.raises(RegistryLoadError, match="Invalid YAML"):
            load_capability_registry(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        with pytest.raises(RegistryLoadError, match="empty"):
            load_capability_registry(path)

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- pm\n- dev\n")

        with pytest.raises(RegistryLoadError, match="must be a YAML mapping"):
            load_capability_registry(path)

    def test_validation_failure_lists_locations(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("agents:\n  pm:\n    unknown_field: 1\n")

        with pytest.raises(RegistryLoadError, match="validation failed") as exc_info:
            load_capability_registry(path)

        assert isinstance(exc_info.value.cause, ValidationError)
        assert "unknown_field" in str(exc_info.value)
